"""Management CLI.

Usage:
    python -m carrier_lookup.cli create-tables   # Create all tables (dev / demo, no Alembic)
    python -m carrier_lookup.cli seed            # Insert demo carriers, ports and services
    python -m carrier_lookup.cli list-carriers   # Show carriers with service counts
"""

import sys

from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import Session

from carrier_lookup.config import settings
from carrier_lookup.database import Base
from carrier_lookup.models import Carrier, CarrierType, Port, Service, ServiceRoute

SEED_CARRIERS = [
    {
        "name": "Maersk",
        "description": "Danish integrated container logistics company",
        "carrier_type": CarrierType.MLO.value,
    },
    {
        "name": "MSC",
        "description": "Mediterranean Shipping Company",
        "carrier_type": CarrierType.MLO.value,
    },
    {
        "name": "COSCO",
        "description": "China COSCO Shipping",
        "carrier_type": CarrierType.MLO.value,
    },
]

SEED_PORTS = [
    {"name": "Shanghai", "country": "China", "unloc": "CNSHA", "latitude": 31.23, "longitude": 121.47},
    {"name": "Ningbo", "country": "China", "unloc": "CNNGB", "latitude": 29.87, "longitude": 121.55},
    {"name": "Qingdao", "country": "China", "unloc": "CNTAO", "latitude": 36.07, "longitude": 120.38},
    {"name": "Singapore", "country": "Singapore", "unloc": "SGSIN", "latitude": 1.26, "longitude": 103.84},
    {"name": "Rotterdam", "country": "Netherlands", "unloc": "NLRTM", "latitude": 51.95, "longitude": 4.14},
    {"name": "Hamburg", "country": "Germany", "unloc": "DEHAM", "latitude": 53.55, "longitude": 9.99},
    {"name": "Los Angeles", "country": "United States", "unloc": "USLAX", "latitude": 33.74, "longitude": -118.26},
]

# (service, carrier, partner services, [(pol unloc, pod unloc, transit time)])
SEED_SERVICES = [
    ("Asia-Europe Express", "Maersk", "MSC", [
        ("CNSHA", "NLRTM", "30 days"),
        ("CNNGB", "DEHAM", "28 days"),
    ]),
    ("Trans-Pacific Service", "MSC", None, [
        ("CNTAO", "USLAX", "18 days"),
    ]),
    ("Far East Loop", "COSCO", None, [
        ("CNSHA", "SGSIN", "6 days"),
        ("SGSIN", "NLRTM", "22 days"),
    ]),
]


def _sync_engine():
    return create_engine(settings.database_url_sync)


def create_tables():
    Base.metadata.create_all(_sync_engine())
    print("Tables created.")


def seed():
    """Insert the demo data; rows that already exist are left alone."""
    with Session(_sync_engine()) as session:
        carriers = {c.name: c for c in session.scalars(select(Carrier))}
        for data in SEED_CARRIERS:
            if data["name"] not in carriers:
                carrier = Carrier(**data)
                session.add(carrier)
                carriers[carrier.name] = carrier

        ports = {p.unloc: p for p in session.scalars(select(Port))}
        for data in SEED_PORTS:
            if data["unloc"] not in ports:
                port = Port(**data)
                session.add(port)
                ports[port.unloc] = port
        session.flush()

        created = 0
        for name, carrier_name, partners, legs in SEED_SERVICES:
            carrier = carriers[carrier_name]
            if any(s.name == name for s in carrier.services):
                continue
            session.add(Service(
                name=name,
                partner_services=partners,
                carrier=carrier,
                routes=[
                    ServiceRoute(
                        pol_id=ports[pol].id,
                        pod_id=ports[pod].id,
                        transit_time=transit,
                        position=i,
                    )
                    for i, (pol, pod, transit) in enumerate(legs)
                ],
            ))
            created += 1

        session.commit()
    print(f"Seeded {len(SEED_CARRIERS)} carriers, {len(SEED_PORTS)} ports, {created} new service(s).")


def list_carriers():
    with Session(_sync_engine()) as session:
        rows = session.execute(
            select(Carrier.name, Carrier.carrier_type, func.count(Service.id))
            .outerjoin(Service, Service.carrier_id == Carrier.id)
            .group_by(Carrier.id, Carrier.name, Carrier.carrier_type)
            .order_by(Carrier.name)
        ).all()
    for name, carrier_type, count in rows:
        print(f"  {name}  [{carrier_type or '-'}]  ({count} services)")
    print(f"\n{len(rows)} carrier(s)")


if __name__ == "__main__":
    cmd = sys.argv[1] if len(sys.argv) > 1 else ""
    if cmd == "create-tables":
        create_tables()
    elif cmd == "seed":
        seed()
    elif cmd == "list-carriers":
        list_carriers()
    else:
        print("Usage: python -m carrier_lookup.cli [create-tables|seed|list-carriers]")
