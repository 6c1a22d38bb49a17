"""Service bulk import: group uploaded rows into services, validate, commit.

Two steps, mirroring the upload UI:

  1. validate_service_rows()  — pure function over (rows, carrier names,
     port names).  Groups rows by service name and returns a report with
     errors, warnings, and the nested services that would be created.
  2. commit_parsed_services() — creates services and routes.  Every
     service is its own unit of work: it is committed (or rolled back) on
     its own, so one bad service never blocks the rest of the batch.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from carrier_lookup.models.service import Service, ServiceRoute
from carrier_lookup.schemas.service_import import (
    CreationResult,
    CreationSummary,
    ParsedRoute,
    ParsedService,
)
from carrier_lookup.services.lookup import (
    NameLookup,
    load_carrier_lookup,
    load_port_lookup,
)
from carrier_lookup.utils.file_import import FieldDef

logger = logging.getLogger("carrier_lookup.import")

TRANSIT_TIME_PLACEHOLDER = "TBD"

# Column widths of services.name and service_routes.transit_time
SERVICE_NAME_MAX_LENGTH = 255
TRANSIT_TIME_MAX_LENGTH = 100

# First data row in a spreadsheet is row 2 (row 1 is the header)
FIRST_DATA_ROW = 2

SERVICE_FIELDS = [
    FieldDef("service_name", ("Service Name", "serviceName", "name", "service"), "Service Name"),
    FieldDef("carrier", ("Carrier", "carrierName", "carrier name"), "Carrier"),
    FieldDef("pol", ("POL", "port of loading", "portOfLoading"), "POL"),
    FieldDef("pod", ("POD", "port of discharge", "portOfDischarge"), "POD"),
    FieldDef("transit_time", ("Transit Time", "transitTime"), "Transit Time"),
    FieldDef("partner_services", ("Partner Services", "partnerServices"), "Partner Services"),
    FieldDef("route_name", ("Route Name", "routeName"), "Route Name"),
]

SERVICE_SAMPLE_ROWS = [
    {
        "service_name": "Asia-Europe Express",
        "carrier": "Maersk",
        "pol": "Shanghai",
        "pod": "Rotterdam",
        "transit_time": "30 days",
        "partner_services": "Rail connections throughout Europe",
        "route_name": "Main Route",
    },
    {
        "service_name": "Asia-Europe Express",
        "carrier": "Maersk",
        "pol": "Ningbo",
        "pod": "Hamburg",
        "transit_time": "28 days",
        "partner_services": "Rail connections throughout Europe",
        "route_name": "Alternative Route",
    },
    {
        "service_name": "Trans-Pacific Service",
        "carrier": "MSC",
        "pol": "Qingdao",
        "pod": "Los Angeles",
        "transit_time": "18 days",
        "partner_services": "Intermodal rail services",
        "route_name": "Direct Route",
    },
]

SERVICE_INSTRUCTIONS = [
    ("Service Name", "Yes", "Name of the service; rows sharing a name form one service"),
    ("Carrier", "Yes", "Name of the carrier (must exist in database)"),
    ("POL", "Yes", "Port of Loading name (must exist in database)"),
    ("POD", "Yes", "Port of Discharge name (must exist in database)"),
    ("Transit Time", "No", 'Transit time label (e.g. "15 days", "3 weeks"); defaults to TBD'),
    ("Partner Services", "No", "Additional services or partners (read from the first row)"),
    ("Route Name", "No", "Optional route name for multi-route services"),
]


# ── Validation ──────────────────────────────────────────────


@dataclass
class RowGroup:
    service_name: str
    rows: list[tuple[int, dict[str, str]]] = field(default_factory=list)


@dataclass
class ValidationReport:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    parsed_services: list[ParsedService] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def total_routes(self) -> int:
        return sum(len(s.routes) for s in self.parsed_services)


def group_rows_by_service(rows: list[dict[str, str]]) -> list[RowGroup]:
    """Partition rows by exact service name, keeping first-seen order.

    Each row is paired with its spreadsheet row number for error messages.
    """
    groups: dict[str, RowGroup] = {}
    for index, row in enumerate(rows):
        name = row.get("service_name", "")
        group = groups.get(name)
        if group is None:
            group = groups[name] = RowGroup(service_name=name)
        group.rows.append((index + FIRST_DATA_ROW, row))
    return list(groups.values())


def _validate_group(
    group: RowGroup,
    carriers: NameLookup,
    ports: NameLookup,
    report: ValidationReport,
) -> None:
    service_name = group.service_name
    first_row_num, first_row = group.rows[0]

    if not service_name.strip():
        report.errors.append(f"Row {first_row_num}: Service name is required")
        return
    if len(service_name.strip()) > SERVICE_NAME_MAX_LENGTH:
        report.errors.append(
            f'Service "{service_name}": Service name must be at most '
            f'{SERVICE_NAME_MAX_LENGTH} characters'
        )
        return

    carrier_name = first_row.get("carrier", "")
    if not carrier_name:
        report.errors.append(f'Service "{service_name}": Carrier is required')
        return
    if carrier_name not in carriers:
        report.errors.append(
            f'Service "{service_name}": Carrier "{carrier_name}" not found in database'
        )
        return

    parsed = ParsedService(
        name=service_name.strip(),
        carrier_name=carrier_name,
        partner_services=first_row.get("partner_services", ""),
        routes=[],
    )

    for row_num, row in group.rows:
        pol = row.get("pol", "")
        pod = row.get("pod", "")
        if not pol or not pod:
            report.errors.append(
                f'Service "{service_name}": POL and POD are required for each route (row {row_num})'
            )
            continue
        unknown = next((p for p in (pol, pod) if p not in ports), None)
        if unknown is not None:
            report.errors.append(
                f'Service "{service_name}": Port "{unknown}" not found in database'
            )
            continue

        transit_time = row.get("transit_time", "")
        if not transit_time:
            report.warnings.append(
                f'Service "{service_name}": Transit time is recommended (row {row_num})'
            )
            transit_time = TRANSIT_TIME_PLACEHOLDER
        elif len(transit_time) > TRANSIT_TIME_MAX_LENGTH:
            report.errors.append(
                f'Service "{service_name}": Transit time must be at most '
                f'{TRANSIT_TIME_MAX_LENGTH} characters (row {row_num})'
            )
            continue

        parsed.routes.append(ParsedRoute(
            route_name=row.get("route_name", ""),
            pol=pol,
            pod=pod,
            transit_time=transit_time,
        ))

    if not parsed.routes:
        report.errors.append(f'Service "{service_name}": No valid routes found')
        return

    report.parsed_services.append(parsed)


def validate_service_rows(
    rows: list[dict[str, str]],
    carrier_names: Iterable[str],
    port_names: Iterable[str],
) -> ValidationReport:
    """Group rows into services and check every reference.

    Group-level problems (no name, missing or unknown carrier, no usable
    routes) drop the whole service.  Row-level problems (missing or unknown
    POL/POD) drop only that row.  A missing transit time is a warning and
    the route keeps the "TBD" placeholder.
    """
    carriers = NameLookup.from_names(carrier_names)
    ports = NameLookup.from_names(port_names)
    report = ValidationReport()

    for group in group_rows_by_service(rows):
        _validate_group(group, carriers, ports, report)

    return report


async def validate_service_upload(
    db: AsyncSession,
    rows: list[dict[str, str]],
) -> ValidationReport:
    """validate_service_rows against the current carrier and port tables."""
    carriers = await load_carrier_lookup(db)
    ports = await load_port_lookup(db)
    carrier_names = [row.name for row in carriers.values()]
    port_names = [row.name for row in ports.values()]

    report = validate_service_rows(rows, carrier_names, port_names)
    logger.info(
        "Validated service upload: %d rows, %d services, %d errors, %d warnings",
        len(rows),
        len(report.parsed_services),
        len(report.errors),
        len(report.warnings),
    )
    return report


# ── Commit ──────────────────────────────────────────────────


async def _service_exists(db: AsyncSession, carrier_id: str, name: str) -> bool:
    result = await db.execute(
        select(Service.id).where(
            Service.carrier_id == carrier_id,
            func.lower(Service.name) == name.strip().lower(),
        ).limit(1)
    )
    return result.first() is not None


async def _create_single_service(
    db: AsyncSession,
    parsed: ParsedService,
    carriers: NameLookup,
    ports: NameLookup,
) -> CreationResult:
    result = CreationResult(success=False, service_name=parsed.name)

    name = (parsed.name or "").strip()
    carrier_name = (parsed.carrier_name or "").strip()
    if not name or not carrier_name:
        result.errors.append("Service name and carrier are required")
        return result
    if len(name) > SERVICE_NAME_MAX_LENGTH:
        result.errors.append(
            f"Service name must be at most {SERVICE_NAME_MAX_LENGTH} characters"
        )
        return result
    if not parsed.routes:
        result.errors.append("At least one route is required")
        return result

    carrier = carriers.get(carrier_name)
    if carrier is None:
        result.errors.append(f'Carrier "{carrier_name}" not found')
        return result

    if await _service_exists(db, carrier.id, name):
        result.errors.append(
            f'Service "{name}" already exists for carrier "{carrier_name}"'
        )
        return result

    service = Service(
        name=name,
        carrier_id=carrier.id,
        partner_services=(parsed.partner_services or "").strip() or None,
        routes=[],
    )
    db.add(service)
    await db.flush()

    for route in parsed.routes:
        if not (route.pol or "").strip() or not (route.pod or "").strip():
            result.errors.append("POL and POD are required for each route")
            continue
        transit_time = (route.transit_time or "").strip() or TRANSIT_TIME_PLACEHOLDER
        if len(transit_time) > TRANSIT_TIME_MAX_LENGTH:
            result.errors.append(
                f'Transit time must be at most {TRANSIT_TIME_MAX_LENGTH} characters '
                f'(route {route.pol} → {route.pod})'
            )
            continue

        pol = ports.get(route.pol)
        pod = ports.get(route.pod)
        if pol is None:
            result.errors.append(f'Port "{route.pol}" not found')
            continue
        if pod is None:
            result.errors.append(f'Port "{route.pod}" not found')
            continue
        service.routes.append(ServiceRoute(
            pol_id=pol.id,
            pod_id=pod.id,
            transit_time=transit_time,
            position=len(service.routes),
        ))
    await db.flush()

    if not service.routes:
        # No route-less service survives the commit
        await db.delete(service)
        await db.flush()
        result.errors.append("No valid routes were created for the service")
        return result

    result.success = True
    result.service_id = service.id
    return result


async def commit_parsed_services(
    db: AsyncSession,
    services: list[ParsedService],
) -> tuple[CreationSummary, list[CreationResult]]:
    """Create each parsed service as an independent unit of work.

    Carrier and port names are re-resolved here rather than trusted from
    the validation step, since the reference tables may have changed in
    between.  A failure is recorded on that service's result and the loop
    moves on; services committed earlier in the batch stay committed.
    """
    carriers = await load_carrier_lookup(db)
    ports = await load_port_lookup(db)

    results: list[CreationResult] = []
    for parsed in services:
        try:
            result = await _create_single_service(db, parsed, carriers, ports)
            await db.commit()
        except SQLAlchemyError:
            logger.exception("Failed to create service %r", parsed.name)
            await db.rollback()
            result = CreationResult(
                success=False,
                service_name=parsed.name,
                errors=["Failed to create service due to database error"],
            )
        results.append(result)

    created = sum(1 for r in results if r.success)
    summary = CreationSummary(
        total_services=len(services),
        created_services=created,
        error_services=len(results) - created,
    )
    logger.info(
        "Service import committed: %d created, %d failed",
        summary.created_services,
        summary.error_services,
    )
    return summary, results
