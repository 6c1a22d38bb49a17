"""Service management router.

Endpoints:
    GET    /api/services/                   List services (newest first)
    GET    /api/services/search?pol=&pod=   Services with a POL → POD route
    POST   /api/services/                   Create service with its routes
    GET    /api/services/{id}               Detail with carrier, routes, ports
    PUT    /api/services/{id}               Replace fields and the whole route set
    DELETE /api/services/{id}               Delete service and its routes
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from carrier_lookup.auth.deps import DemoUser, require_admin
from carrier_lookup.database import get_db
from carrier_lookup.middleware.exceptions import BusinessLogicError, ResourceNotFoundError
from carrier_lookup.models.carrier import Carrier
from carrier_lookup.models.port import Port
from carrier_lookup.models.service import Service, ServiceRoute
from carrier_lookup.schemas.common import MessageOut
from carrier_lookup.schemas.service import RouteIn, ServiceCreate, ServiceOut, ServiceUpdate

router = APIRouter()


# ── Helpers ──────────────────────────────────────────────────

def _service_query():
    """Services with carrier, routes and both route ports, always reloaded."""
    return (
        select(Service)
        .options(
            selectinload(Service.carrier),
            selectinload(Service.routes).selectinload(ServiceRoute.pol_port),
            selectinload(Service.routes).selectinload(ServiceRoute.pod_port),
        )
        .execution_options(populate_existing=True)
    )


async def _get_service(db: AsyncSession, service_id: str) -> Service:
    result = await db.execute(_service_query().where(Service.id == service_id))
    service = result.scalar_one_or_none()
    if not service:
        raise ResourceNotFoundError("Service", service_id)
    return service


async def _build_routes(db: AsyncSession, routes: list[RouteIn]) -> list[ServiceRoute]:
    """Check every referenced port exists and build route rows in order."""
    port_ids = {r.pol_id for r in routes} | {r.pod_id for r in routes}
    result = await db.execute(select(Port.id).where(Port.id.in_(port_ids)))
    known = set(result.scalars().all())
    if known != port_ids:
        raise BusinessLogicError("Invalid POL or POD port ID", error_code="UNKNOWN_PORT")

    return [
        ServiceRoute(
            pol_id=r.pol_id,
            pod_id=r.pod_id,
            transit_time=r.transit_time,
            position=i,
        )
        for i, r in enumerate(routes)
    ]


async def _get_carrier_for(db: AsyncSession, carrier_id: str) -> Carrier:
    carrier = await db.get(Carrier, carrier_id)
    if carrier is None:
        raise BusinessLogicError("Invalid carrier ID", error_code="UNKNOWN_CARRIER")
    return carrier


async def _ports_matching(db: AsyncSession, term: str) -> list[str]:
    pattern = f"%{term}%"
    result = await db.execute(
        select(Port.id).where(or_(
            Port.name.ilike(pattern),
            Port.unloc.ilike(pattern),
            Port.country.ilike(pattern),
        ))
    )
    return list(result.scalars().all())


# ── Endpoints ────────────────────────────────────────────────

@router.get("/", response_model=list[ServiceOut])
async def list_services(db: AsyncSession = Depends(get_db)):
    result = await db.execute(_service_query().order_by(Service.created_at.desc()))
    return [ServiceOut.model_validate(s) for s in result.scalars().all()]


@router.get("/search", response_model=list[ServiceOut])
async def search_services(
    pol: str = Query(..., min_length=1, description="Port of loading: name, UNLOC, or country"),
    pod: str = Query(..., min_length=1, description="Port of discharge: name, UNLOC, or country"),
    db: AsyncSession = Depends(get_db),
):
    """Find services with at least one route from a matching POL to a matching POD."""
    pol_ids = await _ports_matching(db, pol.strip())
    pod_ids = await _ports_matching(db, pod.strip())
    if not pol_ids or not pod_ids:
        return []

    result = await db.execute(
        _service_query()
        .where(Service.routes.any(
            (ServiceRoute.pol_id.in_(pol_ids)) & (ServiceRoute.pod_id.in_(pod_ids))
        ))
        .order_by(Service.created_at.desc())
    )
    return [ServiceOut.model_validate(s) for s in result.scalars().all()]


@router.post("/", response_model=ServiceOut, status_code=201)
async def create_service(
    body: ServiceCreate,
    db: AsyncSession = Depends(get_db),
    _user: DemoUser = Depends(require_admin),
):
    carrier = await _get_carrier_for(db, body.carrier_id)
    routes = await _build_routes(db, body.routes)

    service = Service(
        name=body.name,
        partner_services=body.partner_services,
        carrier=carrier,
        routes=routes,
    )
    db.add(service)
    await db.flush()
    return ServiceOut.model_validate(await _get_service(db, service.id))


@router.get("/{service_id}", response_model=ServiceOut)
async def get_service(service_id: str, db: AsyncSession = Depends(get_db)):
    return ServiceOut.model_validate(await _get_service(db, service_id))


@router.put("/{service_id}", response_model=ServiceOut)
async def update_service(
    service_id: str,
    body: ServiceUpdate,
    db: AsyncSession = Depends(get_db),
    _user: DemoUser = Depends(require_admin),
):
    """Full replace: existing routes are deleted and the submitted set created."""
    service = await _get_service(db, service_id)
    carrier = await _get_carrier_for(db, body.carrier_id)
    routes = await _build_routes(db, body.routes)

    service.name = body.name
    service.partner_services = body.partner_services
    service.carrier = carrier
    service.routes = routes  # delete-orphan removes the old rows
    await db.flush()
    return ServiceOut.model_validate(await _get_service(db, service_id))


@router.delete("/{service_id}", response_model=MessageOut)
async def delete_service(
    service_id: str,
    db: AsyncSession = Depends(get_db),
    _user: DemoUser = Depends(require_admin),
):
    service = await _get_service(db, service_id)
    await db.delete(service)
    await db.flush()
    return MessageOut(message="Service deleted successfully")
