"""Carrier management router.

Endpoints:
    GET    /api/carriers/          List carriers (by name) with their services
    POST   /api/carriers/          Create carrier
    GET    /api/carriers/{id}      Detail with services and routes
    PUT    /api/carriers/{id}      Replace carrier fields
    DELETE /api/carriers/{id}      Delete carrier, its services and routes
"""

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from carrier_lookup.auth.deps import DemoUser, require_admin
from carrier_lookup.database import get_db
from carrier_lookup.middleware.exceptions import DuplicateRecordError, ResourceNotFoundError
from carrier_lookup.models.carrier import Carrier
from carrier_lookup.models.service import Service, ServiceRoute
from carrier_lookup.schemas.carrier import CarrierCreate, CarrierDetail, CarrierOut, CarrierUpdate
from carrier_lookup.schemas.common import MessageOut

router = APIRouter()


# ── Helpers ──────────────────────────────────────────────────

async def _get_carrier(db: AsyncSession, carrier_id: str) -> Carrier:
    """Load a carrier with services, routes and route ports (fresh from the DB)."""
    result = await db.execute(
        select(Carrier)
        .where(Carrier.id == carrier_id)
        .options(
            selectinload(Carrier.services)
            .selectinload(Service.routes)
            .selectinload(ServiceRoute.pol_port),
            selectinload(Carrier.services)
            .selectinload(Service.routes)
            .selectinload(ServiceRoute.pod_port),
        )
        .execution_options(populate_existing=True)
    )
    carrier = result.scalar_one_or_none()
    if not carrier:
        raise ResourceNotFoundError("Carrier", carrier_id)
    return carrier


async def _ensure_name_free(db: AsyncSession, name: str, exclude_id: str | None = None) -> None:
    query = select(Carrier.id).where(Carrier.name == name)
    if exclude_id:
        query = query.where(Carrier.id != exclude_id)
    if (await db.execute(query)).first():
        raise DuplicateRecordError("Carrier name already exists")


# ── Endpoints ────────────────────────────────────────────────

@router.get("/", response_model=list[CarrierOut])
async def list_carriers(db: AsyncSession = Depends(get_db)):
    """List all carriers alphabetically, each with its services."""
    result = await db.execute(
        select(Carrier)
        .options(selectinload(Carrier.services))
        .order_by(Carrier.name)
        .execution_options(populate_existing=True)
    )
    return [CarrierOut.model_validate(c) for c in result.scalars().all()]


@router.post("/", response_model=CarrierDetail, status_code=201)
async def create_carrier(
    body: CarrierCreate,
    db: AsyncSession = Depends(get_db),
    _user: DemoUser = Depends(require_admin),
):
    await _ensure_name_free(db, body.name)

    carrier = Carrier(**body.model_dump(), services=[])
    db.add(carrier)
    await db.flush()
    return CarrierDetail.model_validate(carrier)


@router.get("/{carrier_id}", response_model=CarrierDetail)
async def get_carrier(carrier_id: str, db: AsyncSession = Depends(get_db)):
    carrier = await _get_carrier(db, carrier_id)
    return CarrierDetail.model_validate(carrier)


@router.put("/{carrier_id}", response_model=CarrierDetail)
async def update_carrier(
    carrier_id: str,
    body: CarrierUpdate,
    db: AsyncSession = Depends(get_db),
    _user: DemoUser = Depends(require_admin),
):
    """Replace all scalar fields of a carrier."""
    carrier = await _get_carrier(db, carrier_id)
    if body.name != carrier.name:
        await _ensure_name_free(db, body.name, exclude_id=carrier_id)

    for key, value in body.model_dump().items():
        setattr(carrier, key, value)
    await db.flush()
    return CarrierDetail.model_validate(await _get_carrier(db, carrier_id))


@router.delete("/{carrier_id}", response_model=MessageOut)
async def delete_carrier(
    carrier_id: str,
    db: AsyncSession = Depends(get_db),
    _user: DemoUser = Depends(require_admin),
):
    """Delete a carrier; its services and their routes go with it."""
    carrier = await _get_carrier(db, carrier_id)
    await db.delete(carrier)
    await db.flush()
    return MessageOut(message="Carrier deleted successfully")
