"""Port management router.

Endpoints:
    GET    /api/ports/               List ports (by name)
    GET    /api/ports/search?q=      Match name / country / UNLOC (max 20)
    POST   /api/ports/               Create port
    POST   /api/ports/bulk           Upload ports from a JSON / CSV / Excel file
    POST   /api/ports/bulk/rows      Create ports from a JSON array body
    GET    /api/ports/{id}           Port detail
    PUT    /api/ports/{id}           Replace port fields
    DELETE /api/ports/{id}           Delete port (refused while routes use it)
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, File, Query, UploadFile
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from carrier_lookup.auth.deps import DemoUser, require_admin
from carrier_lookup.config import settings
from carrier_lookup.database import get_db
from carrier_lookup.middleware.exceptions import (
    DuplicateRecordError,
    MalformedFileError,
    ReferentialGuardError,
    ResourceNotFoundError,
)
from carrier_lookup.models.port import Port
from carrier_lookup.models.service import ServiceRoute
from carrier_lookup.schemas.common import MessageOut
from carrier_lookup.schemas.port import PortBulkResult, PortCreate, PortOut, PortUpdate
from carrier_lookup.services.port_import import PORT_FIELDS, PortBulkReport, bulk_create_ports
from carrier_lookup.utils.file_import import canonicalize, parse_rows

router = APIRouter()

SEARCH_LIMIT = 20


# ── Helpers ──────────────────────────────────────────────────

async def _get_port(db: AsyncSession, port_id: str) -> Port:
    result = await db.execute(select(Port).where(Port.id == port_id))
    port = result.scalar_one_or_none()
    if not port:
        raise ResourceNotFoundError("Port", port_id)
    return port


async def _ensure_unloc_free(db: AsyncSession, unloc: str, exclude_id: str | None = None) -> None:
    query = select(Port.id).where(Port.unloc == unloc)
    if exclude_id:
        query = query.where(Port.id != exclude_id)
    if (await db.execute(query)).first():
        raise DuplicateRecordError("Port with this UNLOC already exists")


def _bulk_result(report: PortBulkReport) -> PortBulkResult:
    return PortBulkResult(
        total_processed=report.total_processed,
        success_count=report.success_count,
        duplicate_count=report.duplicate_count,
        error_count=report.error_count,
        errors=report.errors,
    )


# ── Endpoints ────────────────────────────────────────────────

@router.get("/", response_model=list[PortOut])
async def list_ports(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Port).order_by(Port.name))
    return [PortOut.model_validate(p) for p in result.scalars().all()]


@router.get("/search", response_model=list[PortOut])
async def search_ports(
    q: str = Query("", description="Part of a port name, country, or UNLOC"),
    db: AsyncSession = Depends(get_db),
):
    """Autocomplete search; a blank query returns nothing."""
    term = q.strip()
    if not term:
        return []

    pattern = f"%{term}%"
    result = await db.execute(
        select(Port)
        .where(or_(
            Port.name.ilike(pattern),
            Port.country.ilike(pattern),
            Port.unloc.ilike(pattern),
        ))
        .order_by(Port.name)
        .limit(SEARCH_LIMIT)
    )
    return [PortOut.model_validate(p) for p in result.scalars().all()]


@router.post("/", response_model=PortOut, status_code=201)
async def create_port(
    body: PortCreate,
    db: AsyncSession = Depends(get_db),
    _user: DemoUser = Depends(require_admin),
):
    await _ensure_unloc_free(db, body.unloc)

    port = Port(**body.model_dump())
    db.add(port)
    await db.flush()
    return PortOut.model_validate(port)


@router.post("/bulk", response_model=PortBulkResult)
async def upload_ports(
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    _user: DemoUser = Depends(require_admin),
):
    """Create ports from an uploaded file; existing UNLOCs are skipped."""
    content = await file.read()
    if len(content) > settings.max_upload_bytes:
        raise MalformedFileError("Uploaded file is too large")

    rows = parse_rows(
        content,
        PORT_FIELDS,
        filename=file.filename,
        content_type=file.content_type,
    )
    report = await bulk_create_ports(db, rows)
    return _bulk_result(report)


@router.post("/bulk/rows", response_model=PortBulkResult)
async def create_ports_from_rows(
    rows: list[dict[str, Any]] = Body(...),
    db: AsyncSession = Depends(get_db),
    _user: DemoUser = Depends(require_admin),
):
    """Same as /bulk, for clients that already hold the rows as JSON."""
    report = await bulk_create_ports(db, canonicalize(rows, PORT_FIELDS))
    return _bulk_result(report)


@router.get("/{port_id}", response_model=PortOut)
async def get_port(port_id: str, db: AsyncSession = Depends(get_db)):
    return PortOut.model_validate(await _get_port(db, port_id))


@router.put("/{port_id}", response_model=PortOut)
async def update_port(
    port_id: str,
    body: PortUpdate,
    db: AsyncSession = Depends(get_db),
    _user: DemoUser = Depends(require_admin),
):
    """Replace all fields of a port."""
    port = await _get_port(db, port_id)
    if body.unloc != port.unloc:
        await _ensure_unloc_free(db, body.unloc, exclude_id=port_id)

    for key, value in body.model_dump().items():
        setattr(port, key, value)
    await db.flush()
    return PortOut.model_validate(port)


@router.delete("/{port_id}", response_model=MessageOut)
async def delete_port(
    port_id: str,
    db: AsyncSession = Depends(get_db),
    _user: DemoUser = Depends(require_admin),
):
    port = await _get_port(db, port_id)

    in_use = await db.execute(
        select(ServiceRoute.id)
        .where(or_(ServiceRoute.pol_id == port_id, ServiceRoute.pod_id == port_id))
        .limit(1)
    )
    if in_use.first():
        raise ReferentialGuardError(
            "Cannot delete port: it is used in one or more service routes",
            error_code="PORT_IN_USE",
        )

    await db.delete(port)
    await db.flush()
    return MessageOut(message="Port deleted successfully")
