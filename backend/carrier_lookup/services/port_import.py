"""Bulk port upload: create ports from rows, skipping UNLOCs that already exist."""

import logging
from dataclasses import dataclass, field

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from carrier_lookup.models.port import Port
from carrier_lookup.schemas.port import PortCreate
from carrier_lookup.utils.file_import import FieldDef

logger = logging.getLogger("carrier_lookup.import")

PORT_FIELDS = [
    FieldDef("name", ("port name", "portName"), "name"),
    FieldDef("country", ("country name",), "country"),
    FieldDef("unloc", ("unlocode", "un/locode", "locode"), "unloc"),
    FieldDef("code", ("port code", "portCode"), "code"),
    FieldDef("latitude", ("lat",), "latitude"),
    FieldDef("longitude", ("lng", "lon", "long"), "longitude"),
]


@dataclass
class PortBulkReport:
    total_processed: int = 0
    success_count: int = 0
    duplicate_count: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return len(self.errors)


def _coerce_coordinate(raw: str, low: float, high: float) -> float | None:
    if not raw:
        return None
    value = float(raw)
    if not low <= value <= high:
        raise ValueError(raw)
    return value


async def bulk_create_ports(db: AsyncSession, rows: list[dict[str, str]]) -> PortBulkReport:
    """Create one port per row.

    Rows whose UNLOC already exists (in the table, or earlier in the same
    upload, compared case-insensitively) are counted as duplicates and
    skipped.  Rows with missing required fields, unreadable coordinates,
    or values that do not fit the port columns are reported as errors and
    never reach the database.
    """
    report = PortBulkReport(total_processed=len(rows))

    result = await db.execute(select(Port.unloc))
    seen_unlocs = {u.upper() for u in result.scalars().all()}

    for row in rows:
        name = row.get("name", "")
        country = row.get("country", "")
        unloc = row.get("unloc", "")
        if not name or not country or not unloc:
            report.errors.append(
                f"Missing required fields (name, country, unloc) for port: "
                f"{name or '?'} ({unloc or '?'})"
            )
            continue

        if unloc.upper() in seen_unlocs:
            report.duplicate_count += 1
            continue

        try:
            latitude = _coerce_coordinate(row.get("latitude", ""), -90, 90)
            longitude = _coerce_coordinate(row.get("longitude", ""), -180, 180)
        except ValueError:
            report.errors.append(f"Invalid coordinates for port: {name} ({unloc})")
            continue

        # Same rules as single-port create (column lengths, blank code)
        try:
            data = PortCreate(
                name=name,
                country=country,
                unloc=unloc,
                code=row.get("code") or None,
                latitude=latitude,
                longitude=longitude,
            )
        except ValidationError as exc:
            first = exc.errors()[0]
            field_name = ".".join(str(loc) for loc in first["loc"])
            report.errors.append(
                f"Failed to process port: {name} ({unloc}): {field_name}: {first['msg']}"
            )
            continue

        db.add(Port(**data.model_dump()))
        seen_unlocs.add(data.unloc)
        report.success_count += 1

    await db.flush()

    logger.info(
        "Port bulk upload: %d processed, %d created, %d duplicates, %d errors",
        report.total_processed,
        report.success_count,
        report.duplicate_count,
        report.error_count,
    )
    return report
