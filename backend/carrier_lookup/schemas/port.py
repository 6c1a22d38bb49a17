"""Pydantic schemas for Port CRUD and bulk upload."""

from datetime import datetime

from pydantic import Field, field_validator

from carrier_lookup.schemas.common import CamelModel


class PortCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    country: str = Field(..., min_length=1, max_length=100)
    unloc: str = Field(..., min_length=1, max_length=10)
    code: str | None = Field(None, max_length=20)
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)

    @field_validator("name", "country", "unloc")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("unloc")
    @classmethod
    def _upper_unloc(cls, v: str) -> str:
        # UN/LOCODEs compare case-insensitively; store them upper-case
        return v.upper()

    @field_validator("code")
    @classmethod
    def _blank_code_is_none(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v.strip()


class PortUpdate(PortCreate):
    """Full replace: the same fields as create."""


class PortOut(CamelModel):
    id: str
    name: str
    country: str
    unloc: str
    code: str | None
    latitude: float | None
    longitude: float | None
    created_at: datetime
    updated_at: datetime


class PortBulkResult(CamelModel):
    message: str = "Bulk upload completed"
    total_processed: int
    success_count: int
    duplicate_count: int
    error_count: int
    errors: list[str]
