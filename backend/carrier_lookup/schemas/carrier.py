"""Pydantic schemas for Carrier CRUD operations."""

from datetime import datetime

from pydantic import ConfigDict, Field, field_validator

from carrier_lookup.models.carrier import CarrierType
from carrier_lookup.schemas.common import CamelModel
from carrier_lookup.schemas.service import ServiceDetail, ServiceSummary


class CarrierCreate(CamelModel):
    model_config = ConfigDict(use_enum_values=True)

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    logo_url: str | None = Field(None, max_length=500)
    carrier_type: CarrierType | None = None

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Carrier name is required")
        return v


class CarrierUpdate(CarrierCreate):
    """Full replace: the same fields as create."""


class CarrierSummary(CamelModel):
    id: str
    name: str
    description: str | None
    logo_url: str | None
    carrier_type: str | None
    created_at: datetime
    updated_at: datetime


class CarrierOut(CarrierSummary):
    services: list[ServiceSummary] = []


class CarrierDetail(CarrierSummary):
    services: list[ServiceDetail] = []
