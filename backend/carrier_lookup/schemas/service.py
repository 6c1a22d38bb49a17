"""Pydantic schemas for Service and ServiceRoute CRUD operations."""

from datetime import datetime

from pydantic import Field, field_validator

from carrier_lookup.schemas.common import CamelModel
from carrier_lookup.schemas.port import PortOut


class RouteIn(CamelModel):
    pol_id: str = Field(..., min_length=1)
    pod_id: str = Field(..., min_length=1)
    transit_time: str = Field(..., min_length=1, max_length=100)

    @field_validator("transit_time")
    @classmethod
    def _strip_transit(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Transit time is required")
        return v


class ServiceCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    partner_services: str | None = None
    carrier_id: str = Field(..., min_length=1)
    routes: list[RouteIn] = Field(..., min_length=1)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Service name is required")
        return v


class ServiceUpdate(ServiceCreate):
    """Full replace: scalar fields plus the complete route set."""


class RouteOut(CamelModel):
    id: str
    service_id: str
    pol_id: str
    pod_id: str
    transit_time: str
    pol_port: PortOut | None = None
    pod_port: PortOut | None = None


class ServiceSummary(CamelModel):
    id: str
    name: str
    partner_services: str | None
    carrier_id: str
    created_at: datetime
    updated_at: datetime


class ServiceDetail(ServiceSummary):
    routes: list[RouteOut] = []


class ServiceCarrierOut(CamelModel):
    id: str
    name: str
    carrier_type: str | None
    logo_url: str | None


class ServiceOut(ServiceDetail):
    carrier: ServiceCarrierOut
