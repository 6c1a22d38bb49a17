"""Schemas for the two-step service bulk import (validate, then create)."""

from pydantic import Field

from carrier_lookup.schemas.common import CamelModel


class ParsedRoute(CamelModel):
    # Blank or missing values are reported per service by the create step
    route_name: str | None = ""
    pol: str | None = ""
    pod: str | None = ""
    transit_time: str | None = "TBD"


class ParsedService(CamelModel):
    name: str | None = ""
    carrier_name: str | None = ""
    partner_services: str | None = ""
    routes: list[ParsedRoute] = []


class UploadSummary(CamelModel):
    total_services: int
    total_routes: int


class UploadValidationResponse(CamelModel):
    success: bool
    data: list[ParsedService]
    errors: list[str]
    warnings: list[str]
    summary: UploadSummary


class CreationResult(CamelModel):
    success: bool
    service_id: str | None = None
    service_name: str | None = None
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class CreationSummary(CamelModel):
    total_services: int
    created_services: int
    error_services: int


class CreationResponse(CamelModel):
    success: bool
    summary: CreationSummary
    results: list[CreationResult]
