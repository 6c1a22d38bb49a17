"""Aggregate model imports for Alembic auto-detection."""

from carrier_lookup.models.carrier import Carrier, CarrierType  # noqa: F401
from carrier_lookup.models.port import Port  # noqa: F401
from carrier_lookup.models.service import Service, ServiceRoute  # noqa: F401

__all__ = ["Carrier", "CarrierType", "Port", "Service", "ServiceRoute"]
