"""Carrier — an ocean carrier or logistics provider (Maersk, MSC, COSCO, ...).

Owns its services; deleting a carrier removes its services and their routes.
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from carrier_lookup.database import Base


class CarrierType(str, enum.Enum):
    MLO = "MLO"
    NVOCC = "NVOCC"
    FREIGHT_FORWARDER = "Freight Forwarder"
    THIRD_PARTY_LOGISTICS = "3PL"
    CUSTOMS_BROKER = "Customs Broker"


class Carrier(Base):
    __tablename__ = "carriers"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    logo_url: Mapped[str | None] = mapped_column(String(500))
    # Stores the CarrierType value ("Freight Forwarder", not FREIGHT_FORWARDER)
    carrier_type: Mapped[str | None] = mapped_column(String(50))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # ── Relationships ─────────────────────────────────────────
    services = relationship(
        "Service",
        back_populates="carrier",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="Service.created_at",
    )
