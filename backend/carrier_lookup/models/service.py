"""Service and ServiceRoute — a carrier's named offering and its legs.

A service always has at least one route. Routes are kept in insertion
order via `position`; updating a service replaces its whole route set.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from carrier_lookup.database import Base


class Service(Base):
    __tablename__ = "services"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    # Unique per carrier (case-insensitive), checked on import
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    partner_services: Mapped[str | None] = mapped_column(Text)
    carrier_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("carriers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # ── Relationships ─────────────────────────────────────────
    carrier = relationship("Carrier", back_populates="services", lazy="selectin")
    routes = relationship(
        "ServiceRoute",
        back_populates="service",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="ServiceRoute.position",
    )


class ServiceRoute(Base):
    __tablename__ = "service_routes"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    service_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("services.id", ondelete="CASCADE"), nullable=False, index=True
    )
    pol_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("ports.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    pod_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("ports.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    # Free-text label ("30 days", "3 weeks", "TBD"), never parsed
    transit_time: Mapped[str] = mapped_column(String(100), nullable=False, default="TBD")
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # ── Relationships ─────────────────────────────────────────
    service = relationship("Service", back_populates="routes")
    pol_port = relationship("Port", foreign_keys=[pol_id], lazy="selectin")
    pod_port = relationship("Port", foreign_keys=[pod_id], lazy="selectin")
