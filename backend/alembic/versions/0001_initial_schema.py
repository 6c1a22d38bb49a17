"""Initial schema — carriers, ports, services and service routes.

Revision ID: 0001
Revises: (none)
Create Date: 2026-10-18

Run with:
    alembic upgrade head
"""

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

from alembic import op
import sqlalchemy as sa


def upgrade() -> None:
    # ── Reference data ───────────────────────────────────────

    op.create_table(
        "carriers",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False, unique=True),
        sa.Column("description", sa.Text()),
        sa.Column("logo_url", sa.String(500)),
        sa.Column("carrier_type", sa.String(50)),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )

    op.create_table(
        "ports",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("country", sa.String(100), nullable=False),
        sa.Column("unloc", sa.String(10), nullable=False, unique=True),
        sa.Column("code", sa.String(20)),
        sa.Column("latitude", sa.Float()),
        sa.Column("longitude", sa.Float()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_ports_name", "ports", ["name"])

    # ── Services ─────────────────────────────────────────────

    op.create_table(
        "services",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("partner_services", sa.Text()),
        sa.Column(
            "carrier_id", sa.String(36),
            sa.ForeignKey("carriers.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_services_name", "services", ["name"])
    op.create_index("ix_services_carrier_id", "services", ["carrier_id"])
    op.create_index("ix_services_created_at", "services", ["created_at"])

    op.create_table(
        "service_routes",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "service_id", sa.String(36),
            sa.ForeignKey("services.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "pol_id", sa.String(36),
            sa.ForeignKey("ports.id", ondelete="RESTRICT"), nullable=False,
        ),
        sa.Column(
            "pod_id", sa.String(36),
            sa.ForeignKey("ports.id", ondelete="RESTRICT"), nullable=False,
        ),
        sa.Column("transit_time", sa.String(100), nullable=False, server_default="TBD"),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_service_routes_service_id", "service_routes", ["service_id"])
    op.create_index("ix_service_routes_pol_id", "service_routes", ["pol_id"])
    op.create_index("ix_service_routes_pod_id", "service_routes", ["pod_id"])


def downgrade() -> None:
    op.drop_table("service_routes")
    op.drop_table("services")
    op.drop_table("ports")
    op.drop_table("carriers")
