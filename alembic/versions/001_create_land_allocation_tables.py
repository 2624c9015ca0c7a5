"""Create gardens, land_requests and land_allocation_notifications tables.

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create land allocation tables."""
    # Gardens carry the land ledger
    op.create_table(
        "gardens",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("owner_id", sa.String(36), nullable=False, index=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("address", sa.String(500), nullable=True),
        sa.Column("latitude", sa.Float, nullable=True),
        sa.Column("longitude", sa.Float, nullable=True),
        sa.Column("type", sa.String(50), nullable=False, server_default="community", index=True),
        # Ledger
        sa.Column("total_land", sa.Numeric(12, 2), nullable=False),
        sa.Column("allocated_land", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("version", sa.Numeric(10, 0), nullable=False, server_default="1"),
        # Timestamps
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
            onupdate=sa.func.now(),
        ),
        sa.CheckConstraint("total_land >= 0", name="ck_gardens_total_land_non_negative"),
        sa.CheckConstraint(
            "allocated_land >= 0 AND allocated_land <= total_land",
            name="ck_gardens_allocated_within_total",
        ),
    )

    op.create_table(
        "land_requests",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "garden_id",
            sa.String(36),
            sa.ForeignKey("gardens.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("user_id", sa.String(36), nullable=False, index=True),
        sa.Column("requested_land", sa.Numeric(12, 2), nullable=False),
        sa.Column("start_date", sa.Date, nullable=False),
        sa.Column("end_date", sa.Date, nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending", index=True),
        sa.Column("message", sa.Text, nullable=True),
        sa.Column("contact_info", sa.String(255), nullable=True),
        # Extension
        sa.Column("previous_end_date", sa.Date, nullable=True),
        sa.Column("proposed_end_date", sa.Date, nullable=True),
        sa.Column("extension_message", sa.Text, nullable=True),
        sa.Column("pre_extension_status", sa.String(20), nullable=True),
        sa.Column("version", sa.Numeric(10, 0), nullable=False, server_default="1"),
        # Timestamps
        sa.Column("decided_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
            onupdate=sa.func.now(),
        ),
        sa.CheckConstraint("requested_land > 0", name="ck_land_requests_positive_land"),
        sa.CheckConstraint("start_date < end_date", name="ck_land_requests_date_order"),
    )
    op.create_index(
        "ix_land_requests_garden_requester",
        "land_requests",
        ["garden_id", "user_id"],
    )
    op.create_index(
        "ix_land_requests_status_dates",
        "land_requests",
        ["status", "start_date", "end_date"],
    )

    op.create_table(
        "land_allocation_notifications",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), nullable=False, index=True),
        sa.Column("from_user", sa.String(36), nullable=True),
        sa.Column(
            "garden_id",
            sa.String(36),
            sa.ForeignKey("gardens.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("request_id", sa.String(36), nullable=True, index=True),
        sa.Column("type", sa.String(30), nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("is_read", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
            index=True,
        ),
    )


def downgrade() -> None:
    """Drop land allocation tables."""
    op.drop_table("land_allocation_notifications")
    op.drop_index("ix_land_requests_status_dates", table_name="land_requests")
    op.drop_index("ix_land_requests_garden_requester", table_name="land_requests")
    op.drop_table("land_requests")
    op.drop_table("gardens")
