"""Maintenance requests

Revision ID: 8b2e4d61c0a5
Revises: 3f1c9a2b7d40
Create Date: 2026-10-17 14:03:52.260917

"""

import sqlalchemy as sa

from alembic import op  # type: ignore[attr-defined]

# revision identifiers, used by Alembic.
revision = "8b2e4d61c0a5"
down_revision = "3f1c9a2b7d40"
branch_labels = None
depends_on = None

maintenance_status = sa.Enum(
    "pending", "in_progress", "resolved", "cancelled", name="maintenance_status"
)
maintenance_issue_type = sa.Enum(
    "electrical",
    "plumbing",
    "furniture",
    "appliance",
    "security",
    "cleaning",
    "other",
    name="maintenance_issue_type",
)
maintenance_priority = sa.Enum(
    "low", "medium", "high", "emergency", name="maintenance_priority"
)


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "maintenance_requests",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("booking_id", sa.Integer(), nullable=False),
        sa.Column("listing_id", sa.Integer(), nullable=False),
        sa.Column("renter_id", sa.Integer(), nullable=False),
        sa.Column("owner_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("issue_type", maintenance_issue_type, nullable=False),
        sa.Column("status", maintenance_status, server_default="pending", nullable=False),
        sa.Column("priority", maintenance_priority, server_default="medium", nullable=False),
        sa.Column("resolution_notes", sa.Text(), nullable=True),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancellation_reason", sa.Text(), nullable=True),
        sa.Column("renter_rating", sa.Integer(), nullable=True),
        sa.Column("renter_feedback", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint(
            "renter_rating IS NULL OR renter_rating BETWEEN 1 AND 5",
            name="ck_maintenance_requests_renter_rating",
        ),
        sa.ForeignKeyConstraint(["booking_id"], ["bookings.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["listing_id"], ["listings.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_maintenance_requests_booking_id", "maintenance_requests", ["booking_id"])
    op.create_index(
        "ix_maintenance_requests_renter_status", "maintenance_requests", ["renter_id", "status"]
    )
    op.create_index(
        "ix_maintenance_requests_owner_status", "maintenance_requests", ["owner_id", "status"]
    )
    op.create_index(
        "ix_maintenance_requests_listing_status", "maintenance_requests", ["listing_id", "status"]
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("maintenance_requests")

    bind = op.get_bind()
    maintenance_priority.drop(bind, checkfirst=True)
    maintenance_status.drop(bind, checkfirst=True)
    maintenance_issue_type.drop(bind, checkfirst=True)
