"""Initial listings, bookings and reviews schema

Revision ID: 3f1c9a2b7d40
Revises:
Create Date: 2026-10-17 09:12:31.418202

"""

import sqlalchemy as sa

from alembic import op  # type: ignore[attr-defined]

# revision identifiers, used by Alembic.
revision = "3f1c9a2b7d40"
down_revision = None
branch_labels = None
depends_on = None

listing_status = sa.Enum(
    "pending",
    "approved",
    "rejected",
    "active",
    "inactive",
    "sold",
    "under_maintenance",
    name="listing_status",
)
booking_status = sa.Enum(
    "pending",
    "approved",
    "rejected",
    "cancelled",
    "active",
    "completed",
    "terminated",
    name="booking_status",
)
payment_status = sa.Enum(
    "pending",
    "partial",
    "paid",
    "refunded",
    "partially_refunded",
    "failed",
    name="payment_status",
)


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "listings",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("owner_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), server_default="", nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("maximum_occupancy", sa.Integer(), server_default="1", nullable=False),
        sa.Column("current_occupancy", sa.Integer(), server_default="0", nullable=False),
        sa.Column("lat", sa.Float(), nullable=True),
        sa.Column("lng", sa.Float(), nullable=True),
        sa.Column("status", listing_status, server_default="pending", nullable=False),
        sa.Column("rating", sa.Float(), server_default="0", nullable=False),
        sa.Column("review_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("maximum_occupancy >= 1", name="ck_listings_maximum_occupancy"),
        sa.CheckConstraint(
            "current_occupancy >= 0 AND current_occupancy <= maximum_occupancy",
            name="ck_listings_current_occupancy",
        ),
        sa.CheckConstraint("price >= 0", name="ck_listings_price"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_listings_owner_id", "listings", ["owner_id"])
    op.create_index("ix_listings_price", "listings", ["price"])
    op.create_index("ix_listings_status", "listings", ["status"])

    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("listing_id", sa.Integer(), nullable=False),
        sa.Column("renter_id", sa.Integer(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("guests", sa.Integer(), server_default="1", nullable=False),
        sa.Column("total_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("status", booking_status, server_default="pending", nullable=False),
        sa.Column("payment_status", payment_status, server_default="pending", nullable=False),
        sa.Column("cancellation_reason", sa.Text(), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("termination_reason", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("start_date < end_date", name="ck_bookings_date_order"),
        sa.CheckConstraint("guests >= 1", name="ck_bookings_guests"),
        sa.ForeignKeyConstraint(["listing_id"], ["listings.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_bookings_renter_id", "bookings", ["renter_id"])
    op.create_index("ix_bookings_listing_status", "bookings", ["listing_id", "status"])
    op.create_index(
        "ix_bookings_listing_dates", "bookings", ["listing_id", "start_date", "end_date"]
    )

    # Two approved/active bookings of one listing may never overlap, even
    # when approvals race past the application-level check
    op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist")
    op.execute(
        """
        ALTER TABLE bookings
        ADD CONSTRAINT ex_bookings_committed_no_overlap
        EXCLUDE USING gist (
            listing_id WITH =,
            daterange(start_date, end_date, '[)') WITH &&
        )
        WHERE (status IN ('approved', 'active'))
        """
    )

    op.create_table(
        "reviews",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("listing_id", sa.Integer(), nullable=False),
        sa.Column("booking_id", sa.Integer(), nullable=False),
        sa.Column("reviewer_id", sa.Integer(), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("rating BETWEEN 1 AND 5", name="ck_reviews_rating"),
        sa.ForeignKeyConstraint(["listing_id"], ["listings.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["booking_id"], ["bookings.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("booking_id", name="uq_reviews_booking_id"),
    )
    op.create_index("ix_reviews_listing_id", "reviews", ["listing_id"])
    op.create_index("ix_reviews_reviewer_id", "reviews", ["reviewer_id"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("reviews")
    op.execute("ALTER TABLE bookings DROP CONSTRAINT IF EXISTS ex_bookings_committed_no_overlap")
    op.drop_table("bookings")
    op.drop_table("listings")

    bind = op.get_bind()
    payment_status.drop(bind, checkfirst=True)
    booking_status.drop(bind, checkfirst=True)
    listing_status.drop(bind, checkfirst=True)
