from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    Text,
)
from sqlalchemy.sql import func

from student_housing.domain.statuses import BookingStatus, PaymentStatus, enum_values
from student_housing.models.base import Base


class Booking(Base):
    """
    ORM model for a renter's stay at a listing.

    The stay covers [start_date, end_date): end_date is the move-out day and
    is free for the next booking. On PostgreSQL the migration adds an
    exclusion constraint so that two approved/active bookings of the same
    listing can never overlap, even under concurrent approvals.
    """

    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("start_date < end_date", name="ck_bookings_date_order"),
        CheckConstraint("guests >= 1", name="ck_bookings_guests"),
        Index("ix_bookings_listing_status", "listing_id", "status"),
        Index("ix_bookings_listing_dates", "listing_id", "start_date", "end_date"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    listing_id = Column(
        Integer,
        ForeignKey("listings.id", ondelete="CASCADE"),
        nullable=False,
    )
    renter_id = Column(Integer, nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    guests = Column(Integer, nullable=False, server_default="1")
    total_amount = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    status = Column(
        Enum(BookingStatus, name="booking_status", values_callable=enum_values),
        nullable=False,
        server_default=BookingStatus.PENDING.value,
    )
    payment_status = Column(
        Enum(PaymentStatus, name="payment_status", values_callable=enum_values),
        nullable=False,
        server_default=PaymentStatus.PENDING.value,
    )
    cancellation_reason = Column(Text, nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    termination_reason = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
