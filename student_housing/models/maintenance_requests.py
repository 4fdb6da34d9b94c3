from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.sql import func

from student_housing.domain.statuses import (
    IssueType,
    MaintenancePriority,
    MaintenanceStatus,
    enum_values,
)
from student_housing.models.base import Base


class MaintenanceRequest(Base):
    """
    ORM model for a repair request raised by a renter during a stay.

    listing_id, renter_id and owner_id are copied from the booking and its
    listing when the request is created, so access checks and per-party
    listings need no joins.
    """

    __tablename__ = "maintenance_requests"
    __table_args__ = (
        CheckConstraint(
            "renter_rating IS NULL OR renter_rating BETWEEN 1 AND 5",
            name="ck_maintenance_requests_renter_rating",
        ),
        Index("ix_maintenance_requests_renter_status", "renter_id", "status"),
        Index("ix_maintenance_requests_owner_status", "owner_id", "status"),
        Index("ix_maintenance_requests_listing_status", "listing_id", "status"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    booking_id = Column(
        Integer,
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    listing_id = Column(
        Integer,
        ForeignKey("listings.id", ondelete="CASCADE"),
        nullable=False,
    )
    renter_id = Column(Integer, nullable=False)
    owner_id = Column(Integer, nullable=False)
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    issue_type = Column(
        Enum(IssueType, name="maintenance_issue_type", values_callable=enum_values),
        nullable=False,
    )
    status = Column(
        Enum(MaintenanceStatus, name="maintenance_status", values_callable=enum_values),
        nullable=False,
        server_default=MaintenanceStatus.PENDING.value,
    )
    priority = Column(
        Enum(MaintenancePriority, name="maintenance_priority", values_callable=enum_values),
        nullable=False,
        server_default=MaintenancePriority.MEDIUM.value,
    )
    resolution_notes = Column(Text, nullable=True)
    resolved_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancellation_reason = Column(Text, nullable=True)
    renter_rating = Column(Integer, nullable=True)
    renter_feedback = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
