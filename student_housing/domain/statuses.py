"""Closed status enums for listings, bookings, payments and maintenance requests."""

from __future__ import annotations

from enum import Enum


class ListingStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    ACTIVE = "active"
    INACTIVE = "inactive"
    SOLD = "sold"
    UNDER_MAINTENANCE = "under_maintenance"


class BookingStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    ACTIVE = "active"
    COMPLETED = "completed"
    TERMINATED = "terminated"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"
    REFUNDED = "refunded"
    PARTIALLY_REFUNDED = "partially_refunded"
    FAILED = "failed"


class MaintenanceStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CANCELLED = "cancelled"


class IssueType(str, Enum):
    ELECTRICAL = "electrical"
    PLUMBING = "plumbing"
    FURNITURE = "furniture"
    APPLIANCE = "appliance"
    SECURITY = "security"
    CLEANING = "cleaning"
    OTHER = "other"


class MaintenancePriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    EMERGENCY = "emergency"


class Party(str, Enum):
    """The role an actor plays relative to a booking or listing."""

    RENTER = "renter"
    OWNER = "owner"
    ADMIN = "admin"
    SYSTEM = "system"


# Bookings that count toward availability conflicts
BLOCKING_STATUSES: frozenset[BookingStatus] = frozenset(
    {BookingStatus.PENDING, BookingStatus.APPROVED, BookingStatus.ACTIVE}
)

# Bookings that actually hold their dates; overlapping pending requests may
# coexist until one of them is approved
COMMITTED_STATUSES: frozenset[BookingStatus] = frozenset(
    {BookingStatus.APPROVED, BookingStatus.ACTIVE}
)

TERMINAL_STATUSES: frozenset[BookingStatus] = frozenset(
    {
        BookingStatus.REJECTED,
        BookingStatus.CANCELLED,
        BookingStatus.COMPLETED,
        BookingStatus.TERMINATED,
    }
)


def enum_values(enum_cls: type[Enum]) -> list[str]:
    """Persist enum values (not member names) in SQLAlchemy Enum columns."""
    return [member.value for member in enum_cls]
