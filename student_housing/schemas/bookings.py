from datetime import date, datetime
from typing import Optional

from pydantic import Field

from student_housing.domain.statuses import BookingStatus, PaymentStatus
from student_housing.schemas.base import CamelModel


class BookingCreatePayload(CamelModel):
    """
    Schema for requesting a booking. The stay is [start_date, end_date).
    """

    listing_id: int = Field(..., description="Listing to book")
    start_date: date = Field(..., description="First night (inclusive)")
    end_date: date = Field(..., description="Check-out day (exclusive)")
    guests: int = Field(1, ge=1, description="Number of occupants")


class BookingCancelPayload(CamelModel):
    reason: Optional[str] = Field(None, max_length=1000, description="Why the booking is cancelled")


class BookingTerminatePayload(CamelModel):
    reason: str = Field(..., max_length=1000, description="Why the tenancy is ended early")


class BookingOut(CamelModel):
    id: int
    listing_id: int
    renter_id: int
    start_date: date
    end_date: date
    guests: int
    total_amount: float
    status: BookingStatus
    payment_status: PaymentStatus
    cancellation_reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    termination_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime
