from datetime import datetime

from pydantic import Field

from student_housing.schemas.base import CamelModel


class ReviewCreatePayload(CamelModel):
    rating: int = Field(..., ge=1, le=5, description="Star rating from 1 to 5")
    comment: str = Field("", max_length=2000, description="Review text")


class ReviewOut(CamelModel):
    id: int
    listing_id: int
    booking_id: int
    reviewer_id: int
    rating: int
    comment: str
    created_at: datetime
