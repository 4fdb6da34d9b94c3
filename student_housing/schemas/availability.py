from pydantic import Field

from student_housing.schemas.base import CamelModel


class AvailabilityOut(CamelModel):
    available: bool = Field(..., description="True if the listing can be booked for the range")
