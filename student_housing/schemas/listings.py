from datetime import datetime
from typing import Optional

from pydantic import Field

from student_housing.domain.statuses import ListingStatus
from student_housing.schemas.base import CamelModel


class ListingCreatePayload(CamelModel):
    """
    Schema for creating a listing. New listings start in ``pending``.
    """

    title: str = Field(..., min_length=1, max_length=200, description="Listing title")
    description: str = Field("", description="Free-text description")
    price: float = Field(..., ge=0, description="Price per night")
    maximum_occupancy: int = Field(1, ge=1, description="Maximum number of occupants")
    lat: Optional[float] = Field(None, ge=-90, le=90, description="Latitude in degrees")
    lng: Optional[float] = Field(None, ge=-180, le=180, description="Longitude in degrees")


class ListingUpdatePayload(CamelModel):
    """
    Schema for updating a listing. All fields are optional.
    Note: status has its own endpoint; occupancy and rating are derived.
    """

    title: Optional[str] = Field(None, min_length=1, max_length=200, description="Listing title")
    description: Optional[str] = Field(None, description="Free-text description")
    price: Optional[float] = Field(None, ge=0, description="Price per night")
    maximum_occupancy: Optional[int] = Field(None, ge=1, description="Maximum number of occupants")
    lat: Optional[float] = Field(None, ge=-90, le=90, description="Latitude in degrees")
    lng: Optional[float] = Field(None, ge=-180, le=180, description="Longitude in degrees")


class ListingStatusPayload(CamelModel):
    status: ListingStatus = Field(..., description="Requested listing status")


class ListingOut(CamelModel):
    id: int
    owner_id: int
    title: str
    description: str
    price: float
    maximum_occupancy: int
    current_occupancy: int
    lat: Optional[float] = None
    lng: Optional[float] = None
    status: ListingStatus
    rating: float
    review_count: int
    created_at: datetime
    updated_at: datetime


class NearbyListingOut(ListingOut):
    distance_km: float = Field(..., description="Great-circle distance from the search center")


class Pagination(CamelModel):
    """
    Page metadata. For radius searches ``total`` counts candidate listings
    before the distance filter; ``returned`` is what this page actually holds.
    """

    page: int
    page_size: int
    total: int
    total_pages: int
    returned: int


class ListingPage(CamelModel):
    data: list[ListingOut]
    pagination: Pagination


class NearbyListingPage(CamelModel):
    data: list[NearbyListingOut]
    pagination: Pagination
