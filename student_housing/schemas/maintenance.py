from datetime import datetime
from typing import Optional

from pydantic import Field

from student_housing.domain.statuses import IssueType, MaintenancePriority, MaintenanceStatus
from student_housing.schemas.base import CamelModel
from student_housing.schemas.listings import Pagination


class MaintenanceCreatePayload(CamelModel):
    """
    Schema for reporting an issue during an approved or active stay.
    """

    booking_id: int = Field(..., description="Stay the issue belongs to")
    title: str = Field(..., min_length=1, max_length=100, description="Short summary")
    description: str = Field(..., min_length=1, max_length=1000, description="What is wrong")
    issue_type: IssueType = Field(..., description="Kind of repair needed")
    priority: MaintenancePriority = Field(MaintenancePriority.MEDIUM, description="Urgency")


class MaintenanceUpdatePayload(CamelModel):
    """
    Schema for updating a maintenance request. All fields are optional.

    Renters edit title/description while pending and rate resolved requests;
    owners set priority and resolution notes. ``status`` requests a transition.
    """

    status: Optional[MaintenanceStatus] = Field(None, description="Requested status")
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1, max_length=1000)
    priority: Optional[MaintenancePriority] = None
    resolution_notes: Optional[str] = Field(None, max_length=1000)
    cancellation_reason: Optional[str] = Field(None, max_length=500)
    renter_rating: Optional[int] = Field(None, ge=1, le=5, description="Renter's rating of the fix")
    renter_feedback: Optional[str] = Field(None, max_length=500)


class MaintenanceOut(CamelModel):
    id: int
    booking_id: int
    listing_id: int
    renter_id: int
    owner_id: int
    title: str
    description: str
    issue_type: IssueType
    status: MaintenanceStatus
    priority: MaintenancePriority
    resolution_notes: Optional[str] = None
    resolved_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    renter_rating: Optional[int] = None
    renter_feedback: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class MaintenancePage(CamelModel):
    data: list[MaintenanceOut]
    pagination: Pagination
