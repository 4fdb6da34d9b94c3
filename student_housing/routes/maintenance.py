from typing import Any, Optional

import structlog
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.engine import Engine

from student_housing.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from student_housing.dependencies import get_actor, get_db_engine
from student_housing.domain.actors import Actor
from student_housing.domain.statuses import MaintenanceStatus
from student_housing.routes._helpers import run_or_500
from student_housing.schemas.maintenance import (
    MaintenanceCreatePayload,
    MaintenanceOut,
    MaintenancePage,
    MaintenanceUpdatePayload,
)
from student_housing.services.maintenance import (
    create_maintenance_request,
    get_maintenance_request_for,
    list_maintenance_requests_for,
    remove_maintenance_request,
    update_maintenance_request_for,
)

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post(
    "/maintenance-requests",
    status_code=status.HTTP_201_CREATED,
    response_model=MaintenanceOut,
)
def post_maintenance_request(
    payload: MaintenanceCreatePayload,
    engine: Engine = Depends(get_db_engine),
    actor: Actor = Depends(get_actor),
) -> dict[str, Any]:
    """
    Report an issue for the caller's approved or active stay.

    Args:
        payload: bookingId, title, description, issueType and optional priority
        engine: Database engine
        actor: Calling renter

    Returns:
        dict: The created request
    """
    data = payload.model_dump(exclude={"booking_id"})
    return run_or_500(
        "maintenance_request_creation_failed",
        lambda: create_maintenance_request(engine, actor, payload.booking_id, data),
    )


@router.get("/maintenance-requests", response_model=MaintenancePage)
def get_maintenance_requests(
    listing_id: Optional[int] = Query(None, alias="listingId", description="Requests of a listing"),
    request_status: Optional[MaintenanceStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, alias="pageSize", ge=1, le=MAX_PAGE_SIZE),
    engine: Engine = Depends(get_db_engine),
    actor: Actor = Depends(get_actor),
) -> dict[str, Any]:
    """
    Page through maintenance requests, newest first.

    Without listingId, non-admin callers see the requests they raised or that
    concern their listings.
    """
    rows, pagination = run_or_500(
        "maintenance_request_list_failed",
        lambda: list_maintenance_requests_for(
            engine, actor, page, page_size, listing_id=listing_id, status=request_status
        ),
    )
    return {"data": rows, "pagination": pagination}


@router.get("/maintenance-requests/{request_id}", response_model=MaintenanceOut)
def get_maintenance_request(
    request_id: int,
    engine: Engine = Depends(get_db_engine),
    actor: Actor = Depends(get_actor),
) -> dict[str, Any]:
    return run_or_500(
        "maintenance_request_fetch_failed",
        lambda: get_maintenance_request_for(engine, actor, request_id),
    )


@router.patch("/maintenance-requests/{request_id}", response_model=MaintenanceOut)
def patch_maintenance_request(
    request_id: int,
    payload: MaintenanceUpdatePayload,
    engine: Engine = Depends(get_db_engine),
    actor: Actor = Depends(get_actor),
) -> dict[str, Any]:
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    return run_or_500(
        "maintenance_request_update_failed",
        lambda: update_maintenance_request_for(engine, actor, request_id, changes),
    )


@router.delete("/maintenance-requests/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_maintenance_request(
    request_id: int,
    engine: Engine = Depends(get_db_engine),
    actor: Actor = Depends(get_actor),
) -> Response:
    run_or_500(
        "maintenance_request_deletion_failed",
        lambda: remove_maintenance_request(engine, actor, request_id),
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
