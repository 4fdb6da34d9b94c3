"""
Maintenance requests raised by renters during a stay.

A renter opens a request against an approved or active booking. The listing
owner (or an admin) works it from ``pending`` through ``in_progress`` to
``resolved``; either side may cancel while it is open. Once resolved, the
renter may rate the fix.
"""

from __future__ import annotations

from typing import Any, Optional

import structlog
from sqlalchemy.engine import Connection, Engine

from student_housing.db.readers.bookings import get_booking
from student_housing.db.readers.listings import get_listing
from student_housing.db.readers.maintenance_requests import (
    MaintenanceFilters,
    get_maintenance_request,
    list_maintenance_requests,
)
from student_housing.db.writers.maintenance_requests import (
    delete_maintenance_request,
    insert_maintenance_request,
    update_maintenance_request,
)
from student_housing.domain.actors import Actor, listing_parties, maintenance_parties
from student_housing.domain.errors import (
    ConflictError,
    InvalidInputError,
    NotFoundError,
    UnauthorizedError,
)
from student_housing.domain.statuses import COMMITTED_STATUSES, MaintenanceStatus, Party
from student_housing.domain.transitions import check_maintenance_transition
from student_housing.metrics import maintenance_requests_opened, maintenance_transitions
from student_housing.services.paging import page_info
from student_housing.utils.datetime import utc_now

logger = structlog.get_logger(__name__)

RENTER_FIELDS = frozenset({"title", "description", "renter_rating", "renter_feedback"})
OWNER_FIELDS = frozenset({"priority", "resolution_notes"})


def create_maintenance_request(
    engine: Engine, actor: Actor, booking_id: int, data: dict[str, Any]
) -> dict[str, Any]:
    """
    Raise a maintenance request for a stay.

    Args:
        engine: SQLAlchemy engine
        actor: Reporting renter
        booking_id: Stay the issue belongs to
        data: title, description, issue_type and optionally priority

    Returns:
        dict: The created request, status ``pending``

    Raises:
        NotFoundError: Unknown booking
        UnauthorizedError: Actor is not the booking's renter
        ConflictError: Booking is not approved or active
    """
    with engine.begin() as conn:
        booking = get_booking(conn, booking_id)
        if booking is None:
            raise NotFoundError("Booking", booking_id)
        if actor.user_id is None or actor.user_id != booking["renter_id"]:
            raise UnauthorizedError(f"Only the renter may report issues for booking {booking_id}")
        if booking["status"] not in COMMITTED_STATUSES:
            raise ConflictError(
                f"Booking {booking_id} is {booking['status'].value}; "
                f"maintenance needs an approved or active stay"
            )

        listing = get_listing(conn, booking["listing_id"])
        if listing is None:
            raise NotFoundError("Listing", booking["listing_id"])

        request_id = insert_maintenance_request(conn, booking, listing["owner_id"], data)
        request = _load(conn, request_id)

    maintenance_requests_opened.labels(
        issue_type=request["issue_type"].value, priority=request["priority"].value
    ).inc()
    logger.info(
        "maintenance_request_created",
        request_id=request_id,
        booking_id=booking_id,
        listing_id=request["listing_id"],
        issue_type=request["issue_type"].value,
        priority=request["priority"].value,
    )
    return request


def get_maintenance_request_for(engine: Engine, actor: Actor, request_id: int) -> dict[str, Any]:
    """
    Fetch a request visible to the actor (its renter, the owner, or an admin).

    Raises:
        NotFoundError: Unknown request
        UnauthorizedError: Actor has no relationship to the request
    """
    with engine.connect() as conn:
        request = _load(conn, request_id)

    if not maintenance_parties(actor, request):
        raise UnauthorizedError(f"Not permitted to view maintenance request {request_id}")
    return request


def list_maintenance_requests_for(
    engine: Engine,
    actor: Actor,
    page: int,
    page_size: int,
    listing_id: Optional[int] = None,
    status: Optional[MaintenanceStatus] = None,
) -> tuple[list[dict[str, Any]], dict[str, int]]:
    """
    Page through maintenance requests, newest first.

    With a listing id the actor must own the listing or be an admin. Without
    one, admins see every request and everyone else sees the requests they
    raised or that concern their listings.

    Returns:
        tuple: (requests on the page, pagination info)

    Raises:
        NotFoundError: Unknown listing
        UnauthorizedError: Actor may not see the requested requests
    """
    filters = MaintenanceFilters(listing_id=listing_id, status=status)

    with engine.connect() as conn:
        if listing_id is not None:
            listing = get_listing(conn, listing_id)
            if listing is None:
                raise NotFoundError("Listing", listing_id)
            if not listing_parties(actor, listing) & {Party.OWNER, Party.ADMIN}:
                raise UnauthorizedError(
                    f"Not permitted to view maintenance requests of listing {listing_id}"
                )
        elif not actor.is_admin:
            if actor.user_id is None:
                raise UnauthorizedError("An identity is required to list maintenance requests")
            filters.party_id = actor.user_id

        rows, total = list_maintenance_requests(conn, filters, page, page_size)

    return rows, page_info(page, page_size, total, len(rows))


def update_maintenance_request_for(
    engine: Engine, actor: Actor, request_id: int, changes: dict[str, Any]
) -> dict[str, Any]:
    """
    Apply a partial update to a request.

    The renter may edit title and description while the request is pending
    and may rate it once resolved. The owner or an admin sets priority and
    resolution notes. A status change goes through the transition table;
    entering ``resolved`` or ``cancelled`` stamps the matching timestamp.

    Args:
        engine: SQLAlchemy engine
        actor: Calling identity
        request_id: Request to update
        changes: Fields to change; ``status`` requests a transition

    Returns:
        dict: The updated request

    Raises:
        NotFoundError: Unknown request
        UnauthorizedError: Actor may not change one of the fields or the status
        InvalidTransitionError: Status change not in the table
        ConflictError: Field change not allowed in the request's status
        InvalidInputError: Rating outside 1 to 5, or a cancellation reason without cancelling
    """
    with engine.begin() as conn:
        request = _load(conn, request_id, lock=True)
        parties = maintenance_parties(actor, request)
        if not parties:
            raise UnauthorizedError(f"Not permitted to update maintenance request {request_id}")

        current: MaintenanceStatus = request["status"]
        target: MaintenanceStatus = changes.get("status") or current
        values = {field: value for field, value in changes.items() if field != "status"}

        renter_edits = values.keys() & RENTER_FIELDS
        if renter_edits and Party.RENTER not in parties:
            raise UnauthorizedError(f"Only the renter may change {', '.join(sorted(renter_edits))}")
        owner_edits = values.keys() & OWNER_FIELDS
        if owner_edits and not parties & {Party.OWNER, Party.ADMIN}:
            raise UnauthorizedError(
                f"Only the owner or an admin may change {', '.join(sorted(owner_edits))}"
            )

        if target != current:
            check_maintenance_transition(current, target, parties)
            values["status"] = target
            if target == MaintenanceStatus.RESOLVED:
                values["resolved_at"] = utc_now()
            elif target == MaintenanceStatus.CANCELLED:
                values["cancelled_at"] = utc_now()
        elif values and current == MaintenanceStatus.CANCELLED:
            raise ConflictError(f"Maintenance request {request_id} is cancelled")

        if "cancellation_reason" in values and target != MaintenanceStatus.CANCELLED:
            raise InvalidInputError("A cancellation reason is only accepted when cancelling")
        if values.keys() & {"title", "description"} and current != MaintenanceStatus.PENDING:
            raise ConflictError("Title and description only change while the request is pending")
        if values.keys() & {"renter_rating", "renter_feedback"}:
            if target != MaintenanceStatus.RESOLVED:
                raise ConflictError("Only resolved maintenance requests can be rated")
            rating = values.get("renter_rating")
            if rating is not None and not 1 <= rating <= 5:
                raise InvalidInputError("renter rating must be between 1 and 5")

        if values:
            update_maintenance_request(conn, request_id, values)
        updated = _load(conn, request_id)

    if target != current:
        maintenance_transitions.labels(from_status=current.value, to_status=target.value).inc()
    logger.info(
        "maintenance_request_updated",
        request_id=request_id,
        fields=sorted(changes),
        from_status=current.value,
        to_status=target.value,
    )
    return updated


def remove_maintenance_request(engine: Engine, actor: Actor, request_id: int) -> None:
    """
    Delete a request. Admins may delete any; the renter only while it is pending.

    Raises:
        NotFoundError: Unknown request
        UnauthorizedError: Actor is neither an admin nor the renter
        ConflictError: Renter deleting a request that is no longer pending
    """
    with engine.begin() as conn:
        request = _load(conn, request_id, lock=True)
        parties = maintenance_parties(actor, request)
        if Party.ADMIN not in parties:
            if Party.RENTER not in parties:
                raise UnauthorizedError(f"Not permitted to delete maintenance request {request_id}")
            if request["status"] != MaintenanceStatus.PENDING:
                raise ConflictError(
                    f"Maintenance request {request_id} is {request['status'].value}; "
                    f"cancel it instead"
                )

        delete_maintenance_request(conn, request_id)

    logger.info("maintenance_request_deleted", request_id=request_id, actor_id=actor.user_id)


def _load(conn: Connection, request_id: int, lock: bool = False) -> dict[str, Any]:
    request = get_maintenance_request(conn, request_id, lock=lock)
    if request is None:
        raise NotFoundError("Maintenance request", request_id)
    return request
