from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.engine import Engine

from student_housing.dependencies import get_actor, get_db_engine
from student_housing.domain.actors import Actor
from student_housing.domain.dates import DateRange
from student_housing.routes._helpers import run_or_500
from student_housing.schemas.bookings import (
    BookingCancelPayload,
    BookingCreatePayload,
    BookingOut,
    BookingTerminatePayload,
)
from student_housing.services.bookings import (
    approve_booking,
    cancel_booking,
    complete_booking,
    create_booking,
    get_booking_for,
    list_bookings_for,
    reject_booking,
    terminate_booking,
)

router = APIRouter()


@router.post("/bookings", status_code=status.HTTP_201_CREATED, response_model=BookingOut)
def request_booking(
    payload: BookingCreatePayload,
    engine: Engine = Depends(get_db_engine),
    actor: Actor = Depends(get_actor),
) -> dict[str, Any]:
    """
    Create a pending booking request for the calling renter.

    Args:
        payload: listingId, startDate, endDate and guests
        engine: Database engine
        actor: Calling identity

    Returns:
        dict: The created booking
    """
    return run_or_500(
        "booking_creation_failed",
        lambda: create_booking(
            engine,
            actor,
            payload.listing_id,
            DateRange(payload.start_date, payload.end_date),
            payload.guests,
        ),
    )


@router.get("/bookings", response_model=list[BookingOut])
def get_bookings(
    listing_id: Optional[int] = Query(None, alias="listingId", description="Bookings of a listing"),
    renter_id: Optional[int] = Query(None, alias="renterId", description="Bookings of a renter"),
    engine: Engine = Depends(get_db_engine),
    actor: Actor = Depends(get_actor),
) -> list[dict[str, Any]]:
    """
    List bookings of a listing (owner or admin) or of a renter.

    Without filters, returns the calling renter's own bookings.
    """
    return run_or_500(
        "booking_list_failed",
        lambda: list_bookings_for(engine, actor, listing_id=listing_id, renter_id=renter_id),
    )


@router.get("/bookings/{booking_id}", response_model=BookingOut)
def get_booking(
    booking_id: int,
    engine: Engine = Depends(get_db_engine),
    actor: Actor = Depends(get_actor),
) -> dict[str, Any]:
    return run_or_500("booking_fetch_failed", lambda: get_booking_for(engine, actor, booking_id))


@router.put("/bookings/{booking_id}/approve", response_model=BookingOut)
def approve(
    booking_id: int,
    engine: Engine = Depends(get_db_engine),
    actor: Actor = Depends(get_actor),
) -> dict[str, Any]:
    """
    Approve a pending booking (listing owner).

    Re-checks availability against approved and active bookings; if another
    booking already holds the dates, responds 409 ConflictError.
    """
    return run_or_500("booking_approval_failed", lambda: approve_booking(engine, booking_id, actor))


@router.put("/bookings/{booking_id}/reject", response_model=BookingOut)
def reject(
    booking_id: int,
    engine: Engine = Depends(get_db_engine),
    actor: Actor = Depends(get_actor),
) -> dict[str, Any]:
    return run_or_500("booking_rejection_failed", lambda: reject_booking(engine, booking_id, actor))


@router.put("/bookings/{booking_id}/cancel", response_model=BookingOut)
def cancel(
    booking_id: int,
    payload: Optional[BookingCancelPayload] = None,
    engine: Engine = Depends(get_db_engine),
    actor: Actor = Depends(get_actor),
) -> dict[str, Any]:
    """
    Cancel a booking: the renter while pending, renter or owner while
    approved and before the start date.
    """
    reason = payload.reason if payload else None
    return run_or_500(
        "booking_cancellation_failed",
        lambda: cancel_booking(engine, booking_id, actor, reason=reason),
    )


@router.put("/bookings/{booking_id}/complete", response_model=BookingOut)
def complete(
    booking_id: int,
    engine: Engine = Depends(get_db_engine),
    actor: Actor = Depends(get_actor),
) -> dict[str, Any]:
    return run_or_500("booking_completion_failed", lambda: complete_booking(engine, booking_id, actor))


@router.put("/bookings/{booking_id}/terminate", response_model=BookingOut)
def terminate(
    booking_id: int,
    payload: BookingTerminatePayload,
    engine: Engine = Depends(get_db_engine),
    actor: Actor = Depends(get_actor),
) -> dict[str, Any]:
    return run_or_500(
        "booking_termination_failed",
        lambda: terminate_booking(engine, booking_id, actor, payload.reason),
    )
