"""
Booking lifecycle: creation and every status transition.

All transitions funnel through ``transition_booking``, which validates the
change with ``domain.transitions.check_booking_transition`` and commits it in
one transaction. Approval additionally re-runs the availability check against
committed bookings while the listing row is locked, so two overlapping
pending requests can never both be approved.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

import structlog
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError

from student_housing.db.readers.bookings import get_booking, list_bookings
from student_housing.db.readers.listings import get_listing
from student_housing.db.writers.bookings import compare_and_set_status, insert_booking
from student_housing.domain.actors import Actor, booking_parties
from student_housing.domain.dates import DateRange
from student_housing.domain.errors import (
    ConflictError,
    InvalidInputError,
    InvalidTransitionError,
    NotFoundError,
    UnauthorizedError,
)
from student_housing.domain.statuses import COMMITTED_STATUSES, BookingStatus, ListingStatus
from student_housing.domain.transitions import check_booking_transition
from student_housing.metrics import approval_conflicts, booking_transitions
from student_housing.services.availability import find_overlapping_booking, is_available
from student_housing.services.occupancy import recompute_occupancy
from student_housing.utils.datetime import utc_now, utc_today

logger = structlog.get_logger(__name__)


def create_booking(
    engine: Engine,
    actor: Actor,
    listing_id: int,
    dates: DateRange,
    guests: int = 1,
) -> dict[str, Any]:
    """
    Create a pending booking request.

    Other pending requests for overlapping dates are allowed; only dates
    already held by approved or active bookings are refused.

    Args:
        engine: SQLAlchemy engine
        actor: Requesting renter
        listing_id: Listing to book
        dates: Requested stay
        guests: Number of occupants

    Returns:
        dict: The created booking row

    Raises:
        UnauthorizedError: Anonymous actor
        InvalidInputError: Fewer than one guest
        NotFoundError: Unknown listing
        ConflictError: Listing not bookable, over capacity, or dates taken
    """
    if actor.user_id is None:
        raise UnauthorizedError("A renter identity is required to book")
    if guests < 1:
        raise InvalidInputError("A booking needs at least one guest")

    with engine.begin() as conn:
        listing = get_listing(conn, listing_id, lock=True)
        if listing is None:
            raise NotFoundError("Listing", listing_id)

        if listing["status"] != ListingStatus.ACTIVE:
            raise ConflictError(f"Listing {listing_id} is not accepting bookings")

        if guests > listing["maximum_occupancy"]:
            raise ConflictError(
                f"Listing {listing_id} holds at most {listing['maximum_occupancy']} occupants"
            )

        taken = find_overlapping_booking(conn, listing_id, dates, statuses=COMMITTED_STATUSES)
        if taken is not None:
            raise ConflictError(f"Listing {listing_id} is already booked for {dates}")

        total_amount = round(dates.nights * float(listing["price"]), 2)
        booking_id = insert_booking(conn, listing_id, actor.user_id, dates, guests, total_amount)
        booking = _load(conn, booking_id)

    logger.info(
        "booking_requested",
        booking_id=booking_id,
        listing_id=listing_id,
        renter_id=actor.user_id,
        dates=str(dates),
        guests=guests,
    )
    return booking


def get_booking_for(engine: Engine, actor: Actor, booking_id: int) -> dict[str, Any]:
    """
    Fetch a booking visible to the actor (its renter, the listing owner, or an admin).

    Raises:
        NotFoundError: Unknown booking
        UnauthorizedError: Actor has no relationship to the booking
    """
    with engine.connect() as conn:
        booking = _load(conn, booking_id)
        listing = get_listing(conn, booking["listing_id"])

    if listing is None or not booking_parties(actor, booking, listing):
        raise UnauthorizedError(f"Not permitted to view booking {booking_id}")
    return booking


def list_bookings_for(
    engine: Engine,
    actor: Actor,
    listing_id: Optional[int] = None,
    renter_id: Optional[int] = None,
) -> list[dict[str, Any]]:
    """
    List bookings by listing (owner or admin) or by renter (that renter or admin).

    Raises:
        NotFoundError: Unknown listing
        UnauthorizedError: Actor may not see the requested bookings
    """
    with engine.connect() as conn:
        if listing_id is not None:
            listing = get_listing(conn, listing_id)
            if listing is None:
                raise NotFoundError("Listing", listing_id)
            if not (actor.is_admin or actor.user_id == listing["owner_id"]):
                raise UnauthorizedError(f"Not permitted to view bookings of listing {listing_id}")
        else:
            renter_id = renter_id if renter_id is not None else actor.user_id
            if renter_id is None or not (actor.is_admin or actor.user_id == renter_id):
                raise UnauthorizedError("Not permitted to view these bookings")

        return list_bookings(conn, listing_id=listing_id, renter_id=renter_id)


def transition_booking(
    engine: Engine,
    booking_id: int,
    target: BookingStatus,
    actor: Actor,
    *,
    today: Optional[date] = None,
    reason: Optional[str] = None,
) -> dict[str, Any]:
    """
    Validate and commit one booking status change.

    Runs in a single transaction: the listing row, then the booking row, are
    locked; the transition table and its preconditions are checked; approval
    re-runs the availability check (excluding the booking itself); the status
    is written with a compare-and-swap on the status that was validated; and
    occupancy is recomputed when the change touches ``active``.

    Args:
        engine: SQLAlchemy engine
        booking_id: Booking to move
        target: Requested status
        actor: Who is asking
        today: Calendar date for date preconditions (defaults to UTC today)
        reason: Cancellation or termination reason

    Returns:
        dict: The updated booking row

    Raises:
        NotFoundError: Unknown booking
        InvalidTransitionError: Transition not allowed from the current status,
            a precondition failed, or the booking changed concurrently
        UnauthorizedError: Actor may not perform this transition
        ConflictError: Approval re-check found the dates taken
    """
    today = today or utc_today()

    with engine.begin() as conn:
        listing_id = _load(conn, booking_id)["listing_id"]
        listing = get_listing(conn, listing_id, lock=True)
        booking = _load(conn, booking_id, lock=True)
        if listing is None:
            raise NotFoundError("Listing", listing_id)

        current: BookingStatus = booking["status"]
        dates = DateRange(booking["start_date"], booking["end_date"])
        parties = booking_parties(actor, booking, listing)

        try:
            party = check_booking_transition(
                current, target, parties, dates=dates, today=today, reason=reason
            )
        except InvalidTransitionError:
            _record(current, target, "invalid")
            raise
        except UnauthorizedError:
            _record(current, target, "unauthorized")
            raise

        if target == BookingStatus.APPROVED and not is_available(
            conn, listing_id, dates, exclude_booking_id=booking_id, statuses=COMMITTED_STATUSES
        ):
            _record(current, target, "conflict")
            approval_conflicts.inc()
            logger.warning(
                "booking_approval_conflict",
                booking_id=booking_id,
                listing_id=listing_id,
                dates=str(dates),
            )
            raise ConflictError(f"Listing {listing_id} is no longer available for {dates}")

        extra = _extra_columns(target, reason)
        try:
            swapped = compare_and_set_status(conn, booking_id, current, target, extra)
        except IntegrityError as e:
            # The database refused overlapping committed stays
            _record(current, target, "conflict")
            logger.warning(
                "booking_status_write_rejected", booking_id=booking_id, error=str(e.orig)
            )
            raise ConflictError(
                f"Listing {listing_id} is no longer available for {dates}"
            ) from e
        if not swapped:
            _record(current, target, "invalid")
            raise InvalidTransitionError(current, target, "booking was modified concurrently")

        if BookingStatus.ACTIVE in (current, target):
            recompute_occupancy(conn, listing_id)

        updated = _load(conn, booking_id)

    _record(current, target, "success")
    logger.info(
        "booking_transitioned",
        booking_id=booking_id,
        listing_id=listing_id,
        from_status=current.value,
        to_status=target.value,
        party=party.value,
    )
    return updated


def approve_booking(engine: Engine, booking_id: int, actor: Actor) -> dict[str, Any]:
    return transition_booking(engine, booking_id, BookingStatus.APPROVED, actor)


def reject_booking(engine: Engine, booking_id: int, actor: Actor) -> dict[str, Any]:
    return transition_booking(engine, booking_id, BookingStatus.REJECTED, actor)


def cancel_booking(
    engine: Engine,
    booking_id: int,
    actor: Actor,
    reason: Optional[str] = None,
    today: Optional[date] = None,
) -> dict[str, Any]:
    return transition_booking(
        engine, booking_id, BookingStatus.CANCELLED, actor, today=today, reason=reason
    )


def activate_booking(
    engine: Engine, booking_id: int, actor: Actor, today: Optional[date] = None
) -> dict[str, Any]:
    return transition_booking(engine, booking_id, BookingStatus.ACTIVE, actor, today=today)


def complete_booking(
    engine: Engine, booking_id: int, actor: Actor, today: Optional[date] = None
) -> dict[str, Any]:
    return transition_booking(engine, booking_id, BookingStatus.COMPLETED, actor, today=today)


def terminate_booking(
    engine: Engine, booking_id: int, actor: Actor, reason: Optional[str]
) -> dict[str, Any]:
    return transition_booking(engine, booking_id, BookingStatus.TERMINATED, actor, reason=reason)


def _load(conn: Connection, booking_id: int, lock: bool = False) -> dict[str, Any]:
    booking = get_booking(conn, booking_id, lock=lock)
    if booking is None:
        raise NotFoundError("Booking", booking_id)
    return booking


def _extra_columns(target: BookingStatus, reason: Optional[str]) -> dict[str, Any]:
    if target == BookingStatus.CANCELLED:
        return {"cancelled_at": utc_now(), "cancellation_reason": reason}
    if target == BookingStatus.TERMINATED:
        return {"termination_reason": reason}
    return {}


def _record(current: BookingStatus, target: BookingStatus, outcome: str) -> None:
    booking_transitions.labels(
        from_status=current.value, to_status=target.value, outcome=outcome
    ).inc()
