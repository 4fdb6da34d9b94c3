"""
Central transition tables for bookings, listings and maintenance requests.

All status changes go through ``check_booking_transition``,
``check_listing_transition`` or ``check_maintenance_transition``. A pair
missing from the table raises InvalidTransitionError; a party not listed
for a valid pair raises UnauthorizedError; failed date/reason preconditions raise
InvalidTransitionError carrying the attempted pair.

The availability precondition of ``pending -> approved`` needs the database
and is enforced by ``services.bookings.transition_booking`` inside the same
transaction that commits the status change.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from student_housing.domain.dates import DateRange
from student_housing.domain.errors import InvalidTransitionError, UnauthorizedError
from student_housing.domain.statuses import BookingStatus, ListingStatus, MaintenanceStatus, Party

_B = BookingStatus
_L = ListingStatus
_M = MaintenanceStatus

BOOKING_TRANSITIONS: dict[tuple[BookingStatus, BookingStatus], frozenset[Party]] = {
    (_B.PENDING, _B.APPROVED): frozenset({Party.OWNER}),
    (_B.PENDING, _B.REJECTED): frozenset({Party.OWNER}),
    (_B.PENDING, _B.CANCELLED): frozenset({Party.RENTER}),
    (_B.APPROVED, _B.CANCELLED): frozenset({Party.RENTER, Party.OWNER}),
    (_B.APPROVED, _B.ACTIVE): frozenset({Party.SYSTEM}),
    (_B.ACTIVE, _B.COMPLETED): frozenset({Party.SYSTEM, Party.OWNER}),
    (_B.ACTIVE, _B.TERMINATED): frozenset({Party.OWNER}),
}

LISTING_TRANSITIONS: dict[tuple[ListingStatus, ListingStatus], frozenset[Party]] = {
    (_L.PENDING, _L.APPROVED): frozenset({Party.ADMIN}),
    (_L.PENDING, _L.REJECTED): frozenset({Party.ADMIN}),
    (_L.REJECTED, _L.PENDING): frozenset({Party.OWNER}),
    (_L.APPROVED, _L.ACTIVE): frozenset({Party.OWNER}),
    (_L.APPROVED, _L.INACTIVE): frozenset({Party.OWNER}),
    (_L.ACTIVE, _L.INACTIVE): frozenset({Party.OWNER}),
    (_L.ACTIVE, _L.SOLD): frozenset({Party.OWNER}),
    (_L.ACTIVE, _L.UNDER_MAINTENANCE): frozenset({Party.OWNER}),
    (_L.INACTIVE, _L.ACTIVE): frozenset({Party.OWNER}),
    (_L.INACTIVE, _L.SOLD): frozenset({Party.OWNER}),
    (_L.UNDER_MAINTENANCE, _L.ACTIVE): frozenset({Party.OWNER}),
    (_L.UNDER_MAINTENANCE, _L.INACTIVE): frozenset({Party.OWNER}),
}

MAINTENANCE_TRANSITIONS: dict[tuple[MaintenanceStatus, MaintenanceStatus], frozenset[Party]] = {
    (_M.PENDING, _M.IN_PROGRESS): frozenset({Party.OWNER, Party.ADMIN}),
    (_M.PENDING, _M.RESOLVED): frozenset({Party.OWNER, Party.ADMIN}),
    (_M.PENDING, _M.CANCELLED): frozenset({Party.RENTER, Party.OWNER, Party.ADMIN}),
    (_M.IN_PROGRESS, _M.RESOLVED): frozenset({Party.OWNER, Party.ADMIN}),
    (_M.IN_PROGRESS, _M.CANCELLED): frozenset({Party.RENTER, Party.OWNER, Party.ADMIN}),
}


def allowed_booking_targets(current: BookingStatus) -> set[BookingStatus]:
    return {target for (source, target) in BOOKING_TRANSITIONS if source == current}


def check_booking_transition(
    current: BookingStatus,
    target: BookingStatus,
    parties: frozenset[Party] | set[Party],
    *,
    dates: Optional[DateRange] = None,
    today: Optional[date] = None,
    reason: Optional[str] = None,
) -> Party:
    """
    Validate a booking status change against the transition table.

    Args:
        current: Status the booking is in now
        target: Requested status
        parties: Every role the actor holds for this booking (an owner who
            also rents their own listing holds both)
        dates: The booking's range, required for date preconditions
        today: Calendar date used for date preconditions
        reason: Free-text reason, required for early termination

    Returns:
        Party: The role under which the transition is permitted

    Raises:
        InvalidTransitionError: Pair not in the table, or a precondition failed
        UnauthorizedError: None of the actor's parties may perform this transition
    """
    allowed = BOOKING_TRANSITIONS.get((current, target))
    if allowed is None:
        raise InvalidTransitionError(current, target)

    acting = _pick_party(allowed, parties)
    if acting is None:
        raise UnauthorizedError(
            f"Not permitted to move booking from {current.value} to {target.value}"
        )

    if (current, target) == (_B.APPROVED, _B.CANCELLED):
        stay, day = _require_dates(current, target, dates, today)
        if day >= stay.start:
            raise InvalidTransitionError(current, target, "stay has already started")

    elif (current, target) == (_B.APPROVED, _B.ACTIVE):
        stay, day = _require_dates(current, target, dates, today)
        if day < stay.start:
            raise InvalidTransitionError(current, target, "stay has not started yet")

    elif (current, target) == (_B.ACTIVE, _B.COMPLETED):
        stay, day = _require_dates(current, target, dates, today)
        if day < stay.end:
            raise InvalidTransitionError(current, target, "stay has not ended yet")

    elif (current, target) == (_B.ACTIVE, _B.TERMINATED):
        if not reason or not reason.strip():
            raise InvalidTransitionError(current, target, "a termination reason is required")

    return acting


def check_listing_transition(
    current: ListingStatus,
    target: ListingStatus,
    parties: frozenset[Party] | set[Party],
) -> Party:
    """
    Validate a listing status change against the adjacency table.

    Raises:
        InvalidTransitionError: Pair not in the table
        UnauthorizedError: None of the actor's parties may perform this transition
    """
    allowed = LISTING_TRANSITIONS.get((current, target))
    if allowed is None:
        raise InvalidTransitionError(current, target)

    acting = _pick_party(allowed, parties)
    if acting is None:
        raise UnauthorizedError(
            f"Not permitted to move listing from {current.value} to {target.value}"
        )
    return acting


def check_maintenance_transition(
    current: MaintenanceStatus,
    target: MaintenanceStatus,
    parties: frozenset[Party] | set[Party],
) -> Party:
    """
    Validate a maintenance request status change. Resolved and cancelled are final.

    Raises:
        InvalidTransitionError: Pair not in the table
        UnauthorizedError: None of the actor's parties may perform this transition
    """
    allowed = MAINTENANCE_TRANSITIONS.get((current, target))
    if allowed is None:
        raise InvalidTransitionError(current, target)

    acting = _pick_party(allowed, parties)
    if acting is None:
        raise UnauthorizedError(
            f"Not permitted to move maintenance request from {current.value} to {target.value}"
        )
    return acting


def _pick_party(
    allowed: frozenset[Party], parties: frozenset[Party] | set[Party]
) -> Optional[Party]:
    # Deterministic choice when the actor holds several qualifying roles
    for party in Party:
        if party in allowed and party in parties:
            return party
    return None


def _require_dates(
    current: BookingStatus,
    target: BookingStatus,
    dates: Optional[DateRange],
    today: Optional[date],
) -> tuple[DateRange, date]:
    if dates is None or today is None:
        raise InvalidTransitionError(current, target, "booking dates and today are required")
    return dates, today
