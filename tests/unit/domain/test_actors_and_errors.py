"""
Unit tests for actor party resolution and the error taxonomy.
"""

from __future__ import annotations

import pytest

from student_housing.domain.actors import (
    SYSTEM_ACTOR,
    Actor,
    booking_parties,
    listing_parties,
    maintenance_parties,
)
from student_housing.domain.errors import (
    ConflictError,
    InvalidInputError,
    InvalidRangeError,
    InvalidTransitionError,
    NotFoundError,
    UnauthorizedError,
)
from student_housing.domain.statuses import BookingStatus, Party

LISTING = {"owner_id": 10}
BOOKING = {"renter_id": 20}


@pytest.mark.unit
def test_owner_and_renter_parties() -> None:
    assert booking_parties(Actor(10), BOOKING, LISTING) == {Party.OWNER}
    assert booking_parties(Actor(20), BOOKING, LISTING) == {Party.RENTER}
    assert booking_parties(Actor(99), BOOKING, LISTING) == set()


@pytest.mark.unit
def test_admin_and_system_roles() -> None:
    assert listing_parties(Actor(1, role="admin"), LISTING) == {Party.ADMIN}
    assert listing_parties(SYSTEM_ACTOR, LISTING) == {Party.SYSTEM}


@pytest.mark.unit
def test_anonymous_actor_holds_no_party() -> None:
    assert booking_parties(Actor(None), {"renter_id": 20}, LISTING) == set()


@pytest.mark.unit
def test_maintenance_request_parties_come_from_its_own_columns() -> None:
    request = {"renter_id": 20, "owner_id": 10}

    assert maintenance_parties(Actor(20), request) == {Party.RENTER}
    assert maintenance_parties(Actor(10), request) == {Party.OWNER}
    assert maintenance_parties(Actor(99), request) == set()


@pytest.mark.unit
@pytest.mark.parametrize(
    "error,status_code,kind",
    [
        (NotFoundError("Listing", 7), 404, "NotFoundError"),
        (InvalidRangeError("bad range"), 400, "InvalidRangeError"),
        (InvalidInputError("bad rating"), 400, "InvalidInputError"),
        (InvalidTransitionError(BookingStatus.PENDING, BookingStatus.ACTIVE), 409, "InvalidTransitionError"),
        (ConflictError("taken"), 409, "ConflictError"),
        (UnauthorizedError("no"), 403, "UnauthorizedError"),
    ],
)
def test_error_status_codes_and_kinds(error: Exception, status_code: int, kind: str) -> None:
    assert error.status_code == status_code  # type: ignore[attr-defined]
    assert error.to_dict()["error"] == kind  # type: ignore[attr-defined]


@pytest.mark.unit
def test_invalid_transition_payload_names_the_pair() -> None:
    error = InvalidTransitionError(BookingStatus.ACTIVE, BookingStatus.TERMINATED, "a reason is required")

    assert error.to_dict() == {
        "error": "InvalidTransitionError",
        "detail": "Cannot transition from active to terminated: a reason is required",
        "from": "active",
        "to": "terminated",
    }


@pytest.mark.unit
def test_not_found_message() -> None:
    assert NotFoundError("Booking", 3).message == "Booking 3 not found"
