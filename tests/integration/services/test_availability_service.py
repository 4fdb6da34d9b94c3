"""
Integration tests for availability checks against a real schema.
"""

from __future__ import annotations

from datetime import date
from typing import Callable

import pytest
from prometheus_client import REGISTRY
from sqlalchemy.engine import Engine

from student_housing.domain.actors import Actor
from student_housing.domain.dates import DateRange
from student_housing.domain.errors import NotFoundError
from student_housing.domain.statuses import COMMITTED_STATUSES, ListingStatus
from student_housing.services.availability import find_overlapping_booking, is_available
from student_housing.services.bookings import approve_booking, create_booking

OWNER = Actor(10)
RENTER = Actor(20)

JAN = DateRange(date(2024, 1, 1), date(2024, 2, 1))


def _check(engine: Engine, listing_id: int, start: date, end: date) -> bool:
    with engine.connect() as conn:
        return is_available(conn, listing_id, DateRange(start, end))


@pytest.mark.integration
def test_empty_listing_is_available(db_engine: Engine, make_listing: Callable[..., int]) -> None:
    listing_id = make_listing()

    assert _check(db_engine, listing_id, date(2024, 1, 1), date(2024, 1, 5))


@pytest.mark.integration
def test_pending_booking_blocks_overlap_but_not_adjacent_range(
    db_engine: Engine, make_listing: Callable[..., int]
) -> None:
    listing_id = make_listing()
    create_booking(db_engine, RENTER, listing_id, JAN)

    assert not _check(db_engine, listing_id, date(2024, 1, 15), date(2024, 2, 15))
    assert _check(db_engine, listing_id, date(2024, 2, 1), date(2024, 3, 1))
    assert _check(db_engine, listing_id, date(2023, 12, 1), date(2024, 1, 1))


@pytest.mark.integration
def test_availability_check_is_idempotent(db_engine: Engine, make_listing: Callable[..., int]) -> None:
    listing_id = make_listing()
    create_booking(db_engine, RENTER, listing_id, JAN)

    results = [_check(db_engine, listing_id, date(2024, 1, 10), date(2024, 1, 20)) for _ in range(3)]

    assert results == [False, False, False]


@pytest.mark.integration
@pytest.mark.parametrize(
    "status", [ListingStatus.PENDING, ListingStatus.INACTIVE, ListingStatus.UNDER_MAINTENANCE]
)
def test_non_active_listing_is_never_available(
    db_engine: Engine, make_listing: Callable[..., int], status: ListingStatus
) -> None:
    listing_id = make_listing(status=status)
    before = REGISTRY.get_sample_value(
        "housing_availability_checks_total", {"result": "listing_inactive"}
    ) or 0.0

    assert not _check(db_engine, listing_id, date(2024, 1, 1), date(2024, 1, 5))
    after = REGISTRY.get_sample_value(
        "housing_availability_checks_total", {"result": "listing_inactive"}
    )
    assert after == before + 1


@pytest.mark.integration
def test_unknown_listing_raises_not_found(db_engine: Engine) -> None:
    with pytest.raises(NotFoundError):
        _check(db_engine, 999, date(2024, 1, 1), date(2024, 1, 5))


@pytest.mark.integration
def test_excluding_a_booking_ignores_it(db_engine: Engine, make_listing: Callable[..., int]) -> None:
    listing_id = make_listing()
    booking = create_booking(db_engine, RENTER, listing_id, JAN)

    with db_engine.connect() as conn:
        assert not is_available(conn, listing_id, JAN)
        assert is_available(conn, listing_id, JAN, exclude_booking_id=booking["id"])


@pytest.mark.integration
def test_committed_statuses_ignore_pending_requests(
    db_engine: Engine, make_listing: Callable[..., int]
) -> None:
    listing_id = make_listing()
    pending = create_booking(db_engine, RENTER, listing_id, JAN)

    with db_engine.connect() as conn:
        assert is_available(conn, listing_id, JAN, statuses=COMMITTED_STATUSES)

    approve_booking(db_engine, pending["id"], OWNER)

    with db_engine.connect() as conn:
        overlapping = find_overlapping_booking(conn, listing_id, JAN, statuses=COMMITTED_STATUSES)
    assert overlapping is not None
    assert overlapping["id"] == pending["id"]
