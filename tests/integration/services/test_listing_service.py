"""
Integration tests for the listing catalogue and radius search.
"""

from __future__ import annotations

from datetime import date
from typing import Callable

import pytest
from sqlalchemy.engine import Engine

from student_housing.db.readers.listings import ListingFilters
from student_housing.domain.actors import SYSTEM_ACTOR, Actor
from student_housing.domain.dates import DateRange
from student_housing.domain.errors import (
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    UnauthorizedError,
)
from student_housing.domain.geo import GeoPoint
from student_housing.domain.statuses import ListingStatus
from student_housing.services.bookings import activate_booking, approve_booking, create_booking
from student_housing.services.listings import (
    change_listing_status,
    create_listing,
    get_listing_or_404,
    nearby_listings,
    remove_listing,
    search,
    update_listing_details,
)

OWNER = Actor(10)
STRANGER = Actor(99)
ADMIN = Actor(1, role="admin")
RENTER = Actor(20)

LA = GeoPoint(34.0522, -118.2437)

NEW_LISTING = {
    "title": "Studio by the library",
    "description": "Quiet, furnished",
    "price": 75.5,
    "maximum_occupancy": 2,
    "lat": 34.05,
    "lng": -118.25,
}


@pytest.mark.integration
def test_new_listing_starts_pending(db_engine: Engine) -> None:
    listing = create_listing(db_engine, OWNER, NEW_LISTING)

    assert listing["status"] == ListingStatus.PENDING
    assert listing["owner_id"] == 10
    assert listing["current_occupancy"] == 0
    assert listing["rating"] == 0
    assert listing["review_count"] == 0


@pytest.mark.integration
def test_status_workflow_from_pending_to_active(db_engine: Engine) -> None:
    listing_id = create_listing(db_engine, OWNER, NEW_LISTING)["id"]

    with pytest.raises(UnauthorizedError):
        change_listing_status(db_engine, OWNER, listing_id, ListingStatus.APPROVED)

    change_listing_status(db_engine, ADMIN, listing_id, ListingStatus.APPROVED)
    listing = change_listing_status(db_engine, OWNER, listing_id, ListingStatus.ACTIVE)

    assert listing["status"] == ListingStatus.ACTIVE


@pytest.mark.integration
def test_skipping_approval_is_invalid(db_engine: Engine) -> None:
    listing_id = create_listing(db_engine, OWNER, NEW_LISTING)["id"]

    with pytest.raises(InvalidTransitionError):
        change_listing_status(db_engine, OWNER, listing_id, ListingStatus.ACTIVE)


@pytest.mark.integration
def test_only_owner_or_admin_may_edit(db_engine: Engine, make_listing: Callable[..., int]) -> None:
    listing_id = make_listing()

    with pytest.raises(UnauthorizedError):
        update_listing_details(db_engine, STRANGER, listing_id, {"price": 1.0})

    updated = update_listing_details(db_engine, OWNER, listing_id, {"price": 60.0, "title": "New"})
    assert updated["price"] == pytest.approx(60.0)
    assert updated["title"] == "New"


@pytest.mark.integration
def test_capacity_cannot_drop_below_occupancy(
    db_engine: Engine, make_listing: Callable[..., int]
) -> None:
    listing_id = make_listing(maximum_occupancy=3)
    stay = DateRange(date(2025, 5, 1), date(2025, 5, 10))
    booking = create_booking(db_engine, RENTER, listing_id, stay, guests=2)
    approve_booking(db_engine, booking["id"], OWNER)
    activate_booking(db_engine, booking["id"], SYSTEM_ACTOR, today=stay.start)

    with pytest.raises(ConflictError):
        update_listing_details(db_engine, OWNER, listing_id, {"maximum_occupancy": 1})

    updated = update_listing_details(db_engine, OWNER, listing_id, {"maximum_occupancy": 2})
    assert updated["maximum_occupancy"] == 2


@pytest.mark.integration
def test_delete_refused_while_bookings_are_committed(
    db_engine: Engine, make_listing: Callable[..., int]
) -> None:
    listing_id = make_listing()
    booking = create_booking(
        db_engine, RENTER, listing_id, DateRange(date(2025, 6, 1), date(2025, 6, 8))
    )
    approve_booking(db_engine, booking["id"], OWNER)

    with pytest.raises(ConflictError):
        remove_listing(db_engine, OWNER, listing_id)


@pytest.mark.integration
def test_delete_listing(db_engine: Engine, make_listing: Callable[..., int]) -> None:
    listing_id = make_listing()

    with pytest.raises(UnauthorizedError):
        remove_listing(db_engine, STRANGER, listing_id)

    remove_listing(db_engine, OWNER, listing_id)

    with pytest.raises(NotFoundError):
        get_listing_or_404(db_engine, listing_id)


@pytest.mark.integration
def test_search_filters_and_paginates(db_engine: Engine, make_listing: Callable[..., int]) -> None:
    make_listing(title="Cheap room", price=30.0)
    make_listing(title="Loft near campus", price=90.0)
    make_listing(title="Penthouse", price=300.0)

    rows, pagination = search(db_engine, ListingFilters(min_price=50, max_price=200), 1, 10)
    assert [row["title"] for row in rows] == ["Loft near campus"]
    assert pagination["total"] == 1

    rows, pagination = search(db_engine, ListingFilters(q="CAMPUS"), 1, 10)
    assert [row["title"] for row in rows] == ["Loft near campus"]

    rows, pagination = search(db_engine, ListingFilters(), 2, 2)
    assert len(rows) == 1
    assert pagination == {"page": 2, "page_size": 2, "total": 3, "total_pages": 2, "returned": 1}


@pytest.mark.integration
def test_nearby_returns_active_listings_within_radius(
    db_engine: Engine, make_listing: Callable[..., int]
) -> None:
    near = make_listing(title="Near", lat=34.05, lng=-118.25)
    make_listing(title="New York", lat=40.7128, lng=-74.0060)
    make_listing(title="Inactive near", lat=34.05, lng=-118.25, status=ListingStatus.INACTIVE)
    make_listing(title="No coordinates")

    matches, pagination = nearby_listings(db_engine, LA, 5, 1, 20)

    assert [listing["id"] for listing, _ in matches] == [near]
    assert matches[0][1] == pytest.approx(0.63, abs=0.01)
    assert pagination["total"] == 3
    assert pagination["returned"] == 1


@pytest.mark.integration
def test_nearby_filters_one_candidate_page_only(
    db_engine: Engine, make_listing: Callable[..., int]
) -> None:
    # Newest first: the far listing is created last and fills page 1
    near = make_listing(title="Near", lat=34.05, lng=-118.25)
    make_listing(title="Far", lat=40.7128, lng=-74.0060)

    first, first_page = nearby_listings(db_engine, LA, 5, 1, 1)
    second, _ = nearby_listings(db_engine, LA, 5, 2, 1)

    assert first == []
    assert first_page["returned"] == 0
    assert first_page["total_pages"] == 2
    assert [listing["id"] for listing, _ in second] == [near]


@pytest.mark.integration
def test_nearby_leaves_caller_filters_untouched(
    db_engine: Engine, make_listing: Callable[..., int]
) -> None:
    make_listing(title="Near", lat=34.05, lng=-118.25, price=40.0)
    filters = ListingFilters(max_price=100.0)

    matches, _ = nearby_listings(db_engine, LA, 5, 1, 20, filters)

    assert len(matches) == 1
    assert filters.status is None
    assert filters.max_price == 100.0
