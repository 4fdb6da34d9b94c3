"""
Integration tests for review endpoints.
"""

from __future__ import annotations

from datetime import date
from typing import Callable

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine

from student_housing.domain.actors import SYSTEM_ACTOR, Actor
from student_housing.domain.dates import DateRange
from student_housing.services.bookings import (
    activate_booking,
    approve_booking,
    complete_booking,
    create_booking,
)

RENTER_ID = 20


@pytest.fixture
def completed_booking(db_engine: Engine, make_listing: Callable[..., int]) -> dict:
    listing_id = make_listing()
    stay = DateRange(date(2024, 4, 1), date(2024, 4, 8))
    booking = create_booking(db_engine, Actor(RENTER_ID), listing_id, stay)
    approve_booking(db_engine, booking["id"], Actor(10))
    activate_booking(db_engine, booking["id"], SYSTEM_ACTOR, today=stay.start)
    return complete_booking(db_engine, booking["id"], SYSTEM_ACTOR, today=stay.end)


@pytest.mark.integration
def test_review_flow_updates_listing_rating(
    client: TestClient, completed_booking: dict, as_actor: Callable[..., dict[str, str]]
) -> None:
    listing_id = completed_booking["listing_id"]

    created = client.post(
        f"/bookings/{completed_booking['id']}/review",
        json={"rating": 4, "comment": "Clean and quiet"},
        headers=as_actor(RENTER_ID),
    )
    duplicate = client.post(
        f"/bookings/{completed_booking['id']}/review",
        json={"rating": 5},
        headers=as_actor(RENTER_ID),
    )

    assert created.status_code == 201
    assert created.json()["reviewerId"] == RENTER_ID
    assert duplicate.status_code == 409

    listing = client.get(f"/listings/{listing_id}").json()
    assert listing["rating"] == pytest.approx(4.0)
    assert listing["reviewCount"] == 1

    reviews = client.get(f"/listings/{listing_id}/reviews").json()
    assert [review["comment"] for review in reviews] == ["Clean and quiet"]

    deleted = client.delete(f"/reviews/{created.json()['id']}", headers=as_actor(RENTER_ID))
    assert deleted.status_code == 204
    assert client.get(f"/listings/{listing_id}").json()["reviewCount"] == 0


@pytest.mark.integration
def test_rating_out_of_range_is_rejected(
    client: TestClient, completed_booking: dict, as_actor: Callable[..., dict[str, str]]
) -> None:
    response = client.post(
        f"/bookings/{completed_booking['id']}/review",
        json={"rating": 6},
        headers=as_actor(RENTER_ID),
    )

    assert response.status_code == 422
