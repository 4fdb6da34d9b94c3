"""
Integration tests for the booking and availability HTTP endpoints.
"""

from __future__ import annotations

from typing import Any, Callable

import pytest
from fastapi.testclient import TestClient

OWNER_ID = 10
RENTER_ID = 20
OTHER_RENTER_ID = 21


def _request(client: TestClient, headers: dict[str, str], listing_id: int, start: str, end: str) -> Any:
    return client.post(
        "/bookings",
        json={"listingId": listing_id, "startDate": start, "endDate": end, "guests": 1},
        headers=headers,
    )


@pytest.mark.integration
def test_create_booking_returns_camel_case_booking(
    client: TestClient, make_listing: Callable[..., int], as_actor: Callable[..., dict[str, str]]
) -> None:
    listing_id = make_listing(price=45.0)

    response = _request(client, as_actor(RENTER_ID), listing_id, "2025-01-10", "2025-01-12")

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "pending"
    assert body["paymentStatus"] == "pending"
    assert body["listingId"] == listing_id
    assert body["startDate"] == "2025-01-10"
    assert body["totalAmount"] == pytest.approx(90.0)


@pytest.mark.integration
def test_zero_length_booking_is_bad_request(
    client: TestClient, make_listing: Callable[..., int], as_actor: Callable[..., dict[str, str]]
) -> None:
    listing_id = make_listing()

    response = _request(client, as_actor(RENTER_ID), listing_id, "2025-01-10", "2025-01-10")

    assert response.status_code == 400
    assert response.json()["error"] == "InvalidRangeError"


@pytest.mark.integration
def test_second_overlapping_approval_conflicts(
    client: TestClient, make_listing: Callable[..., int], as_actor: Callable[..., dict[str, str]]
) -> None:
    listing_id = make_listing()
    first = _request(client, as_actor(RENTER_ID), listing_id, "2025-01-10", "2025-01-20").json()
    second = _request(
        client, as_actor(OTHER_RENTER_ID), listing_id, "2025-01-15", "2025-01-25"
    ).json()

    ok = client.put(f"/bookings/{first['id']}/approve", headers=as_actor(OWNER_ID))
    conflict = client.put(f"/bookings/{second['id']}/approve", headers=as_actor(OWNER_ID))

    assert ok.status_code == 200
    assert ok.json()["status"] == "approved"
    assert conflict.status_code == 409
    assert conflict.json()["error"] == "ConflictError"


@pytest.mark.integration
def test_invalid_transition_reports_pair(
    client: TestClient, make_listing: Callable[..., int], as_actor: Callable[..., dict[str, str]]
) -> None:
    listing_id = make_listing()
    booking = _request(client, as_actor(RENTER_ID), listing_id, "2025-01-10", "2025-01-20").json()
    client.put(f"/bookings/{booking['id']}/reject", headers=as_actor(OWNER_ID))

    response = client.put(f"/bookings/{booking['id']}/approve", headers=as_actor(OWNER_ID))

    assert response.status_code == 409
    assert response.json()["error"] == "InvalidTransitionError"
    assert response.json()["from"] == "rejected"
    assert response.json()["to"] == "approved"


@pytest.mark.integration
def test_wrong_party_is_forbidden(
    client: TestClient, make_listing: Callable[..., int], as_actor: Callable[..., dict[str, str]]
) -> None:
    listing_id = make_listing()
    booking = _request(client, as_actor(RENTER_ID), listing_id, "2025-01-10", "2025-01-20").json()

    response = client.put(f"/bookings/{booking['id']}/approve", headers=as_actor(RENTER_ID))

    assert response.status_code == 403
    assert response.json()["error"] == "UnauthorizedError"


@pytest.mark.integration
def test_renter_cancels_pending_booking_with_reason(
    client: TestClient, make_listing: Callable[..., int], as_actor: Callable[..., dict[str, str]]
) -> None:
    listing_id = make_listing()
    booking = _request(client, as_actor(RENTER_ID), listing_id, "2030-01-10", "2030-01-20").json()

    response = client.put(
        f"/bookings/{booking['id']}/cancel",
        json={"reason": "Found another place"},
        headers=as_actor(RENTER_ID),
    )

    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"
    assert response.json()["cancellationReason"] == "Found another place"


@pytest.mark.integration
def test_complete_before_activation_is_invalid(
    client: TestClient, make_listing: Callable[..., int], as_actor: Callable[..., dict[str, str]]
) -> None:
    listing_id = make_listing()
    booking = _request(client, as_actor(RENTER_ID), listing_id, "2025-01-10", "2025-01-20").json()

    response = client.put(f"/bookings/{booking['id']}/complete", headers=as_actor(OWNER_ID))

    assert response.status_code == 409


@pytest.mark.integration
def test_terminate_requires_body(
    client: TestClient, make_listing: Callable[..., int], as_actor: Callable[..., dict[str, str]]
) -> None:
    listing_id = make_listing()
    booking = _request(client, as_actor(RENTER_ID), listing_id, "2025-01-10", "2025-01-20").json()

    response = client.put(f"/bookings/{booking['id']}/terminate", headers=as_actor(OWNER_ID))

    assert response.status_code == 422


@pytest.mark.integration
def test_get_and_list_bookings(
    client: TestClient, make_listing: Callable[..., int], as_actor: Callable[..., dict[str, str]]
) -> None:
    listing_id = make_listing()
    booking = _request(client, as_actor(RENTER_ID), listing_id, "2025-01-10", "2025-01-20").json()

    assert client.get(f"/bookings/{booking['id']}", headers=as_actor(OWNER_ID)).status_code == 200
    assert client.get(f"/bookings/{booking['id']}", headers=as_actor(99)).status_code == 403
    assert client.get("/bookings/999", headers=as_actor(OWNER_ID)).status_code == 404

    mine = client.get("/bookings", headers=as_actor(RENTER_ID))
    by_listing = client.get(f"/bookings?listingId={listing_id}", headers=as_actor(OWNER_ID))

    assert [b["id"] for b in mine.json()] == [booking["id"]]
    assert [b["id"] for b in by_listing.json()] == [booking["id"]]


@pytest.mark.integration
def test_availability_endpoint(
    client: TestClient, make_listing: Callable[..., int], as_actor: Callable[..., dict[str, str]]
) -> None:
    listing_id = make_listing()
    _request(client, as_actor(RENTER_ID), listing_id, "2024-01-01", "2024-02-01")

    def available(start: str, end: str) -> Any:
        return client.get(
            "/availability", params={"listingId": listing_id, "startDate": start, "endDate": end}
        )

    assert available("2024-02-01", "2024-03-01").json() == {"available": True}
    assert available("2024-01-15", "2024-01-20").json() == {"available": False}

    bad = available("2024-02-01", "2024-02-01")
    assert bad.status_code == 400
    assert bad.json()["error"] == "InvalidRangeError"

    missing = client.get(
        "/availability", params={"listingId": 999, "startDate": "2024-01-01", "endDate": "2024-01-02"}
    )
    assert missing.status_code == 404
