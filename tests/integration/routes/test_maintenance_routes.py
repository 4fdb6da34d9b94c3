"""
Integration tests for the maintenance request endpoints.
"""

from __future__ import annotations

from typing import Callable

import pytest
from fastapi.testclient import TestClient

OWNER_ID = 10
RENTER_ID = 20


@pytest.fixture
def approved_booking_id(
    client: TestClient, make_listing: Callable[..., int], as_actor: Callable[..., dict[str, str]]
) -> int:
    listing_id = make_listing()
    booking = client.post(
        "/bookings",
        json={"listingId": listing_id, "startDate": "2025-01-10", "endDate": "2025-03-10"},
        headers=as_actor(RENTER_ID),
    ).json()
    client.put(f"/bookings/{booking['id']}/approve", headers=as_actor(OWNER_ID))
    return booking["id"]


def _report(client: TestClient, headers: dict[str, str], booking_id: int) -> dict:
    response = client.post(
        "/maintenance-requests",
        json={
            "bookingId": booking_id,
            "title": "No hot water",
            "description": "Boiler shows an error light",
            "issueType": "plumbing",
            "priority": "high",
        },
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()


@pytest.mark.integration
def test_report_and_fetch_request(
    client: TestClient, approved_booking_id: int, as_actor: Callable[..., dict[str, str]]
) -> None:
    request = _report(client, as_actor(RENTER_ID), approved_booking_id)

    assert request["status"] == "pending"
    assert request["issueType"] == "plumbing"
    assert request["priority"] == "high"
    assert request["ownerId"] == OWNER_ID

    fetched = client.get(f"/maintenance-requests/{request['id']}", headers=as_actor(OWNER_ID))
    hidden = client.get(f"/maintenance-requests/{request['id']}", headers=as_actor(99))

    assert fetched.status_code == 200
    assert fetched.json()["bookingId"] == approved_booking_id
    assert hidden.status_code == 403


@pytest.mark.integration
def test_report_validates_payload(
    client: TestClient, approved_booking_id: int, as_actor: Callable[..., dict[str, str]]
) -> None:
    response = client.post(
        "/maintenance-requests",
        json={
            "bookingId": approved_booking_id,
            "title": "X",
            "description": "Y",
            "issueType": "ghosts",
        },
        headers=as_actor(RENTER_ID),
    )

    assert response.status_code == 422


@pytest.mark.integration
def test_patch_resolves_then_renter_rates(
    client: TestClient, approved_booking_id: int, as_actor: Callable[..., dict[str, str]]
) -> None:
    request_id = _report(client, as_actor(RENTER_ID), approved_booking_id)["id"]

    resolved = client.patch(
        f"/maintenance-requests/{request_id}",
        json={"status": "resolved", "resolutionNotes": "Boiler reset"},
        headers=as_actor(OWNER_ID),
    )
    rated = client.patch(
        f"/maintenance-requests/{request_id}",
        json={"renterRating": 5, "renterFeedback": "Same day"},
        headers=as_actor(RENTER_ID),
    )

    assert resolved.status_code == 200
    assert resolved.json()["status"] == "resolved"
    assert resolved.json()["resolvedAt"] is not None
    assert rated.status_code == 200
    assert rated.json()["renterRating"] == 5


@pytest.mark.integration
def test_patch_refusals_map_to_error_kinds(
    client: TestClient, approved_booking_id: int, as_actor: Callable[..., dict[str, str]]
) -> None:
    request_id = _report(client, as_actor(RENTER_ID), approved_booking_id)["id"]

    by_renter = client.patch(
        f"/maintenance-requests/{request_id}",
        json={"status": "resolved"},
        headers=as_actor(RENTER_ID),
    )
    out_of_range = client.patch(
        f"/maintenance-requests/{request_id}",
        json={"renterRating": 0},
        headers=as_actor(RENTER_ID),
    )

    assert by_renter.status_code == 403
    assert out_of_range.status_code == 422

    client.patch(
        f"/maintenance-requests/{request_id}",
        json={"status": "cancelled"},
        headers=as_actor(RENTER_ID),
    )
    reopened = client.patch(
        f"/maintenance-requests/{request_id}",
        json={"status": "pending"},
        headers=as_actor(OWNER_ID),
    )
    assert reopened.status_code == 409
    assert reopened.json()["error"] == "InvalidTransitionError"


@pytest.mark.integration
def test_list_and_delete_requests(
    client: TestClient, approved_booking_id: int, as_actor: Callable[..., dict[str, str]]
) -> None:
    request_id = _report(client, as_actor(RENTER_ID), approved_booking_id)["id"]

    listed = client.get("/maintenance-requests", headers=as_actor(OWNER_ID))
    anonymous = client.get("/maintenance-requests")
    deleted = client.delete(f"/maintenance-requests/{request_id}", headers=as_actor(RENTER_ID))

    assert listed.status_code == 200
    assert [r["id"] for r in listed.json()["data"]] == [request_id]
    assert listed.json()["pagination"]["total"] == 1
    assert anonymous.status_code == 403
    assert deleted.status_code == 204
    assert client.get(
        f"/maintenance-requests/{request_id}", headers=as_actor(RENTER_ID)
    ).status_code == 404
