"""Listing catalogue: CRUD, status changes, filtered and radius search."""

from __future__ import annotations

import dataclasses
from typing import Any, Optional

import structlog
from sqlalchemy.engine import Engine

from student_housing.db.readers.bookings import find_bookings_in_status
from student_housing.db.readers.listings import ListingFilters, get_listing, search_listings
from student_housing.db.writers.listings import (
    delete_listing,
    insert_listing,
    update_listing,
    update_listing_status,
)
from student_housing.domain.actors import Actor, listing_parties
from student_housing.domain.errors import ConflictError, NotFoundError, UnauthorizedError
from student_housing.domain.geo import GeoPoint, coerce_coordinates, filter_by_radius
from student_housing.domain.statuses import COMMITTED_STATUSES, ListingStatus, Party
from student_housing.domain.transitions import check_listing_transition
from student_housing.metrics import (
    listing_transitions,
    nearby_listings_dropped,
    nearby_search_duration,
)
from student_housing.services.paging import page_info

logger = structlog.get_logger(__name__)


def create_listing(engine: Engine, actor: Actor, data: dict[str, Any]) -> dict[str, Any]:
    """
    Create a listing owned by the actor. New listings start in ``pending``.

    Raises:
        UnauthorizedError: Anonymous actor
    """
    if actor.user_id is None:
        raise UnauthorizedError("An owner identity is required to create a listing")

    with engine.begin() as conn:
        listing_id = insert_listing(conn, actor.user_id, data)
        listing = get_listing(conn, listing_id)

    logger.info("listing_created", listing_id=listing_id, owner_id=actor.user_id)
    return listing  # type: ignore[return-value]


def get_listing_or_404(engine: Engine, listing_id: int) -> dict[str, Any]:
    with engine.connect() as conn:
        listing = get_listing(conn, listing_id)
    if listing is None:
        raise NotFoundError("Listing", listing_id)
    return listing


def search(
    engine: Engine, filters: ListingFilters, page: int, page_size: int
) -> tuple[list[dict[str, Any]], dict[str, int]]:
    """
    Page through listings matching the filters.

    Returns:
        tuple: (listings on the page, pagination info)
    """
    with engine.connect() as conn:
        rows, total = search_listings(conn, filters, page, page_size)
    return rows, page_info(page, page_size, total, len(rows))


def update_listing_details(
    engine: Engine, actor: Actor, listing_id: int, data: dict[str, Any]
) -> dict[str, Any]:
    """
    Update editable listing fields (owner or admin).

    Raises:
        NotFoundError: Unknown listing
        UnauthorizedError: Actor is neither the owner nor an admin
        ConflictError: maximum_occupancy lowered below current occupancy
    """
    with engine.begin() as conn:
        listing = get_listing(conn, listing_id, lock=True)
        if listing is None:
            raise NotFoundError("Listing", listing_id)
        if not listing_parties(actor, listing) & {Party.OWNER, Party.ADMIN}:
            raise UnauthorizedError(f"Not permitted to edit listing {listing_id}")

        maximum = data.get("maximum_occupancy")
        if maximum is not None and maximum < listing["current_occupancy"]:
            raise ConflictError(
                f"maximum_occupancy cannot drop below current occupancy "
                f"({listing['current_occupancy']})"
            )

        if data:
            update_listing(conn, listing_id, data)
        updated = get_listing(conn, listing_id)

    logger.info("listing_updated", listing_id=listing_id, fields=sorted(data))
    return updated  # type: ignore[return-value]


def change_listing_status(
    engine: Engine, actor: Actor, listing_id: int, target: ListingStatus
) -> dict[str, Any]:
    """
    Move a listing along its status adjacency table.

    Raises:
        NotFoundError: Unknown listing
        InvalidTransitionError: Transition not in the table
        UnauthorizedError: Actor may not perform this transition
    """
    with engine.begin() as conn:
        listing = get_listing(conn, listing_id, lock=True)
        if listing is None:
            raise NotFoundError("Listing", listing_id)

        current: ListingStatus = listing["status"]
        party = check_listing_transition(current, target, listing_parties(actor, listing))
        update_listing_status(conn, listing_id, target)
        updated = get_listing(conn, listing_id)

    listing_transitions.labels(from_status=current.value, to_status=target.value).inc()
    logger.info(
        "listing_status_changed",
        listing_id=listing_id,
        from_status=current.value,
        to_status=target.value,
        party=party.value,
    )
    return updated  # type: ignore[return-value]


def remove_listing(engine: Engine, actor: Actor, listing_id: int) -> None:
    """
    Delete a listing (owner or admin) that holds no approved or active bookings.

    Raises:
        NotFoundError: Unknown listing
        UnauthorizedError: Actor is neither the owner nor an admin
        ConflictError: Listing still has committed bookings
    """
    with engine.begin() as conn:
        listing = get_listing(conn, listing_id, lock=True)
        if listing is None:
            raise NotFoundError("Listing", listing_id)
        if not listing_parties(actor, listing) & {Party.OWNER, Party.ADMIN}:
            raise UnauthorizedError(f"Not permitted to delete listing {listing_id}")
        if find_bookings_in_status(conn, listing_id, COMMITTED_STATUSES):
            raise ConflictError(f"Listing {listing_id} has approved or active bookings")

        delete_listing(conn, listing_id)

    logger.info("listing_deleted", listing_id=listing_id)


def nearby_listings(
    engine: Engine,
    center: GeoPoint,
    radius_km: float,
    page: int,
    page_size: int,
    filters: Optional[ListingFilters] = None,
) -> tuple[list[tuple[dict[str, Any], float]], dict[str, int]]:
    """
    Radius search over one page of active listings.

    The database returns a page of candidates (active, optionally
    price/text-filtered) and the radius filter runs over that page only. A
    page can therefore hold fewer than ``page_size`` matches even when later
    pages still contain nearby listings; the pagination info reports the
    candidate total and the number actually returned.

    Returns:
        tuple: ((listing, distance_km) pairs nearest first, pagination info)
    """
    if filters is None:
        candidate_filters = ListingFilters(status=ListingStatus.ACTIVE)
    else:
        candidate_filters = dataclasses.replace(filters, status=ListingStatus.ACTIVE)

    with nearby_search_duration.time():
        with engine.connect() as conn:
            candidates, total = search_listings(conn, candidate_filters, page, page_size)
        matches = filter_by_radius(candidates, center, radius_km)

    dropped = sum(
        1 for listing in candidates if coerce_coordinates(listing["lat"], listing["lng"]) is None
    )
    if dropped:
        nearby_listings_dropped.inc(dropped)

    logger.info(
        "nearby_search",
        lat=center.lat,
        lng=center.lng,
        radius_km=radius_km,
        candidates=len(candidates),
        matches=len(matches),
    )
    return matches, page_info(page, page_size, total, len(matches))
