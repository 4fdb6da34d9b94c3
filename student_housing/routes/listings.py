from typing import Any, Optional

import structlog
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.engine import Engine

from student_housing.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from student_housing.db.readers.listings import ListingFilters
from student_housing.dependencies import get_actor, get_db_engine
from student_housing.domain.actors import Actor
from student_housing.domain.geo import GeoPoint
from student_housing.domain.statuses import ListingStatus
from student_housing.routes._helpers import run_or_500, validate_coordinates_or_400
from student_housing.schemas.listings import (
    ListingCreatePayload,
    ListingOut,
    ListingPage,
    ListingStatusPayload,
    ListingUpdatePayload,
    NearbyListingPage,
)
from student_housing.services.listings import (
    change_listing_status,
    create_listing,
    get_listing_or_404,
    nearby_listings,
    remove_listing,
    search,
    update_listing_details,
)

logger = structlog.get_logger(__name__)
router = APIRouter()

# Columns a PATCH may reset to null
CLEARABLE_FIELDS = frozenset({"lat", "lng"})


@router.post("/listings", status_code=status.HTTP_201_CREATED, response_model=ListingOut)
def post_listing(
    payload: ListingCreatePayload,
    engine: Engine = Depends(get_db_engine),
    actor: Actor = Depends(get_actor),
) -> dict[str, Any]:
    return run_or_500(
        "listing_creation_failed",
        lambda: create_listing(engine, actor, payload.model_dump()),
    )


@router.get("/listings", response_model=ListingPage)
def get_listings(
    min_price: Optional[float] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[float] = Query(None, alias="maxPrice", ge=0),
    listing_status: Optional[ListingStatus] = Query(None, alias="status"),
    q: Optional[str] = Query(None, description="Substring of title or description"),
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, alias="pageSize", ge=1, le=MAX_PAGE_SIZE),
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """
    Page through the catalogue, newest first.

    Returns:
        dict: {"data": [...], "pagination": {page, pageSize, total, totalPages, returned}}
    """
    filters = ListingFilters(
        min_price=min_price, max_price=max_price, status=listing_status, q=q
    )
    rows, pagination = run_or_500(
        "listing_search_failed", lambda: search(engine, filters, page, page_size)
    )
    return {"data": rows, "pagination": pagination}


@router.get("/listings/nearby", response_model=NearbyListingPage)
def get_nearby_listings(
    lat: float = Query(..., description="Search center latitude"),
    lng: float = Query(..., description="Search center longitude"),
    radius_km: float = Query(..., alias="radiusKm", ge=0, description="Search radius in km"),
    min_price: Optional[float] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[float] = Query(None, alias="maxPrice", ge=0),
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, alias="pageSize", ge=1, le=MAX_PAGE_SIZE),
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """
    Active listings within radiusKm of (lat, lng), nearest first.

    The distance filter runs over one page of active candidates, so a page
    may hold fewer than pageSize results; ``pagination.total`` counts the
    candidates and ``pagination.returned`` the listings on this page.
    """
    center = GeoPoint(*validate_coordinates_or_400(lat, lng))
    filters = ListingFilters(min_price=min_price, max_price=max_price)

    matches, pagination = run_or_500(
        "nearby_search_failed",
        lambda: nearby_listings(engine, center, radius_km, page, page_size, filters),
    )
    data = [{**listing, "distance_km": round(distance, 3)} for listing, distance in matches]
    return {"data": data, "pagination": pagination}


@router.get("/listings/{listing_id}", response_model=ListingOut)
def get_listing(listing_id: int, engine: Engine = Depends(get_db_engine)) -> dict[str, Any]:
    return run_or_500("listing_fetch_failed", lambda: get_listing_or_404(engine, listing_id))


@router.patch("/listings/{listing_id}", response_model=ListingOut)
def patch_listing(
    listing_id: int,
    payload: ListingUpdatePayload,
    engine: Engine = Depends(get_db_engine),
    actor: Actor = Depends(get_actor),
) -> dict[str, Any]:
    """
    Update listing fields (owner or admin). Only fields sent are changed.

    Sending null for lat or lng clears the coordinate; null for any other
    field leaves it unchanged.
    """
    data = {
        field: value
        for field, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or field in CLEARABLE_FIELDS
    }
    return run_or_500(
        "listing_update_failed",
        lambda: update_listing_details(engine, actor, listing_id, data),
    )


@router.put("/listings/{listing_id}/status", response_model=ListingOut)
def put_listing_status(
    listing_id: int,
    payload: ListingStatusPayload,
    engine: Engine = Depends(get_db_engine),
    actor: Actor = Depends(get_actor),
) -> dict[str, Any]:
    return run_or_500(
        "listing_status_change_failed",
        lambda: change_listing_status(engine, actor, listing_id, payload.status),
    )


@router.delete("/listings/{listing_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_listing(
    listing_id: int,
    engine: Engine = Depends(get_db_engine),
    actor: Actor = Depends(get_actor),
) -> Response:
    run_or_500("listing_deletion_failed", lambda: remove_listing(engine, actor, listing_id))
    logger.info("listing_delete_requested", listing_id=listing_id, actor_id=actor.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
