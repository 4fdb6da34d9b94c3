"""
Reviews and listing rating aggregates.

A listing's ``rating`` and ``review_count`` are derived data. Every write
path that adds or removes a review calls ``recompute_listing_rating`` inside
its own transaction, and ``recalculate_all_ratings`` repairs any drift.
"""

from __future__ import annotations

from typing import Any

import structlog
from sqlalchemy.engine import Connection, Engine

from student_housing.db.readers.bookings import get_booking
from student_housing.db.readers.listings import get_listing, list_listing_ids
from student_housing.db.readers.reviews import (
    get_rating_stats,
    get_review,
    list_reviews_for_listing,
    review_exists_for_booking,
)
from student_housing.db.writers.listings import update_listing_rating
from student_housing.db.writers.reviews import delete_review, insert_review
from student_housing.domain.actors import Actor
from student_housing.domain.errors import (
    ConflictError,
    InvalidInputError,
    NotFoundError,
    UnauthorizedError,
)
from student_housing.domain.statuses import BookingStatus

logger = structlog.get_logger(__name__)


def create_review(
    engine: Engine, actor: Actor, booking_id: int, rating: int, comment: str = ""
) -> dict[str, Any]:
    """
    Review a completed booking. Only its renter may, and only once.

    Raises:
        NotFoundError: Unknown booking
        UnauthorizedError: Actor is not the booking's renter
        InvalidInputError: Rating outside 1 to 5
        ConflictError: Booking not completed or already reviewed
    """
    if not 1 <= rating <= 5:
        raise InvalidInputError("rating must be between 1 and 5")

    with engine.begin() as conn:
        booking = get_booking(conn, booking_id)
        if booking is None:
            raise NotFoundError("Booking", booking_id)
        if actor.user_id is None or actor.user_id != booking["renter_id"]:
            raise UnauthorizedError(f"Only the renter may review booking {booking_id}")
        if booking["status"] != BookingStatus.COMPLETED:
            raise ConflictError(f"Booking {booking_id} is not completed")
        if review_exists_for_booking(conn, booking_id):
            raise ConflictError(f"Booking {booking_id} has already been reviewed")

        listing_id = booking["listing_id"]
        review_id = insert_review(conn, listing_id, booking_id, actor.user_id, rating, comment)
        recompute_listing_rating(conn, listing_id)
        review = get_review(conn, review_id)

    logger.info(
        "review_created", review_id=review_id, booking_id=booking_id, listing_id=listing_id
    )
    return review  # type: ignore[return-value]


def remove_review(engine: Engine, actor: Actor, review_id: int) -> None:
    """
    Delete a review. Only its author may.

    Raises:
        NotFoundError: Unknown review
        UnauthorizedError: Actor is not the author
    """
    with engine.begin() as conn:
        review = get_review(conn, review_id)
        if review is None:
            raise NotFoundError("Review", review_id)
        if actor.user_id is None or actor.user_id != review["reviewer_id"]:
            raise UnauthorizedError(f"Only the author may delete review {review_id}")

        delete_review(conn, review_id)
        recompute_listing_rating(conn, review["listing_id"])

    logger.info("review_deleted", review_id=review_id, listing_id=review["listing_id"])


def list_reviews(engine: Engine, listing_id: int) -> list[dict[str, Any]]:
    with engine.connect() as conn:
        if get_listing(conn, listing_id) is None:
            raise NotFoundError("Listing", listing_id)
        return list_reviews_for_listing(conn, listing_id)


def recompute_listing_rating(conn: Connection, listing_id: int) -> tuple[float, int]:
    """
    Store a fresh average rating and review count on the listing.

    Args:
        conn: Connection inside the owning transaction
        listing_id: Listing to recompute

    Returns:
        tuple[float, int]: (rating, review_count) as stored
    """
    rating, count = get_rating_stats(conn, listing_id)
    update_listing_rating(conn, listing_id, rating, count)
    logger.debug("listing_rating_recomputed", listing_id=listing_id, rating=rating, count=count)
    return rating, count


def recalculate_all_ratings(engine: Engine, dry_run: bool = False) -> int:
    """
    Recompute every listing's rating aggregates and fix the ones that drifted.

    Args:
        engine: SQLAlchemy engine
        dry_run: If True, only report listings whose stored values are stale

    Returns:
        int: Number of listings whose stored values differed
    """
    with engine.connect() as conn:
        listing_ids = list_listing_ids(conn)

    stale = 0
    for listing_id in listing_ids:
        with engine.begin() as conn:
            listing = get_listing(conn, listing_id, lock=True)
            if listing is None:
                continue

            rating, count = get_rating_stats(conn, listing_id)
            if listing["rating"] == rating and listing["review_count"] == count:
                continue

            stale += 1
            if dry_run:
                logger.info(
                    "[DRY RUN] listing_rating_would_change",
                    listing_id=listing_id,
                    stored_rating=listing["rating"],
                    rating=rating,
                    stored_count=listing["review_count"],
                    count=count,
                )
                continue

            update_listing_rating(conn, listing_id, rating, count)
            logger.info("listing_rating_repaired", listing_id=listing_id, rating=rating, count=count)

    logger.info("ratings_recalculated", listings=len(listing_ids), stale=stale, dry_run=dry_run)
    return stale
