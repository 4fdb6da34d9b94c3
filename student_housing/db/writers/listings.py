from typing import Any

import structlog
from sqlalchemy import delete, insert, update
from sqlalchemy.engine import Connection

from student_housing.domain.statuses import ListingStatus
from student_housing.models.listings import Listing
from student_housing.utils.datetime import utc_now

logger = structlog.get_logger(__name__)


def insert_listing(conn: Connection, owner_id: int, data: dict[str, Any]) -> int:
    """
    Insert a new listing in ``pending`` status.

    Args:
        conn (Connection): SQLAlchemy DB connection (inside a transaction).
        owner_id (int): Owning user ID.
        data (dict): Listing fields (title, description, price, maximum_occupancy, lat, lng).

    Returns:
        int: The new listing ID.
    """
    now = utc_now()
    result = conn.execute(
        insert(Listing).values(
            owner_id=owner_id,
            status=ListingStatus.PENDING,
            current_occupancy=0,
            rating=0.0,
            review_count=0,
            created_at=now,
            updated_at=now,
            **data,
        )
    )
    return int(result.inserted_primary_key[0])


def update_listing(conn: Connection, listing_id: int, data: dict[str, Any]) -> None:
    """
    Update listing fields for an existing listing.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        listing_id (int): Listing ID.
        data (dict): Fields to update; a None value stores NULL
    """
    values = {**data, "updated_at": utc_now()}
    conn.execute(update(Listing).where(Listing.id == listing_id).values(**values))


def update_listing_status(conn: Connection, listing_id: int, status: ListingStatus) -> None:
    conn.execute(
        update(Listing)
        .where(Listing.id == listing_id)
        .values(status=status, updated_at=utc_now())
    )


def update_listing_rating(
    conn: Connection, listing_id: int, rating: float, review_count: int
) -> None:
    """
    Store recomputed rating aggregates on a listing.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        listing_id (int): Listing ID.
        rating (float): Average review rating.
        review_count (int): Number of reviews.
    """
    conn.execute(
        update(Listing)
        .where(Listing.id == listing_id)
        .values(rating=rating, review_count=review_count, updated_at=utc_now())
    )


def update_current_occupancy(conn: Connection, listing_id: int, occupancy: int) -> None:
    conn.execute(
        update(Listing)
        .where(Listing.id == listing_id)
        .values(current_occupancy=occupancy, updated_at=utc_now())
    )


def delete_listing(conn: Connection, listing_id: int) -> None:
    """
    Permanently delete a listing. Bookings and reviews cascade.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        listing_id (int): Listing ID.
    """
    conn.execute(delete(Listing).where(Listing.id == listing_id))
    logger.info("listing_row_deleted", listing_id=listing_id)
