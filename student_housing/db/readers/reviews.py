from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.engine import Connection

from student_housing.models.reviews import Review

reviews_table = Review.__table__


def get_review(conn: Connection, review_id: int) -> Optional[dict[str, Any]]:
    """
    Fetch a single review row.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        review_id (int): Review ID.

    Returns:
        Optional[dict[str, Any]]: Review columns, or None if not found.
    """
    row = (
        conn.execute(select(reviews_table).where(reviews_table.c.id == review_id))
        .mappings()
        .fetchone()
    )
    return dict(row) if row else None


def review_exists_for_booking(conn: Connection, booking_id: int) -> bool:
    result = conn.execute(
        select(reviews_table.c.id).where(reviews_table.c.booking_id == booking_id)
    )
    return result.fetchone() is not None


def list_reviews_for_listing(conn: Connection, listing_id: int) -> list[dict[str, Any]]:
    """List a listing's reviews, newest first."""
    rows = conn.execute(
        select(reviews_table)
        .where(reviews_table.c.listing_id == listing_id)
        .order_by(reviews_table.c.created_at.desc(), reviews_table.c.id.desc())
    ).mappings()
    return [dict(row) for row in rows]


def get_rating_stats(conn: Connection, listing_id: int) -> tuple[float, int]:
    """
    Compute the average rating and review count for a listing.

    Returns:
        tuple[float, int]: (average rating rounded to 2 places, review count);
        (0.0, 0) when the listing has no reviews.
    """
    row = conn.execute(
        select(func.avg(reviews_table.c.rating), func.count(reviews_table.c.id)).where(
            reviews_table.c.listing_id == listing_id
        )
    ).fetchone()

    if row is None or not row[1]:
        return 0.0, 0
    return round(float(row[0]), 2), int(row[1])
