from sqlalchemy import delete, insert
from sqlalchemy.engine import Connection

from student_housing.models.reviews import Review
from student_housing.utils.datetime import utc_now


def insert_review(
    conn: Connection,
    listing_id: int,
    booking_id: int,
    reviewer_id: int,
    rating: int,
    comment: str,
) -> int:
    """
    Insert a review for a completed booking.

    Args:
        conn (Connection): SQLAlchemy DB connection (inside a transaction).
        listing_id (int): Reviewed listing.
        booking_id (int): Booking the review is about.
        reviewer_id (int): Author (the booking's renter).
        rating (int): 1 to 5.
        comment (str): Review text.

    Returns:
        int: The new review ID.
    """
    result = conn.execute(
        insert(Review).values(
            listing_id=listing_id,
            booking_id=booking_id,
            reviewer_id=reviewer_id,
            rating=rating,
            comment=comment,
            created_at=utc_now(),
        )
    )
    return int(result.inserted_primary_key[0])


def delete_review(conn: Connection, review_id: int) -> None:
    conn.execute(delete(Review).where(Review.id == review_id))
