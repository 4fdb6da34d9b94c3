"""Explicit recomputation of a listing's current occupancy."""

import structlog
from sqlalchemy.engine import Connection

from student_housing.db.readers.bookings import sum_guests_in_status
from student_housing.db.readers.listings import get_listing
from student_housing.db.writers.listings import update_current_occupancy
from student_housing.domain.errors import ConflictError, NotFoundError
from student_housing.domain.statuses import BookingStatus

logger = structlog.get_logger(__name__)


def recompute_occupancy(conn: Connection, listing_id: int) -> int:
    """
    Recompute current_occupancy from the listing's active bookings.

    Must be called inside the transaction that changed a booking into or out
    of ``active``, so the stored value never drifts from the bookings.

    Args:
        conn: Connection inside the owning transaction
        listing_id: Listing to recompute

    Returns:
        int: The new occupancy

    Raises:
        NotFoundError: If the listing does not exist
        ConflictError: If active guests would exceed maximum_occupancy
    """
    listing = get_listing(conn, listing_id)
    if listing is None:
        raise NotFoundError("Listing", listing_id)

    occupancy = sum_guests_in_status(conn, listing_id, BookingStatus.ACTIVE)
    if occupancy > listing["maximum_occupancy"]:
        raise ConflictError(
            f"Listing {listing_id} would hold {occupancy} occupants, "
            f"above its maximum of {listing['maximum_occupancy']}"
        )

    if occupancy != listing["current_occupancy"]:
        update_current_occupancy(conn, listing_id, occupancy)
        logger.info(
            "occupancy_recomputed",
            listing_id=listing_id,
            previous=listing["current_occupancy"],
            current=occupancy,
        )
    return occupancy
