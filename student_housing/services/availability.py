"""
Availability checks for listing date ranges.

A listing is available for a range when it is ``active`` and none of its
bookings in the considered statuses overlaps the range. By default the
blocking set (pending, approved, active) is considered; booking creation and
approval pass the committed set (approved, active) so that overlapping
pending requests can coexist until one of them is approved.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

import structlog
from sqlalchemy.engine import Connection

from student_housing.db.readers.bookings import find_bookings_in_status
from student_housing.db.readers.listings import get_listing
from student_housing.domain.dates import DateRange
from student_housing.domain.errors import NotFoundError
from student_housing.domain.statuses import BLOCKING_STATUSES, BookingStatus, ListingStatus
from student_housing.metrics import availability_checks

logger = structlog.get_logger(__name__)


def find_overlapping_booking(
    conn: Connection,
    listing_id: int,
    dates: DateRange,
    exclude_booking_id: Optional[int] = None,
    statuses: Iterable[BookingStatus] = BLOCKING_STATUSES,
) -> Optional[dict[str, Any]]:
    """
    Return the first booking of the listing that overlaps ``dates``, if any.

    Args:
        conn: Active database connection
        listing_id: Listing to inspect
        dates: Requested range
        exclude_booking_id: Booking to ignore (re-validating itself)
        statuses: Booking statuses that hold dates

    Returns:
        The overlapping booking row, or None
    """
    for booking in find_bookings_in_status(conn, listing_id, statuses, exclude_booking_id):
        if dates.overlaps(DateRange(booking["start_date"], booking["end_date"])):
            return booking
    return None


def is_available(
    conn: Connection,
    listing_id: int,
    dates: DateRange,
    exclude_booking_id: Optional[int] = None,
    statuses: Iterable[BookingStatus] = BLOCKING_STATUSES,
) -> bool:
    """
    Check whether a listing can host a stay over ``dates``.

    Pure read; repeated calls without intervening writes return the same
    result. Zero-length and reversed ranges never get here: DateRange
    rejects them with InvalidRangeError.

    Args:
        conn: Active database connection
        listing_id: Listing to check
        dates: Requested range [start, end)
        exclude_booking_id: Booking to ignore (re-validating itself)
        statuses: Booking statuses that hold dates

    Returns:
        bool: True if the listing is active and no booking overlaps

    Raises:
        NotFoundError: If the listing does not exist
    """
    listing = get_listing(conn, listing_id)
    if listing is None:
        raise NotFoundError("Listing", listing_id)

    if listing["status"] != ListingStatus.ACTIVE:
        availability_checks.labels(result="listing_inactive").inc()
        logger.debug(
            "listing_not_bookable", listing_id=listing_id, status=listing["status"].value
        )
        return False

    overlapping = find_overlapping_booking(conn, listing_id, dates, exclude_booking_id, statuses)
    if overlapping is not None:
        availability_checks.labels(result="overlap").inc()
        logger.debug(
            "dates_unavailable",
            listing_id=listing_id,
            requested=str(dates),
            overlapping_booking_id=overlapping["id"],
        )
        return False

    availability_checks.labels(result="available").inc()
    return True
