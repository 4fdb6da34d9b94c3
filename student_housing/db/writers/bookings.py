from typing import Any

from sqlalchemy import insert, update
from sqlalchemy.engine import Connection

from student_housing.domain.dates import DateRange
from student_housing.domain.statuses import BookingStatus, PaymentStatus
from student_housing.models.bookings import Booking
from student_housing.utils.datetime import utc_now


def insert_booking(
    conn: Connection,
    listing_id: int,
    renter_id: int,
    dates: DateRange,
    guests: int,
    total_amount: float,
) -> int:
    """
    Insert a booking request in ``pending`` status.

    Args:
        conn (Connection): SQLAlchemy DB connection (inside a transaction).
        listing_id (int): Booked listing.
        renter_id (int): Requesting renter.
        dates (DateRange): Requested stay.
        guests (int): Number of occupants.
        total_amount (float): Price for the whole stay.

    Returns:
        int: The new booking ID.
    """
    now = utc_now()
    result = conn.execute(
        insert(Booking).values(
            listing_id=listing_id,
            renter_id=renter_id,
            start_date=dates.start,
            end_date=dates.end,
            guests=guests,
            total_amount=total_amount,
            status=BookingStatus.PENDING,
            payment_status=PaymentStatus.PENDING,
            created_at=now,
            updated_at=now,
        )
    )
    return int(result.inserted_primary_key[0])


def compare_and_set_status(
    conn: Connection,
    booking_id: int,
    expected: BookingStatus,
    target: BookingStatus,
    extra: dict[str, Any] | None = None,
) -> bool:
    """
    Move a booking to ``target`` only if it is still in ``expected``.

    The WHERE clause on the current status makes the update a compare-and-swap:
    if a concurrent transaction already changed the status, nothing is written.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        booking_id (int): Booking ID.
        expected (BookingStatus): Status the caller validated against.
        target (BookingStatus): New status.
        extra (dict | None): Additional columns to write (reasons, timestamps).

    Returns:
        bool: True if the row was updated, False if the status had changed.
    """
    values = {**(extra or {}), "status": target, "updated_at": utc_now()}
    result = conn.execute(
        update(Booking)
        .where(Booking.id == booking_id)
        .where(Booking.status == expected)
        .values(**values)
    )
    return result.rowcount == 1
