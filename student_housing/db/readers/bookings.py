from __future__ import annotations

from datetime import date
from typing import Any, Iterable, Optional

from sqlalchemy import func, select
from sqlalchemy.engine import Connection

from student_housing.domain.statuses import BookingStatus
from student_housing.models.bookings import Booking

bookings_table = Booking.__table__


def get_booking(conn: Connection, booking_id: int, lock: bool = False) -> Optional[dict[str, Any]]:
    """
    Fetch a single booking row.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        booking_id (int): Booking ID.
        lock (bool): If True, lock the row (SELECT ... FOR UPDATE).

    Returns:
        Optional[dict[str, Any]]: Booking columns, or None if not found.
    """
    stmt = select(bookings_table).where(bookings_table.c.id == booking_id)
    if lock:
        stmt = stmt.with_for_update()

    row = conn.execute(stmt).mappings().fetchone()
    return dict(row) if row else None


def find_bookings_in_status(
    conn: Connection,
    listing_id: int,
    statuses: Iterable[BookingStatus],
    exclude_booking_id: Optional[int] = None,
) -> list[dict[str, Any]]:
    """
    Fetch a listing's bookings whose status is in ``statuses``.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        listing_id (int): Listing ID.
        statuses (Iterable[BookingStatus]): Statuses to include.
        exclude_booking_id (Optional[int]): Booking to leave out, used when
            re-validating an existing booking against its neighbours.

    Returns:
        list[dict[str, Any]]: Matching bookings ordered by start_date.
    """
    stmt = (
        select(
            bookings_table.c.id,
            bookings_table.c.start_date,
            bookings_table.c.end_date,
            bookings_table.c.status,
        )
        .where(bookings_table.c.listing_id == listing_id)
        .where(bookings_table.c.status.in_(list(statuses)))
        .order_by(bookings_table.c.start_date, bookings_table.c.id)
    )
    if exclude_booking_id is not None:
        stmt = stmt.where(bookings_table.c.id != exclude_booking_id)

    return [dict(row) for row in conn.execute(stmt).mappings()]


def list_bookings(
    conn: Connection,
    listing_id: Optional[int] = None,
    renter_id: Optional[int] = None,
) -> list[dict[str, Any]]:
    """List bookings for a listing and/or a renter, newest stay first."""
    stmt = select(bookings_table).order_by(
        bookings_table.c.start_date.desc(), bookings_table.c.id.desc()
    )
    if listing_id is not None:
        stmt = stmt.where(bookings_table.c.listing_id == listing_id)
    if renter_id is not None:
        stmt = stmt.where(bookings_table.c.renter_id == renter_id)

    return [dict(row) for row in conn.execute(stmt).mappings()]


def find_due_booking_ids(
    conn: Connection, status: BookingStatus, date_column: str, today: date
) -> list[int]:
    """
    Return ids of bookings in ``status`` whose ``date_column`` is on or before today.

    Used by the lifecycle job: approved bookings are due when start_date has
    been reached, active bookings when end_date has.
    """
    column = bookings_table.c[date_column]
    result = conn.execute(
        select(bookings_table.c.id)
        .where(bookings_table.c.status == status)
        .where(column <= today)
        .order_by(bookings_table.c.id)
    )
    return list(result.scalars().all())


def sum_guests_in_status(conn: Connection, listing_id: int, status: BookingStatus) -> int:
    """Total guests across a listing's bookings in the given status."""
    result = conn.execute(
        select(func.coalesce(func.sum(bookings_table.c.guests), 0))
        .where(bookings_table.c.listing_id == listing_id)
        .where(bookings_table.c.status == status)
    )
    return int(result.scalar_one())
