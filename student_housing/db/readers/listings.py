from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.engine import Connection

from student_housing.domain.statuses import ListingStatus
from student_housing.models.listings import Listing

listings_table = Listing.__table__


@dataclass
class ListingFilters:
    """Optional filters for catalogue queries; None means "don't filter"."""

    min_price: Optional[float] = None
    max_price: Optional[float] = None
    status: Optional[ListingStatus] = None
    q: Optional[str] = None


def get_listing(conn: Connection, listing_id: int, lock: bool = False) -> Optional[dict[str, Any]]:
    """
    Fetch a single listing row.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        listing_id (int): Listing ID.
        lock (bool): If True, lock the row (SELECT ... FOR UPDATE) until the
            surrounding transaction ends.

    Returns:
        Optional[dict[str, Any]]: Listing columns, or None if not found.
    """
    stmt = select(listings_table).where(listings_table.c.id == listing_id)
    if lock:
        stmt = stmt.with_for_update()

    row = conn.execute(stmt).mappings().fetchone()
    return dict(row) if row else None


def search_listings(
    conn: Connection,
    filters: ListingFilters,
    page: int,
    page_size: int,
) -> tuple[list[dict[str, Any]], int]:
    """
    Return one page of listings matching the filters plus the total match count.

    Results are ordered newest first, then by id, so pages are stable.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        filters (ListingFilters): Price, status and free-text filters.
        page (int): 1-based page number.
        page_size (int): Rows per page.

    Returns:
        tuple[list[dict], int]: (rows on this page, total matching rows)
    """
    conditions = []
    if filters.min_price is not None:
        conditions.append(listings_table.c.price >= filters.min_price)
    if filters.max_price is not None:
        conditions.append(listings_table.c.price <= filters.max_price)
    if filters.status is not None:
        conditions.append(listings_table.c.status == filters.status)
    if filters.q:
        pattern = f"%{filters.q.lower()}%"
        conditions.append(
            or_(
                func.lower(listings_table.c.title).like(pattern),
                func.lower(listings_table.c.description).like(pattern),
            )
        )

    total = conn.execute(
        select(func.count()).select_from(listings_table).where(*conditions)
    ).scalar_one()

    rows = conn.execute(
        select(listings_table)
        .where(*conditions)
        .order_by(listings_table.c.created_at.desc(), listings_table.c.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    ).mappings()

    return [dict(row) for row in rows], total


def list_listing_ids(conn: Connection) -> list[int]:
    """Return every listing id in ascending order."""
    result = conn.execute(select(listings_table.c.id).order_by(listings_table.c.id))
    return list(result.scalars().all())
