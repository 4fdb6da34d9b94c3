from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.engine import Connection

from student_housing.domain.statuses import MaintenanceStatus
from student_housing.models.maintenance_requests import MaintenanceRequest

requests_table = MaintenanceRequest.__table__


@dataclass
class MaintenanceFilters:
    listing_id: Optional[int] = None
    status: Optional[MaintenanceStatus] = None
    # Requests where this user is either the renter or the owner
    party_id: Optional[int] = None


def get_maintenance_request(
    conn: Connection, request_id: int, lock: bool = False
) -> Optional[dict[str, Any]]:
    """
    Fetch a single maintenance request row.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        request_id (int): Maintenance request ID.
        lock (bool): If True, lock the row (SELECT ... FOR UPDATE).

    Returns:
        Optional[dict[str, Any]]: Request columns, or None if not found.
    """
    stmt = select(requests_table).where(requests_table.c.id == request_id)
    if lock:
        stmt = stmt.with_for_update()

    row = conn.execute(stmt).mappings().fetchone()
    return dict(row) if row else None


def list_maintenance_requests(
    conn: Connection,
    filters: MaintenanceFilters,
    page: int,
    page_size: int,
) -> tuple[list[dict[str, Any]], int]:
    """
    Return one page of maintenance requests, newest first, plus the total count.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        filters (MaintenanceFilters): Listing, status and party filters.
        page (int): 1-based page number.
        page_size (int): Rows per page.

    Returns:
        tuple[list[dict], int]: (rows on this page, total matching rows)
    """
    conditions = []
    if filters.listing_id is not None:
        conditions.append(requests_table.c.listing_id == filters.listing_id)
    if filters.status is not None:
        conditions.append(requests_table.c.status == filters.status)
    if filters.party_id is not None:
        conditions.append(
            or_(
                requests_table.c.renter_id == filters.party_id,
                requests_table.c.owner_id == filters.party_id,
            )
        )

    total = conn.execute(
        select(func.count()).select_from(requests_table).where(*conditions)
    ).scalar_one()

    rows = conn.execute(
        select(requests_table)
        .where(*conditions)
        .order_by(requests_table.c.created_at.desc(), requests_table.c.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    ).mappings()
    return [dict(row) for row in rows], int(total)
