from typing import Any, Mapping

from sqlalchemy import delete, insert, update
from sqlalchemy.engine import Connection

from student_housing.models.maintenance_requests import MaintenanceRequest
from student_housing.utils.datetime import utc_now


def insert_maintenance_request(
    conn: Connection,
    booking: Mapping[str, Any],
    owner_id: int,
    data: dict[str, Any],
) -> int:
    """
    Insert a maintenance request in ``pending`` status.

    Args:
        conn (Connection): SQLAlchemy DB connection (inside a transaction).
        booking (Mapping): The stay the request is raised for.
        owner_id (int): Owner of the booked listing.
        data (dict): title, description, issue_type and optionally priority.

    Returns:
        int: The new request ID.
    """
    now = utc_now()
    result = conn.execute(
        insert(MaintenanceRequest).values(
            booking_id=booking["id"],
            listing_id=booking["listing_id"],
            renter_id=booking["renter_id"],
            owner_id=owner_id,
            created_at=now,
            updated_at=now,
            **data,
        )
    )
    return int(result.inserted_primary_key[0])


def update_maintenance_request(conn: Connection, request_id: int, values: dict[str, Any]) -> None:
    conn.execute(
        update(MaintenanceRequest)
        .where(MaintenanceRequest.id == request_id)
        .values(**values, updated_at=utc_now())
    )


def delete_maintenance_request(conn: Connection, request_id: int) -> None:
    conn.execute(delete(MaintenanceRequest).where(MaintenanceRequest.id == request_id))
