"""Scheduled booking lifecycle: date-driven transitions applied by the system."""

from __future__ import annotations

from datetime import date
from typing import Optional

import structlog
from sqlalchemy.engine import Engine

from student_housing.db.readers.bookings import find_due_booking_ids
from student_housing.domain.actors import SYSTEM_ACTOR
from student_housing.domain.errors import HousingError
from student_housing.domain.statuses import BookingStatus
from student_housing.metrics import lifecycle_advanced
from student_housing.services.bookings import transition_booking
from student_housing.utils.datetime import utc_today

logger = structlog.get_logger(__name__)


def advance_bookings(
    engine: Engine, today: Optional[date] = None, dry_run: bool = False
) -> dict[str, int]:
    """
    Apply the system-scheduled transitions for one calendar day.

    Active bookings whose end_date has been reached are completed first, so a
    stay ending today frees its occupancy before the back-to-back stay starting
    today is activated. Approved bookings whose start_date has been reached
    then become active, and a final completion pass finishes stays that both
    started and ended since the last run. Each booking goes through
    ``transition_booking`` in its own transaction, so one failing booking does
    not hold back the rest.

    Args:
        engine: SQLAlchemy engine
        today: Day to evaluate (defaults to UTC today)
        dry_run: If True, only report what would change

    Returns:
        dict[str, int]: Number of bookings moved per target status
    """
    today = today or utc_today()
    logger.info("lifecycle_run_started", today=today.isoformat(), dry_run=dry_run)

    completed = _complete_due(engine, today, dry_run)
    activated = _advance(
        engine, BookingStatus.APPROVED, "start_date", BookingStatus.ACTIVE, today, dry_run
    )
    # Stays activated just now may already be over (late run)
    if not dry_run:
        completed += _complete_due(engine, today, dry_run)

    moved = {
        BookingStatus.ACTIVE.value: activated,
        BookingStatus.COMPLETED.value: completed,
    }

    logger.info("lifecycle_run_completed", today=today.isoformat(), dry_run=dry_run, **moved)
    return moved


def _advance(
    engine: Engine,
    source: BookingStatus,
    date_column: str,
    target: BookingStatus,
    today: date,
    dry_run: bool,
) -> int:
    with engine.connect() as conn:
        due_ids = find_due_booking_ids(conn, source, date_column, today)

    if dry_run:
        logger.info(
            "[DRY RUN] lifecycle_would_advance",
            from_status=source.value,
            to_status=target.value,
            booking_ids=due_ids,
        )
        return len(due_ids)

    moved = 0
    for booking_id in due_ids:
        try:
            transition_booking(engine, booking_id, target, SYSTEM_ACTOR, today=today)
        except HousingError as e:
            logger.warning(
                "lifecycle_transition_failed",
                booking_id=booking_id,
                to_status=target.value,
                error=e.message,
            )
            continue
        lifecycle_advanced.labels(to_status=target.value).inc()
        moved += 1
    return moved


def _complete_due(engine: Engine, today: date, dry_run: bool) -> int:
    return _advance(
        engine, BookingStatus.ACTIVE, "end_date", BookingStatus.COMPLETED, today, dry_run
    )
