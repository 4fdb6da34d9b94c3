import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import argparse
import logging
from datetime import date

from student_housing.config import DRY_RUN
from student_housing.db.engine import engine
from student_housing.logging_config import setup_logging
from student_housing.services.lifecycle import advance_bookings

setup_logging()
logger = logging.getLogger(__name__)


def main() -> None:
    """
    Apply the day's scheduled booking transitions (approved -> active -> completed).

    Meant to run once a day from cron or a Kubernetes CronJob.
    """
    parser = argparse.ArgumentParser(description=main.__doc__)
    parser.add_argument("--today", type=date.fromisoformat, help="Day to evaluate (ISO date)")
    parser.add_argument("--dry-run", action="store_true", default=DRY_RUN)
    args = parser.parse_args()

    logger.info("Advancing bookings for %s (dry_run=%s)", args.today or "today", args.dry_run)

    try:
        moved = advance_bookings(engine, today=args.today, dry_run=args.dry_run)
        logger.info("Lifecycle run finished: %s", moved)
    except Exception:
        logger.exception("Lifecycle run failed")
        raise


if __name__ == "__main__":
    main()
