import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import argparse
import logging

from student_housing.db.engine import engine
from student_housing.logging_config import setup_logging
from student_housing.services.reviews import recalculate_all_ratings

setup_logging()
logger = logging.getLogger(__name__)


def main() -> None:
    """
    Recompute every listing's rating and review count from its reviews.
    """
    parser = argparse.ArgumentParser(description=main.__doc__)
    parser.add_argument("--dry-run", action="store_true", help="Only report stale listings")
    args = parser.parse_args()

    try:
        stale = recalculate_all_ratings(engine, dry_run=args.dry_run)
        logger.info("Ratings recalculated; %s listing(s) were stale", stale)
    except Exception:
        logger.exception("Rating recalculation failed")
        raise


if __name__ == "__main__":
    main()
