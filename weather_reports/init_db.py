"""
Database initialization and sample data seeding.

Usage:
    weather-reports-init-db [--seed] [--db-path PATH]
"""

import logging
import sys
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import inspect

from weather_reports.config import get_config
from weather_reports.exceptions import WeatherStoreError
from weather_reports.models import utc_now
from weather_reports.store import ObservationStore

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


# (station, days ago, reported conditions)
SAMPLE_REPORTS = [
    ("ORD", 7, ()),
    ("ORD", 6, ("fog", "rain")),
    ("ORD", 5, ("rain", "thunder")),
    ("ORD", 4, ("snow",)),
    ("ORD", 3, ()),
    ("LAX", 7, ()),
    ("LAX", 6, ()),
    ("LAX", 5, ("fog",)),
    ("LAX", 4, ()),
    ("LAX", 3, ("rain",)),
    ("JFK", 7, ("fog",)),
    ("JFK", 6, ("rain", "thunder")),
    ("JFK", 5, ("snow",)),
    ("JFK", 4, ()),
    ("JFK", 3, ("rain", "hail", "thunder")),
    ("DEN", 7, ("snow",)),
    ("DEN", 6, ("snow", "hail")),
    ("DEN", 5, ()),
    ("DEN", 4, ("rain", "thunder")),
    ("DEN", 3, ()),
    ("MIA", 7, ()),
    ("MIA", 6, ("rain", "thunder")),
    ("MIA", 5, ("rain", "thunder")),
    ("MIA", 4, ()),
    ("MIA", 3, ("tornado",)),
]


def seed_store(store: ObservationStore, now: Optional[datetime] = None) -> int:
    """
    Replace the store's contents with the sample reports.

    Args:
        store: Open observation store
        now: Reference time for the backdated timestamps

    Returns:
        Number of reports in the store afterwards
    """
    now = now or utc_now()
    removed = store.clear_all()
    if removed:
        logger.info(f"Cleared {removed} existing reports")

    store.bulk_load(
        (station, {flag: True for flag in flags}, now - timedelta(days=days_ago))
        for station, days_ago, flags in SAMPLE_REPORTS
    )
    return store.count()


def init_database(db_path: str, seed: bool = False) -> int:
    """
    Create the schema at ``db_path`` and optionally seed it.

    Returns:
        Number of reports in the database
    """
    logger.info("=" * 50)
    logger.info("Weather Reports Database Initialization")
    logger.info("=" * 50)

    with ObservationStore(db_path=db_path) as store:
        logger.info("[1/2] Schema created at %s", db_path)

        if seed:
            count = seed_store(store)
            logger.info(f"[2/2] Seeded {count} weather reports")
        else:
            count = store.count()
            logger.info("[2/2] Skipping seed (use --seed flag to include test data)")

        tables = inspect(store.engine).get_table_names()
        logger.info(f"Tables: {', '.join(tables)}")

    logger.info("Database initialization complete!")
    return count


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for CLI"""
    import argparse

    parser = argparse.ArgumentParser(description="Weather Reports database initialization")
    parser.add_argument(
        "--seed",
        action="store_true",
        help="Replace existing reports with sample data"
    )
    parser.add_argument(
        "--db-path",
        default=None,
        help="SQLite database file (default: DB_PATH or ./weather.db)"
    )

    args = parser.parse_args(argv)
    db_path = args.db_path or get_config().db_path

    try:
        init_database(db_path, seed=args.seed)
    except WeatherStoreError as e:
        logger.error(f"Database initialization failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
