"""
Create the train_schedules and server_links tables in the structured store.

The page never creates tables itself; until this script has been run against
a configured database the page stays in the "database needs configuration"
mode and keeps data in the local store.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from timetable.config import get_settings
from timetable.db import SqlStructuredStore, StoreError
from timetable.records import Collection

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Create timetable tables")
    parser.add_argument(
        "--database-url",
        type=str,
        default=None,
        help="Override DATABASE_URL",
    )
    parser.add_argument(
        "--database-key",
        type=str,
        default=None,
        help="Override DATABASE_KEY",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(name)s %(levelname)s %(asctime)s %(message)s",
        datefmt="%m/%d/%Y %I:%M:%S %p",
    )

    settings = get_settings()
    database_url = args.database_url or settings.database_url
    if not database_url:
        logger.error("No database configured; set DATABASE_URL or pass --database-url")
        return 2

    try:
        store = SqlStructuredStore(database_url, args.database_key or settings.database_key)
        store.create_schema()
    except StoreError as exc:
        logger.error("Could not create tables: %s", exc)
        return 1

    for collection in Collection:
        logger.info("Table %s is ready", collection.table_name)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
