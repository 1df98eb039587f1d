from __future__ import annotations

import argparse
from datetime import date
import json
import logging
import os
from pathlib import Path
import sqlite3
import sys

from health_tracking.data.db import connect, init_db
from health_tracking.data.repositories import SqliteHealthDataSource
from health_tracking.domain.constants import DEFAULT_TIMEZONE
from health_tracking.domain.errors import NotFoundError
from health_tracking.services.health_score import compute_health_score, load_health_settings

LOGGER = logging.getLogger(__name__)


def _parse_today(value: str | None) -> date:
    if not value:
        return date.today()
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("Invalid --today date (expected YYYY-MM-DD).") from exc


def _default_db_path() -> Path:
    data_dir = Path(os.getenv("HEALTH_TRACKING_DATA_DIR", "./data"))
    return Path(os.getenv("HEALTH_TRACKING_DB_PATH", data_dir / "app.db"))


def _get_db_connection(db_path: Path) -> sqlite3.Connection:
    con = connect(db_path)
    init_db(con)
    return con


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Compute an employee health score.")
    parser.add_argument("employee_id", help="Employee id (or 'admin').")
    parser.add_argument("--today", type=_parse_today, default=None, help="Reference date (YYYY-MM-DD).")
    parser.add_argument("--db", type=Path, default=None, help="SQLite database path.")
    parser.add_argument(
        "--timezone",
        default=os.getenv("HEALTH_TRACKING_TIMEZONE", DEFAULT_TIMEZONE),
        help="Organization timezone used for task completion days.",
    )
    parser.add_argument("--verbose", action="store_true", help="Log per-day details.")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(message)s",
    )

    today = args.today or date.today()
    con = _get_db_connection(args.db or _default_db_path())
    try:
        data_source = SqliteHealthDataSource(con)
        settings = load_health_settings(data_source)
        try:
            result = compute_health_score(
                args.employee_id,
                today,
                data_source,
                settings,
                tz_name=args.timezone,
            )
        except NotFoundError as exc:
            LOGGER.error("%s", exc)
            return 1
    finally:
        con.close()

    print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
