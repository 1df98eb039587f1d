from __future__ import annotations

from dataclasses import fields
from datetime import datetime, timezone
from pathlib import Path
import sqlite3

from health_tracking.domain.models import HealthSettings

SCHEMA_SQL = """
PRAGMA foreign_keys = ON;

CREATE TABLE IF NOT EXISTS employees (
  id INTEGER PRIMARY KEY,
  employee_id TEXT,
  name TEXT NOT NULL,
  email TEXT,
  working_hours REAL,
  status TEXT NOT NULL DEFAULT 'Active'
);

CREATE TABLE IF NOT EXISTS tasks (
  id INTEGER PRIMARY KEY,
  title TEXT NOT NULL,
  labels TEXT,
  assigned_to TEXT,
  status TEXT,
  created_at TEXT
);

CREATE TABLE IF NOT EXISTS task_history (
  id INTEGER PRIMARY KEY,
  task_id INTEGER NOT NULL,
  action TEXT NOT NULL,
  description TEXT,
  user_name TEXT,
  old_value TEXT,
  new_value TEXT,
  created_at TEXT NOT NULL,
  FOREIGN KEY(task_id) REFERENCES tasks(id)
);

CREATE INDEX IF NOT EXISTS idx_task_history_task_created
  ON task_history (task_id, created_at);

CREATE TABLE IF NOT EXISTS attendance (
  id INTEGER PRIMARY KEY,
  employee_id TEXT NOT NULL,
  employee_name TEXT,
  date TEXT NOT NULL,
  clock_in TEXT,
  clock_out TEXT,
  duration_seconds INTEGER NOT NULL DEFAULT 0,
  session_count INTEGER NOT NULL DEFAULT 1
);

CREATE INDEX IF NOT EXISTS idx_attendance_employee_date
  ON attendance (employee_id, date);

CREATE TABLE IF NOT EXISTS errors (
  id INTEGER PRIMARY KEY,
  employee_id INTEGER,
  employee_name TEXT NOT NULL DEFAULT '',
  task_id INTEGER,
  error_date TEXT,
  severity TEXT NOT NULL,
  priority TEXT NOT NULL DEFAULT 'Medium',
  description TEXT,
  created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS appreciations (
  id INTEGER PRIMARY KEY,
  employee_id INTEGER,
  employee_name TEXT NOT NULL DEFAULT '',
  title TEXT,
  description TEXT,
  created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS health_settings (
  setting_key TEXT PRIMARY KEY,
  setting_value TEXT NOT NULL,
  setting_type TEXT NOT NULL DEFAULT 'number',
  description TEXT,
  updated_at TEXT
);
"""

SETTING_DESCRIPTIONS = {
    "top_rated_threshold": "Score required to be considered top rated",
    "average_threshold": "Score required to be considered average",
    "below_standard_threshold": "Below this score is considered below standard",
    "task_points_per_day": "Points awarded per fully completed task day",
    "task_cycle_months": "Number of months for task evaluation cycle",
    "task_cycle_offset_days": "Offset days for task cycle",
    "hours_points_per_month": "Points awarded per month with full hours",
    "expected_hours_per_day": "Expected working hours per day",
    "working_days_per_week": "Number of working days per week",
    "hr_cycle_months": "HR cycle length in months",
    "error_high_deduction": "Points deducted for high severity errors",
    "error_medium_deduction": "Points deducted for medium severity errors",
    "error_low_deduction": "Points deducted for low severity errors",
    "appreciation_bonus": "Points awarded for appreciations",
    "attendance_deduction": "Points deducted for attendance issues",
    "max_absences_per_month": "Maximum allowed absences per month",
    "data_cycle_months": "Number of months for data evaluation cycle",
    "warning_letters_deduction": "Points deducted for warning letters",
    "warning_letters_cycle_months": "Number of months for warning letter evaluation",
    "warning_letters_cycle_offset_days": "Offset days for warning letter cycle",
    "warning_letters_severity_high_deduction": "Points deducted for high severity warning letters",
    "warning_letters_severity_medium_deduction": "Points deducted for medium severity warning letters",
    "warning_letters_severity_low_deduction": "Points deducted for low severity warning letters",
}


def connect(db_path: Path | str) -> sqlite3.Connection:
    if str(db_path) != ":memory:":
        db_path = Path(db_path)
        db_path.parent.mkdir(parents=True, exist_ok=True)
        db_path = db_path.as_posix()
    # Scoring reads from worker threads; SqliteHealthDataSource serializes access.
    con = sqlite3.connect(db_path, check_same_thread=False)
    con.row_factory = sqlite3.Row
    con.execute("PRAGMA foreign_keys=ON;")
    return con


def _seed_health_settings(con: sqlite3.Connection) -> None:
    defaults = HealthSettings()
    now = datetime.now(timezone.utc).isoformat()
    con.executemany(
        """
        INSERT OR IGNORE INTO health_settings (
            setting_key, setting_value, setting_type, description, updated_at
        ) VALUES (?, ?, 'number', ?, ?)
        """,
        [
            (
                setting.name,
                str(getattr(defaults, setting.name)),
                SETTING_DESCRIPTIONS.get(setting.name),
                now,
            )
            for setting in fields(HealthSettings)
        ],
    )


def init_db(con: sqlite3.Connection) -> None:
    con.executescript(SCHEMA_SQL)
    _seed_health_settings(con)
    con.commit()
