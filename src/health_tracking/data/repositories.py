from __future__ import annotations

import sqlite3
import threading
from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Any, Iterable

import pandas as pd

from health_tracking.domain.constants import (
    COMPLETED_STATUS,
    SEVERITY_HIGH,
    SEVERITY_LOW,
    SEVERITY_MEDIUM,
    STATUS_CHANGED_ACTION,
)
from health_tracking.domain.errors import CollaboratorError, NotFoundError
from health_tracking.domain.models import (
    AttendanceRecord,
    CycleWindow,
    Employee,
    ErrorCounts,
    Task,
    TaskHistoryEvent,
)
from health_tracking.services.cycle_windows import month_key

# SQLite allows 999 bound parameters per statement on older builds.
_IN_CHUNK_SIZE = 500


def _table_exists(con: sqlite3.Connection, table: str) -> bool:
    cur = con.execute(
        """
        SELECT name
        FROM sqlite_master
        WHERE type = 'table' AND name = ?
        """,
        (table,),
    )
    return cur.fetchone() is not None


def _fetch_all(
    con: sqlite3.Connection,
    query: str,
    params: Iterable[Any],
    what: str,
) -> list[dict[str, Any]]:
    try:
        cur = con.execute(query, tuple(params))
        return [dict(row) for row in cur.fetchall()]
    except sqlite3.Error as exc:
        raise CollaboratorError(f"Failed to fetch {what}: {exc}") from exc


def _parse_date(value: Any) -> date | None:
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    if isinstance(value, datetime):
        return value.date()
    if value in (None, ""):
        return None
    try:
        parsed = pd.to_datetime(value, errors="coerce")
    except (TypeError, ValueError):
        return None
    if pd.isna(parsed):
        return None
    return parsed.date()


def _parse_timestamp(value: Any) -> datetime | None:
    if value in (None, ""):
        return None
    try:
        parsed = pd.to_datetime(value, errors="coerce", utc=True)
    except (TypeError, ValueError):
        return None
    if pd.isna(parsed):
        return None
    return parsed.to_pydatetime()


def _to_float(value: Any) -> float | None:
    if value in (None, ""):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if number != number:
        return None
    return number


class EmployeeRepository:
    def __init__(self, con: sqlite3.Connection) -> None:
        self.con = con

    def get_employee(self, employee_id: str) -> Employee:
        rows = _fetch_all(
            self.con,
            """
            SELECT id, name, working_hours
            FROM employees
            WHERE id = ?
            """,
            (employee_id,),
            "employee",
        )
        if not rows:
            raise NotFoundError(f"Employee {employee_id} not found")
        row = rows[0]
        working_hours = _to_float(row.get("working_hours"))
        return Employee(
            id=str(row["id"]),
            name=row.get("name") or "",
            expected_hours_per_day=working_hours if working_hours and working_hours > 0 else None,
        )


class TaskRepository:
    def __init__(self, con: sqlite3.Connection) -> None:
        self.con = con

    def find_tasks_assigned_to(self, employee_name: str) -> list[Task]:
        name = (employee_name or "").strip()
        if not name:
            return []
        rows = _fetch_all(
            self.con,
            """
            SELECT id, title, labels, assigned_to
            FROM tasks
            WHERE assigned_to LIKE ?
            ORDER BY id
            """,
            (f"%{name}%",),
            "tasks",
        )
        return [
            Task(
                id=str(row["id"]),
                title=row.get("title") or "",
                labels=row.get("labels") or "",
                assigned_to=row.get("assigned_to") or "",
            )
            for row in rows
        ]

    def find_completion_events(
        self,
        task_ids: Iterable[str],
        window: CycleWindow,
    ) -> list[TaskHistoryEvent]:
        ids = [str(task_id) for task_id in task_ids]
        if not ids:
            return []
        # Timestamps are UTC; pad a day each side so local-day bucketing sees
        # every event near the window edges.
        start = (window.start - timedelta(days=1)).isoformat()
        end = (window.end + timedelta(days=2)).isoformat()
        events: list[TaskHistoryEvent] = []
        for offset in range(0, len(ids), _IN_CHUNK_SIZE):
            chunk = ids[offset : offset + _IN_CHUNK_SIZE]
            placeholders = ", ".join("?" for _ in chunk)
            rows = _fetch_all(
                self.con,
                f"""
                SELECT task_id, action, new_value, created_at
                FROM task_history
                WHERE task_id IN ({placeholders})
                  AND lower(action) = ?
                  AND lower(new_value) = ?
                  AND created_at >= ?
                  AND created_at < ?
                ORDER BY created_at
                """,
                [*chunk, STATUS_CHANGED_ACTION, COMPLETED_STATUS, start, end],
                "task history",
            )
            events.extend(
                TaskHistoryEvent(
                    task_id=str(row["task_id"]),
                    action=row.get("action") or "",
                    new_value=row.get("new_value"),
                    created_at=_parse_timestamp(row.get("created_at")),
                )
                for row in rows
            )
        return events


class AttendanceRepository:
    def __init__(self, con: sqlite3.Connection) -> None:
        self.con = con

    def list_records(self, employee_id: str, window: CycleWindow) -> list[AttendanceRecord]:
        rows = _fetch_all(
            self.con,
            """
            SELECT employee_id, date, clock_in, clock_out, duration_seconds
            FROM attendance
            WHERE employee_id = ?
              AND date(date) >= ?
              AND date(date) <= ?
            ORDER BY date
            """,
            (str(employee_id), window.start.isoformat(), window.end.isoformat()),
            "attendance",
        )
        records: list[AttendanceRecord] = []
        for row in rows:
            day = _parse_date(row.get("date"))
            if day is None:
                continue
            records.append(
                AttendanceRecord(
                    employee_id=str(row["employee_id"]),
                    day=day,
                    duration_seconds=_to_float(row.get("duration_seconds")),
                    clock_in=_parse_timestamp(row.get("clock_in")),
                    clock_out=_parse_timestamp(row.get("clock_out")),
                )
            )
        return records

    def sum_hours_by_month(self, employee_id: str, window: CycleWindow) -> dict[str, float]:
        hours_by_month: dict[str, float] = defaultdict(float)
        for record in self.list_records(employee_id, window):
            hours_by_month[month_key(record.day)] += record.hours
        return dict(hours_by_month)

    def count_present_days_by_month(self, employee_id: str, window: CycleWindow) -> dict[str, int]:
        present: dict[str, set[date]] = defaultdict(set)
        for record in self.list_records(employee_id, window):
            present[month_key(record.day)].add(record.day)
        return {month: len(days) for month, days in present.items()}


class ErrorRepository:
    def __init__(self, con: sqlite3.Connection) -> None:
        self.con = con

    def count_by_severity(self, employee_id: str, window: CycleWindow) -> ErrorCounts:
        rows = _fetch_all(
            self.con,
            """
            SELECT lower(severity) AS severity, COUNT(*) AS count
            FROM errors
            WHERE employee_id = ?
              AND date(created_at) >= ?
              AND date(created_at) < ?
            GROUP BY lower(severity)
            """,
            (employee_id, window.start.isoformat(), window.end.isoformat()),
            "errors",
        )
        counts = {row["severity"]: int(row["count"]) for row in rows}
        return ErrorCounts(
            high=counts.get(SEVERITY_HIGH.lower(), 0),
            medium=counts.get(SEVERITY_MEDIUM.lower(), 0),
            low=counts.get(SEVERITY_LOW.lower(), 0),
        )


class AppreciationRepository:
    def __init__(self, con: sqlite3.Connection) -> None:
        self.con = con

    def count(self, employee_id: str, window: CycleWindow) -> int:
        rows = _fetch_all(
            self.con,
            """
            SELECT COUNT(*) AS count
            FROM appreciations
            WHERE employee_id = ?
              AND date(created_at) >= ?
              AND date(created_at) < ?
            """,
            (employee_id, window.start.isoformat(), window.end.isoformat()),
            "appreciations",
        )
        return int(rows[0]["count"]) if rows else 0


class HealthSettingsRepository:
    def __init__(self, con: sqlite3.Connection) -> None:
        self.con = con

    def get_settings(self) -> dict[str, Any]:
        try:
            if not _table_exists(self.con, "health_settings"):
                raise CollaboratorError("health_settings table missing")
        except sqlite3.Error as exc:
            raise CollaboratorError(f"Failed to read health settings: {exc}") from exc
        rows = _fetch_all(
            self.con,
            """
            SELECT setting_key, setting_value, setting_type
            FROM health_settings
            ORDER BY setting_key
            """,
            (),
            "health settings",
        )
        settings: dict[str, Any] = {}
        for row in rows:
            value: Any = row.get("setting_value")
            setting_type = (row.get("setting_type") or "").strip().lower()
            if setting_type == "number":
                value = _to_float(value)
            elif setting_type == "boolean":
                value = str(value).strip().lower() == "true"
            settings[row["setting_key"]] = value
        return settings


class SqliteHealthDataSource:
    """HealthDataSource over one SQLite connection.

    Scoring calls the collaborators from worker threads, so every call holds a
    lock around the shared connection.
    """

    def __init__(self, con: sqlite3.Connection) -> None:
        self.con = con
        self._lock = threading.Lock()
        self.employees = EmployeeRepository(con)
        self.tasks = TaskRepository(con)
        self.attendance = AttendanceRepository(con)
        self.errors = ErrorRepository(con)
        self.appreciations = AppreciationRepository(con)
        self.settings = HealthSettingsRepository(con)

    def get_employee(self, employee_id: str) -> Employee:
        with self._lock:
            return self.employees.get_employee(employee_id)

    def find_tasks_assigned_to(self, employee_name: str) -> list[Task]:
        with self._lock:
            return self.tasks.find_tasks_assigned_to(employee_name)

    def find_completion_events(
        self,
        task_ids: Iterable[str],
        window: CycleWindow,
    ) -> list[TaskHistoryEvent]:
        with self._lock:
            return self.tasks.find_completion_events(task_ids, window)

    def sum_attendance_hours_by_month(self, employee_id: str, window: CycleWindow) -> dict[str, float]:
        with self._lock:
            return self.attendance.sum_hours_by_month(employee_id, window)

    def count_present_days_by_month(self, employee_id: str, window: CycleWindow) -> dict[str, int]:
        with self._lock:
            return self.attendance.count_present_days_by_month(employee_id, window)

    def count_errors_by_severity(self, employee_id: str, window: CycleWindow) -> ErrorCounts:
        with self._lock:
            return self.errors.count_by_severity(employee_id, window)

    def count_appreciations(self, employee_id: str, window: CycleWindow) -> int:
        with self._lock:
            return self.appreciations.count(employee_id, window)

    def get_health_settings(self) -> dict[str, Any]:
        with self._lock:
            return self.settings.get_settings()
