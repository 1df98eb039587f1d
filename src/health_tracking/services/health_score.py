from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from typing import Any, Callable, Iterable, Mapping, Protocol

from health_tracking.domain.constants import ADMIN_EMPLOYEE_ID, ADMIN_MESSAGE, DEFAULT_TIMEZONE
from health_tracking.domain.errors import CollaboratorError, ConfigError
from health_tracking.domain.models import (
    CycleWindow,
    Employee,
    ErrorCounts,
    HealthScoreResult,
    HealthSettings,
    Task,
    TaskHistoryEvent,
)
from health_tracking.services.cycle_windows import compute_cycle_windows
from health_tracking.services.error_score import (
    compute_appreciation_score,
    compute_error_score,
    empty_appreciation_score,
    empty_error_score,
)
from health_tracking.services.hours_score import (
    compute_attendance_score,
    compute_hours_score,
    empty_attendance_score,
    empty_hours_score,
)
from health_tracking.services.rating import classify_rating
from health_tracking.services.task_score import compute_task_score, empty_task_score

LOGGER = logging.getLogger(__name__)

SCORED_COMPONENTS = ("tasks", "hours", "errors", "appreciations", "attendance")


class HealthDataSource(Protocol):
    def get_employee(self, employee_id: str) -> Employee: ...

    def find_tasks_assigned_to(self, employee_name: str) -> list[Task]: ...

    def find_completion_events(
        self, task_ids: Iterable[str], window: CycleWindow
    ) -> list[TaskHistoryEvent]: ...

    def sum_attendance_hours_by_month(
        self, employee_id: str, window: CycleWindow
    ) -> Mapping[str, float]: ...

    def count_present_days_by_month(
        self, employee_id: str, window: CycleWindow
    ) -> Mapping[str, int]: ...

    def count_errors_by_severity(self, employee_id: str, window: CycleWindow) -> ErrorCounts: ...

    def count_appreciations(self, employee_id: str, window: CycleWindow) -> int: ...

    def get_health_settings(self) -> Mapping[str, Any]: ...


def load_health_settings(data_source: HealthDataSource) -> HealthSettings:
    try:
        return HealthSettings.from_mapping(data_source.get_health_settings())
    except ConfigError as exc:
        LOGGER.warning(
            "Invalid health setting '%s', discarding all stored settings for defaults: %s",
            exc.setting,
            exc,
        )
        return HealthSettings()
    except CollaboratorError as exc:
        LOGGER.warning("Using default health settings: %s", exc)
        return HealthSettings()


def compute_health_score(
    employee_id: str | int,
    reference_date: date,
    data_source: HealthDataSource,
    settings: HealthSettings,
    tz_name: str = DEFAULT_TIMEZONE,
    max_workers: int = len(SCORED_COMPONENTS),
) -> HealthScoreResult:
    """Score one employee as of ``reference_date``.

    Each component reads its own data in parallel; a component whose fetch
    fails scores zero and is listed in ``failed_components`` while the rest of
    the calculation goes on. ``NotFoundError`` from ``get_employee`` propagates.
    """
    employee_id = str(employee_id)
    cycles = compute_cycle_windows(reference_date, settings)
    LOGGER.info(
        "Health score for %s: hr %s..%s, data %s..%s, task %s..%s",
        employee_id,
        cycles["hr"].start,
        cycles["hr"].end,
        cycles["data"].start,
        cycles["data"].end,
        cycles["task"].start,
        cycles["task"].end,
    )

    if employee_id == ADMIN_EMPLOYEE_ID:
        return _admin_result(cycles, settings)

    employee = data_source.get_employee(employee_id)

    branches: dict[str, tuple[Callable[[], dict[str, Any]], Callable[[], dict[str, Any]]]] = {
        "tasks": (
            lambda: _score_tasks(data_source, employee, cycles["task"], settings, tz_name),
            empty_task_score,
        ),
        "hours": (
            lambda: compute_hours_score(
                data_source.sum_attendance_hours_by_month(employee.id, cycles["hr"]),
                cycles["hr"],
                settings,
                employee.expected_hours_per_day,
            ),
            empty_hours_score,
        ),
        "errors": (
            lambda: compute_error_score(
                data_source.count_errors_by_severity(employee.id, cycles["data"]),
                settings,
            ),
            empty_error_score,
        ),
        "appreciations": (
            lambda: compute_appreciation_score(
                data_source.count_appreciations(employee.id, cycles["data"]),
                settings,
            ),
            empty_appreciation_score,
        ),
        "attendance": (
            lambda: compute_attendance_score(
                data_source.count_present_days_by_month(employee.id, cycles["hr"]),
                cycles["hr"],
                settings,
            ),
            empty_attendance_score,
        ),
    }
    calculations, failed = _run_isolated(branches, max_workers)

    # TODO: warning_letters_* settings are loaded but not deducted; add a
    # warning-letter fetch to HealthDataSource once the deduction rule
    # (flat vs. per severity) is agreed with HR.
    calculations["warningLetters"] = _empty_warning_letters()

    health_score = sum(calculations[name]["score"] for name in SCORED_COMPONENTS)
    rating, rating_color = classify_rating(health_score, settings)
    LOGGER.info("Health score for %s (%s): %s, %s", employee.id, employee.name, health_score, rating)

    return HealthScoreResult(
        employee_id=employee.id,
        employee_name=employee.name,
        health_score=health_score,
        rating=rating,
        rating_color=rating_color,
        calculations=calculations,
        cycles=cycles,
        failed_components=tuple(failed),
    )


def _score_tasks(
    data_source: HealthDataSource,
    employee: Employee,
    window: CycleWindow,
    settings: HealthSettings,
    tz_name: str,
) -> dict[str, Any]:
    tasks = list(data_source.find_tasks_assigned_to(employee.name))
    events: list[TaskHistoryEvent] = []
    if tasks:
        events = list(data_source.find_completion_events([task.id for task in tasks], window))
    return compute_task_score(tasks, events, window, settings, tz_name)


def _run_isolated(
    branches: dict[str, tuple[Callable[[], dict[str, Any]], Callable[[], dict[str, Any]]]],
    max_workers: int,
) -> tuple[dict[str, Any], list[str]]:
    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
        futures = {name: executor.submit(job) for name, (job, _) in branches.items()}

    calculations: dict[str, Any] = {}
    failed: list[str] = []
    for name, future in futures.items():
        try:
            calculations[name] = future.result()
        except Exception:
            LOGGER.exception("Health score component '%s' failed, scoring it as zero", name)
            calculations[name] = branches[name][1]()
            failed.append(name)
    return calculations, failed


def _empty_warning_letters() -> dict[str, Any]:
    return {"high": 0, "medium": 0, "low": 0, "score": 0}


def _admin_result(cycles: dict[str, CycleWindow], settings: HealthSettings) -> HealthScoreResult:
    calculations = {
        "tasks": empty_task_score(),
        "hours": empty_hours_score(),
        "errors": empty_error_score(),
        "appreciations": empty_appreciation_score(),
        "attendance": empty_attendance_score(),
        "warningLetters": _empty_warning_letters(),
    }
    rating, rating_color = classify_rating(0, settings)
    return HealthScoreResult(
        employee_id=ADMIN_EMPLOYEE_ID,
        employee_name="Admin User",
        health_score=0,
        rating=rating,
        rating_color=rating_color,
        calculations=calculations,
        cycles=cycles,
        message=ADMIN_MESSAGE,
    )
