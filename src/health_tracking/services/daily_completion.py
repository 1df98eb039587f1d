from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Iterable

import pandas as pd

from health_tracking.domain.constants import RECURRENCE_TYPES
from health_tracking.domain.models import Task, TaskHistoryEvent
from health_tracking.services.recurrence_classifier import classify_task


@dataclass(frozen=True)
class DayCompletion:
    day: date
    complete: bool
    completed: dict[str, int]
    totals: dict[str, int]

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"day": self.day.isoformat(), "complete": self.complete}
        for recurrence_type in RECURRENCE_TYPES:
            payload[recurrence_type.lower()] = {
                "completed": self.completed.get(recurrence_type, 0),
                "total": self.totals.get(recurrence_type, 0),
            }
        return payload


def completions_by_local_day(
    events: Iterable[TaskHistoryEvent],
    tz_name: str,
) -> dict[date, set[str]]:
    """Group "became Completed" events by the organization's local calendar day."""
    by_day: dict[date, set[str]] = defaultdict(set)
    for event in events:
        if not event.is_completion:
            continue
        local_day = _local_day(event.created_at, tz_name)
        if local_day is None:
            continue
        by_day[local_day].add(str(event.task_id))
    return dict(by_day)


def evaluate_day(day: date, tasks: Iterable[Task], completed_task_ids: set[str]) -> DayCompletion:
    totals = {recurrence_type: 0 for recurrence_type in RECURRENCE_TYPES}
    completed = {recurrence_type: 0 for recurrence_type in RECURRENCE_TYPES}
    for task in tasks:
        recurrence = classify_task(task.title, task.labels, day)
        if not recurrence.due:
            continue
        totals[recurrence.type] += 1
        if str(task.id) in completed_task_ids:
            completed[recurrence.type] += 1

    required = [recurrence_type for recurrence_type in RECURRENCE_TYPES if totals[recurrence_type]]
    # A day with nothing due never counts as complete.
    is_complete = bool(required) and all(
        completed[recurrence_type] == totals[recurrence_type] for recurrence_type in required
    )
    return DayCompletion(day=day, complete=is_complete, completed=completed, totals=totals)


def _local_day(value: datetime | str | None, tz_name: str) -> date | None:
    if value in (None, ""):
        return None
    try:
        stamp = pd.to_datetime(value, errors="coerce", utc=True)
    except (TypeError, ValueError):
        return None
    if pd.isna(stamp):
        return None
    return stamp.tz_convert(tz_name).date()
