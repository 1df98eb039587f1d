from __future__ import annotations

import logging
from typing import Any, Iterable

import pandas as pd

from health_tracking.domain.models import CycleWindow, HealthSettings, Task, TaskHistoryEvent
from health_tracking.services.daily_completion import completions_by_local_day, evaluate_day

LOGGER = logging.getLogger(__name__)


def compute_task_score(
    tasks: Iterable[Task],
    events: Iterable[TaskHistoryEvent],
    window: CycleWindow,
    settings: HealthSettings,
    tz_name: str,
) -> dict[str, Any]:
    task_list = list(tasks)
    completed_by_day = completions_by_local_day(events, tz_name)

    days_completed = 0
    breakdown: list[dict[str, Any]] = []
    for stamp in pd.date_range(window.start, window.end, freq="D"):
        day = stamp.date()
        result = evaluate_day(day, task_list, completed_by_day.get(day, set()))
        if result.complete:
            days_completed += 1
        LOGGER.debug("Task day %s complete=%s totals=%s", day, result.complete, result.totals)
        breakdown.append(result.to_dict())

    score = days_completed * settings.task_points_per_day
    LOGGER.info("Task completion: %s/%s days, score %s", days_completed, window.days, score)
    return {
        "completed": days_completed,
        "total": window.days,
        "score": score,
        "days": breakdown,
    }


def empty_task_score() -> dict[str, Any]:
    return {"completed": 0, "total": 0, "score": 0, "days": []}
