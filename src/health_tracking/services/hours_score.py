from __future__ import annotations

import logging
from typing import Any, Mapping

from health_tracking.domain.models import CycleWindow, HealthSettings
from health_tracking.services.cycle_windows import (
    month_key,
    month_label,
    month_starts,
    working_days_in_month,
)

LOGGER = logging.getLogger(__name__)


def compute_hours_score(
    monthly_hours: Mapping[str, float],
    window: CycleWindow,
    settings: HealthSettings,
    expected_hours_per_day: float | None = None,
) -> dict[str, Any]:
    hours_per_day = expected_hours_per_day or settings.expected_hours_per_day

    score = 0
    total_provided = 0.0
    total_required = 0.0
    breakdown: list[dict[str, Any]] = []
    for month_start in month_starts(window, settings.hr_cycle_months):
        working_days = working_days_in_month(month_start, settings.working_days_per_week)
        required = working_days * hours_per_day
        provided = float(monthly_hours.get(month_key(month_start)) or 0.0)
        points = settings.hours_points_per_month if provided >= required else 0
        score += points
        total_provided += provided
        total_required += required
        breakdown.append(
            {
                "month": month_label(month_start),
                "required": required,
                "provided": provided,
                "workingDays": working_days,
                "points": points,
            }
        )
        LOGGER.debug(
            "Hours %s: required %.2fh, provided %.2fh, points %s",
            month_key(month_start),
            required,
            provided,
            points,
        )

    return {
        "provided": total_provided,
        "required": total_required,
        "score": score,
        "monthlyBreakdown": breakdown,
    }


def compute_attendance_score(
    present_days: Mapping[str, int],
    window: CycleWindow,
    settings: HealthSettings,
) -> dict[str, Any]:
    deduction = 0
    total_absences = 0
    breakdown: list[dict[str, Any]] = []
    for month_start in month_starts(window, settings.hr_cycle_months):
        working_days = working_days_in_month(month_start, settings.working_days_per_week)
        days_present = int(present_days.get(month_key(month_start)) or 0)
        absences = working_days - days_present
        total_absences += absences
        # One flat deduction per offending month, whatever the excess.
        month_deduction = settings.attendance_deduction if absences > settings.max_absences_per_month else 0
        deduction += month_deduction
        breakdown.append(
            {
                "month": month_label(month_start),
                "workingDays": working_days,
                "daysPresent": days_present,
                "absences": absences,
                "deduction": month_deduction,
            }
        )

    return {"absences": total_absences, "score": -deduction, "monthlyBreakdown": breakdown}


def empty_hours_score() -> dict[str, Any]:
    return {"provided": 0, "required": 0, "score": 0, "monthlyBreakdown": []}


def empty_attendance_score() -> dict[str, Any]:
    return {"absences": 0, "score": 0, "monthlyBreakdown": []}
