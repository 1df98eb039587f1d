from __future__ import annotations

from datetime import date, timedelta

import pandas as pd

from health_tracking.domain.models import CycleWindow, HealthSettings


def compute_cycle_windows(reference_date: date, settings: HealthSettings) -> dict[str, CycleWindow]:
    """Derive the HR, data and task windows for one scoring call.

    HR: first day of the month ``hr_cycle_months`` back, through today.
    Data: ``data_cycle_months`` back, through tomorrow so today is fully included.
    Task: ``task_cycle_months`` ending ``task_cycle_offset_days`` before today.
    """
    hr_start = months_back(reference_date.replace(day=1), settings.hr_cycle_months)
    hr_window = CycleWindow(start=hr_start, end=reference_date)

    data_window = CycleWindow(
        start=months_back(reference_date, settings.data_cycle_months),
        end=reference_date + timedelta(days=1),
    )

    task_end = reference_date - timedelta(days=settings.task_cycle_offset_days)
    task_window = CycleWindow(
        start=months_back(task_end, settings.task_cycle_months),
        end=task_end,
    )

    return {"hr": hr_window, "data": data_window, "task": task_window}


def months_back(day: date, months: int) -> date:
    # DateOffset clamps to the end of shorter months (31 Mar - 1 month = 28/29 Feb).
    return (pd.Timestamp(day) - pd.DateOffset(months=months)).date()


def month_starts(window: CycleWindow, months: int) -> list[date]:
    first = window.start.replace(day=1)
    return [(pd.Timestamp(first) + pd.DateOffset(months=offset)).date() for offset in range(months)]


def working_days_in_month(month_start: date, working_days_per_week: int) -> int:
    days = pd.date_range(month_start, periods=pd.Timestamp(month_start).days_in_month, freq="D")
    return int((days.weekday < working_days_per_week).sum())


def month_key(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}"


def month_label(day: date) -> str:
    return day.strftime("%b %y")
