from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field, fields
from datetime import date, datetime
from typing import Any, Mapping

from health_tracking.domain.constants import (
    COMPLETED_STATUS,
    CYCLE_DESCRIPTIONS,
    STATUS_CHANGED_ACTION,
)
from health_tracking.domain.errors import ConfigError


@dataclass(frozen=True)
class Employee:
    id: str
    name: str
    expected_hours_per_day: float | None = None


@dataclass(frozen=True)
class Task:
    id: str
    title: str
    labels: str = ""
    assigned_to: str = ""


@dataclass(frozen=True)
class TaskHistoryEvent:
    task_id: str
    action: str
    new_value: str | None
    created_at: datetime | str | None

    @property
    def is_completion(self) -> bool:
        action = (self.action or "").strip().lower()
        new_value = (self.new_value or "").strip().lower()
        return action == STATUS_CHANGED_ACTION and new_value == COMPLETED_STATUS


@dataclass(frozen=True)
class AttendanceRecord:
    employee_id: str
    day: date
    duration_seconds: float | None = None
    clock_in: datetime | None = None
    clock_out: datetime | None = None

    @property
    def hours(self) -> float:
        if self.duration_seconds and self.duration_seconds > 0:
            return self.duration_seconds / 3600.0
        if self.clock_in is not None and self.clock_out is not None:
            return (self.clock_out - self.clock_in).total_seconds() / 3600.0
        return 0.0


@dataclass(frozen=True)
class ErrorCounts:
    high: int = 0
    medium: int = 0
    low: int = 0


@dataclass(frozen=True)
class CycleWindow:
    start: date
    end: date

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1

    def to_dict(self) -> dict[str, str]:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


_INTEGER_SETTINGS = {
    "task_cycle_months",
    "task_cycle_offset_days",
    "working_days_per_week",
    "hr_cycle_months",
    "data_cycle_months",
    "warning_letters_cycle_months",
    "warning_letters_cycle_offset_days",
}


@dataclass(frozen=True)
class HealthSettings:
    top_rated_threshold: float = 300
    average_threshold: float = 200
    below_standard_threshold: float = 199
    task_points_per_day: float = 2
    task_cycle_months: int = 3
    task_cycle_offset_days: int = 2
    hours_points_per_month: float = 8
    expected_hours_per_day: float = 8
    working_days_per_week: int = 6
    hr_cycle_months: int = 3
    error_high_deduction: float = 15
    error_medium_deduction: float = 8
    error_low_deduction: float = 3
    appreciation_bonus: float = 5
    attendance_deduction: float = 5
    max_absences_per_month: float = 2
    data_cycle_months: int = 3
    # Loaded and reported, not applied to the health score.
    warning_letters_deduction: float = 10
    warning_letters_cycle_months: int = 6
    warning_letters_cycle_offset_days: int = 0
    warning_letters_severity_high_deduction: float = 20
    warning_letters_severity_medium_deduction: float = 15
    warning_letters_severity_low_deduction: float = 10

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any] | None) -> "HealthSettings":
        """Build a snapshot from stored key/value settings.

        Unknown keys are ignored and missing keys keep their defaults.
        Raises ConfigError when a value cannot be used.
        """
        values: dict[str, Any] = {}
        for setting in fields(cls):
            raw = (mapping or {}).get(setting.name)
            if raw in (None, ""):
                continue
            values[setting.name] = _coerce_setting(setting.name, raw)
        settings = cls(**values)
        settings.validate()
        return settings

    def validate(self) -> None:
        for name in _INTEGER_SETTINGS:
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} must not be negative", setting=name)
        if self.hr_cycle_months < 1:
            raise ConfigError("hr_cycle_months must be at least 1", setting="hr_cycle_months")
        if not 1 <= self.working_days_per_week <= 7:
            raise ConfigError("working_days_per_week must be between 1 and 7", setting="working_days_per_week")
        if self.expected_hours_per_day <= 0:
            raise ConfigError("expected_hours_per_day must be positive", setting="expected_hours_per_day")
        if self.average_threshold > self.top_rated_threshold:
            raise ConfigError("average_threshold must not exceed top_rated_threshold", setting="average_threshold")

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _coerce_setting(name: str, raw: Any) -> int | float:
    if isinstance(raw, bool):
        raise ConfigError(f"Setting {name} must be numeric, got {raw!r}", setting=name)
    try:
        number = float(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Setting {name} must be numeric, got {raw!r}", setting=name) from exc
    if math.isnan(number) or math.isinf(number):
        raise ConfigError(f"Setting {name} must be finite, got {raw!r}", setting=name)
    if name in _INTEGER_SETTINGS:
        if not number.is_integer():
            raise ConfigError(f"Setting {name} must be a whole number, got {raw!r}", setting=name)
        return int(number)
    return int(number) if number.is_integer() else number


@dataclass(frozen=True)
class HealthScoreResult:
    employee_id: str
    employee_name: str | None
    health_score: float
    rating: str
    rating_color: str
    calculations: dict[str, Any]
    cycles: dict[str, CycleWindow]
    message: str | None = None
    failed_components: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        cycles = {
            name: {**window.to_dict(), "description": CYCLE_DESCRIPTIONS.get(name, "")}
            for name, window in self.cycles.items()
        }
        payload: dict[str, Any] = {
            "employeeId": self.employee_id,
            "employeeName": self.employee_name,
            "healthScore": self.health_score,
            "rating": self.rating,
            "ratingColor": self.rating_color,
            "calculations": self.calculations,
            "period": self.cycles["hr"].to_dict() if "hr" in self.cycles else None,
            "cycles": cycles,
            "failedComponents": list(self.failed_components),
        }
        if self.message:
            payload["message"] = self.message
        return payload
