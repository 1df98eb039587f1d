from __future__ import annotations

from typing import Any

from health_tracking.domain.models import ErrorCounts, HealthSettings


def compute_error_score(counts: ErrorCounts, settings: HealthSettings) -> dict[str, Any]:
    deduction = (
        counts.high * settings.error_high_deduction
        + counts.medium * settings.error_medium_deduction
        + counts.low * settings.error_low_deduction
    )
    return {
        "high": counts.high,
        "medium": counts.medium,
        "low": counts.low,
        "score": -deduction,
    }


def compute_appreciation_score(count: int, settings: HealthSettings) -> dict[str, Any]:
    return {"count": count, "score": count * settings.appreciation_bonus}


def empty_error_score() -> dict[str, Any]:
    return {"high": 0, "medium": 0, "low": 0, "score": 0}


def empty_appreciation_score() -> dict[str, Any]:
    return {"count": 0, "score": 0}
