from __future__ import annotations

from health_tracking.domain.constants import (
    RATING_AVERAGE,
    RATING_BELOW_STANDARD,
    RATING_COLORS,
    RATING_TOP_RATED,
)
from health_tracking.domain.models import HealthSettings


def classify_rating(score: float, settings: HealthSettings) -> tuple[str, str]:
    # Lower bounds are inclusive.
    if score >= settings.top_rated_threshold:
        rating = RATING_TOP_RATED
    elif score >= settings.average_threshold:
        rating = RATING_AVERAGE
    else:
        rating = RATING_BELOW_STANDARD
    return rating, RATING_COLORS[rating]
