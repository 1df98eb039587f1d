from __future__ import annotations

# Recurrence is inferred from free-text titles/labels ("Daily", "Report (Monday)",
# "Invoices (15 of month)"). This is a heuristic: an explicit recurrence field on
# tasks would replace it.

import re
from dataclasses import dataclass
from datetime import date
from typing import Callable

from health_tracking.domain.constants import (
    MONTHLY_TAG_DAYS,
    RECURRENCE_DAILY,
    RECURRENCE_MONTHLY,
    RECURRENCE_NONE,
    RECURRENCE_WEEKLY,
    WEEKDAY_NAMES,
)
from health_tracking.services.normalize import normalize_words

_WEEKDAY_TAG_RE = re.compile(r"\(\s*(" + "|".join(WEEKDAY_NAMES) + r")\s*\)")
_WEEKDAY_NAME_RE = re.compile("|".join(WEEKDAY_NAMES))
_MONTH_TAG_RE = re.compile(
    r"\(\s*(" + "|".join(str(day) for day in MONTHLY_TAG_DAYS) + r")\s+of\s+month\s*\)"
)
_DAY_NUMBER_RE = re.compile(r"(?<!\d)(\d{1,2})(?:st|nd|rd|th)?(?!\d)")


@dataclass(frozen=True)
class Recurrence:
    type: str
    due: bool


NOT_RECURRING = Recurrence(RECURRENCE_NONE, False)


@dataclass(frozen=True)
class _TaskText:
    title: str
    labels: str

    def mentions(self, word: str) -> bool:
        return word in self.labels or word in self.title


def _is_daily(text: _TaskText) -> bool:
    return text.mentions("daily")


def _daily_due(text: _TaskText, day: date) -> bool:
    return True


def _is_weekly(text: _TaskText) -> bool:
    if _WEEKDAY_TAG_RE.search(text.title):
        return True
    # The keyword form needs a weekday in the title to name the due day.
    return text.mentions("weekly") and bool(_WEEKDAY_NAME_RE.search(text.title))


def _weekly_due(text: _TaskText, day: date) -> bool:
    weekday = WEEKDAY_NAMES[day.weekday()]
    if weekday in _WEEKDAY_TAG_RE.findall(text.title):
        return True
    return text.mentions("weekly") and weekday in _WEEKDAY_NAME_RE.findall(text.title)


def _is_monthly(text: _TaskText) -> bool:
    if _MONTH_TAG_RE.search(text.title):
        return True
    return text.mentions("monthly") and bool(_DAY_NUMBER_RE.search(text.title))


def _monthly_due(text: _TaskText, day: date) -> bool:
    tagged_days = {int(value) for value in _MONTH_TAG_RE.findall(text.title)}
    if day.day in tagged_days:
        return True
    if not text.mentions("monthly"):
        return False
    return day.day in {int(value) for value in _DAY_NUMBER_RE.findall(text.title)}


# First match wins: Daily > Weekly > Monthly.
_RULES: tuple[tuple[str, Callable[[_TaskText], bool], Callable[[_TaskText, date], bool]], ...] = (
    (RECURRENCE_DAILY, _is_daily, _daily_due),
    (RECURRENCE_WEEKLY, _is_weekly, _weekly_due),
    (RECURRENCE_MONTHLY, _is_monthly, _monthly_due),
)


def classify_task(title: str | None, labels: str | None, day: date) -> Recurrence:
    text = _TaskText(title=normalize_words(title), labels=normalize_words(labels))
    for recurrence_type, matches, is_due in _RULES:
        if matches(text):
            return Recurrence(recurrence_type, is_due(text, day))
    return NOT_RECURRING
