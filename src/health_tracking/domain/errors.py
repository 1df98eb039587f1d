from __future__ import annotations


class HealthScoreError(Exception):
    """Base class for health score failures."""


class NotFoundError(HealthScoreError):
    """The requested employee does not exist."""


class CollaboratorError(HealthScoreError):
    """A single data fetch failed."""


class ConfigError(HealthScoreError):
    """Health settings are missing or invalid."""

    def __init__(self, message: str, setting: str | None = None) -> None:
        super().__init__(message)
        self.setting = setting
