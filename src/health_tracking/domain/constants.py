from __future__ import annotations

ADMIN_EMPLOYEE_ID = "admin"
ADMIN_MESSAGE = "Admin user - no health data available"

RECURRENCE_DAILY = "Daily"
RECURRENCE_WEEKLY = "Weekly"
RECURRENCE_MONTHLY = "Monthly"
RECURRENCE_NONE = "None"

RECURRENCE_TYPES = (RECURRENCE_DAILY, RECURRENCE_WEEKLY, RECURRENCE_MONTHLY)

WEEKDAY_NAMES = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)

MONTHLY_TAG_DAYS = (5, 10, 15, 20, 25, 30)

STATUS_CHANGED_ACTION = "status changed"
COMPLETED_STATUS = "completed"

SEVERITY_HIGH = "High"
SEVERITY_MEDIUM = "Medium"
SEVERITY_LOW = "Low"

RATING_TOP_RATED = "TOP RATED"
RATING_AVERAGE = "AVERAGE"
RATING_BELOW_STANDARD = "BELOW STANDARD"

RATING_COLORS = {
    RATING_TOP_RATED: "green",
    RATING_AVERAGE: "orange",
    RATING_BELOW_STANDARD: "red",
}

CYCLE_DESCRIPTIONS = {
    "hr": "HR Cycle: Working Hours, Attendance",
    "data": "Data Cycle: Errors, Appreciations",
    "task": "Task Management Cycle: Task Completion",
}

DEFAULT_TIMEZONE = "Asia/Kolkata"
