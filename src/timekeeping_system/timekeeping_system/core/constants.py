"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_ONSITE_START = "09:00"
DEFAULT_ONSITE_END = "18:00"
DEFAULT_REMOTE_START = "08:00"
DEFAULT_REMOTE_END = "17:00"

LATE_TOLERANCE_MINUTES = 10
MAX_DAILY_WORK_SECONDS = 8 * 60 * 60

DEFAULT_OVERVIEW_TREND_DAYS = 5
DEFAULT_DASHBOARD_TREND_DAYS = 7

MANUAL_SOURCE = "HR_MANUAL"
SYSTEM_SOURCE = "WEB"

EMPTY_TIME_LABEL = "—"
