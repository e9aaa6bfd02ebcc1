from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Caller role used for access checks on HR routes."""

    HR_ADMIN = "hr_admin"
    EMPLOYEE = "employee"


class AttendanceStatus(str, Enum):
    """Stored attendance status of a record."""

    PRESENT = "PRESENT"
    LATE = "LATE"
    HALF_DAY = "HALF_DAY"
    ABSENT = "ABSENT"
    REMOTE = "REMOTE"
    HOLIDAY = "HOLIDAY"


class WorkType(str, Enum):
    ONSITE = "ONSITE"
    REMOTE = "REMOTE"

    @property
    def label(self) -> str:
        return "Remote" if self is WorkType.REMOTE else "On-site"


class WorkModel(str, Enum):
    """Work model on the employee profile (directory data)."""

    ONSITE = "ONSITE"
    REMOTE = "REMOTE"
    HYBRID = "HYBRID"


class Weekday(str, Enum):
    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"

    @property
    def position(self) -> int:
        """Position in the week, matching ``date.weekday()``."""
        return list(Weekday).index(self)


class HrStatus(str, Enum):
    """Status label shown on the HR console."""

    ON_TIME = "On time"
    LATE = "Late"
    ON_LEAVE = "On leave"
    ABSENT = "Absent"


class CalendarSignal(str, Enum):
    NONE = "none"
    ONTIME = "ontime"
    LATE = "late"
    ABSENT = "absent"
    LEAVE = "leave"
