from __future__ import annotations

from datetime import date
from typing import Iterable, Optional

from ..common.datetime_utils import parse_wall_clock
from ..core.constants import DEFAULT_ONSITE_END, DEFAULT_ONSITE_START, DEFAULT_REMOTE_END, DEFAULT_REMOTE_START
from ..core.enums import Weekday, WorkType
from ..core.logging import get_logger
from .model import PolicyTimings, WeekSchedule, WorkPolicy

logger = get_logger("PolicyResolver")

DEFAULT_TIMINGS = PolicyTimings(
    onsite_start=DEFAULT_ONSITE_START,
    onsite_end=DEFAULT_ONSITE_END,
    remote_start=DEFAULT_REMOTE_START,
    remote_end=DEFAULT_REMOTE_END,
)

DEFAULT_WEEK_SCHEDULE = WeekSchedule(
    working_days=(Weekday.MONDAY, Weekday.TUESDAY, Weekday.WEDNESDAY, Weekday.THURSDAY, Weekday.FRIDAY),
    weekend_days=(Weekday.SATURDAY, Weekday.SUNDAY),
)


def _timing_or_default(value: Optional[str], default: str, field_name: str) -> str:
    parsed = parse_wall_clock(value)
    if parsed is None:
        if value:
            logger.warning("Malformed policy %s %r; falling back to %s", field_name, value, default)
        return default
    return f"{parsed[0]:02d}:{parsed[1]:02d}"


def normalize_weekdays(values: Optional[Iterable[str]]) -> list[Weekday]:
    """Dedupe, drop unknown symbols and sort into MONDAY..SUNDAY order."""
    seen: set[Weekday] = set()
    for raw in values or ():
        try:
            seen.add(Weekday(str(raw).strip().upper()))
        except ValueError:
            continue
    return sorted(seen, key=lambda d: d.position)


class PolicyResolver:
    """Normalize raw work-policy configuration, substituting defaults.

    Never raises: bad configuration must not block check-in.
    """

    def resolve_timings(self, raw: Optional[WorkPolicy]) -> PolicyTimings:
        if raw is None:
            return DEFAULT_TIMINGS
        return PolicyTimings(
            onsite_start=_timing_or_default(raw.onsite_start, DEFAULT_ONSITE_START, "onsite_start"),
            onsite_end=_timing_or_default(raw.onsite_end, DEFAULT_ONSITE_END, "onsite_end"),
            remote_start=_timing_or_default(raw.remote_start, DEFAULT_REMOTE_START, "remote_start"),
            remote_end=_timing_or_default(raw.remote_end, DEFAULT_REMOTE_END, "remote_end"),
        )

    def resolve_week_schedule(self, raw: Optional[WorkPolicy]) -> WeekSchedule:
        if raw is None:
            return DEFAULT_WEEK_SCHEDULE

        working = tuple(normalize_weekdays(raw.working_days)) or DEFAULT_WEEK_SCHEDULE.working_days
        weekend = tuple(d for d in normalize_weekdays(raw.weekend_days) if d not in working)
        if not weekend:
            # A seven-day working week leaves no room for the default weekend.
            weekend = tuple(d for d in DEFAULT_WEEK_SCHEDULE.weekend_days if d not in working)

        return WeekSchedule(working_days=working, weekend_days=weekend)

    @staticmethod
    def start_of_day(timings: PolicyTimings, work_type: WorkType) -> tuple[int, int]:
        value = timings.remote_start if work_type == WorkType.REMOTE else timings.onsite_start
        fallback = DEFAULT_REMOTE_START if work_type == WorkType.REMOTE else DEFAULT_ONSITE_START
        parsed = parse_wall_clock(value) or parse_wall_clock(fallback)
        return parsed

    @staticmethod
    def is_working_day(schedule: WeekSchedule, day: date) -> bool:
        return any(d.position == day.weekday() for d in schedule.working_days)
