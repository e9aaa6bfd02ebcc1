from datetime import date, datetime, timedelta, timezone

from src.timekeeping_system.timekeeping_system.attendance.factory import AttendanceStrategyFactory
from src.timekeeping_system.timekeeping_system.attendance.model import ResolvedSchedule
from src.timekeeping_system.timekeeping_system.attendance.strategies.explicit_strategy import ExplicitStatusStrategy
from src.timekeeping_system.timekeeping_system.attendance.strategies.late_strategy import LateStrategy
from src.timekeeping_system.timekeeping_system.attendance.strategies.on_time_strategy import OnTimeStrategy
from src.timekeeping_system.timekeeping_system.core.enums import AttendanceStatus, WorkType


def _schedule(work_type=WorkType.ONSITE) -> ResolvedSchedule:
    start = datetime(2025, 1, 1, 8, 0, tzinfo=timezone.utc)
    return ResolvedSchedule(
        attendance_date=date(2025, 1, 1),
        work_type=work_type,
        zone="UTC",
        scheduled_start=start,
        late_after=start + timedelta(minutes=10),
    )


def test_factory_checkin_on_time_within_tolerance():
    now = datetime(2025, 1, 1, 8, 9, 59, tzinfo=timezone.utc)

    strategy = AttendanceStrategyFactory().for_checkin(check_in_at=now, schedule=_schedule())

    assert isinstance(strategy, OnTimeStrategy)


def test_factory_checkin_late_after_tolerance():
    now = datetime(2025, 1, 1, 8, 10, 1, tzinfo=timezone.utc)

    strategy = AttendanceStrategyFactory().for_checkin(check_in_at=now, schedule=_schedule())

    assert isinstance(strategy, LateStrategy)


def test_factory_without_check_in_is_on_time():
    strategy = AttendanceStrategyFactory().for_checkin(check_in_at=None, schedule=None)

    assert isinstance(strategy, OnTimeStrategy)
    assert strategy.decide(check_in_at=None, work_type=WorkType.REMOTE).status == AttendanceStatus.PRESENT


def test_on_time_remote_check_in_is_remote():
    now = datetime(2025, 1, 1, 8, 0, tzinfo=timezone.utc)

    decision = OnTimeStrategy().decide(check_in_at=now, work_type=WorkType.REMOTE)

    assert decision.status == AttendanceStatus.REMOTE


def test_explicit_strategy_keeps_the_given_status():
    strategy = AttendanceStrategyFactory().for_explicit(AttendanceStatus.HOLIDAY)

    assert isinstance(strategy, ExplicitStatusStrategy)
    assert strategy.decide(check_in_at=None, work_type=WorkType.ONSITE).status == AttendanceStatus.HOLIDAY
