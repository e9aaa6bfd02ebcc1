from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.aggregator import AttendanceAggregator
from .attendance.classifier import AttendanceClassifier
from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import TimekeepingService
from .core.constants import LATE_TOLERANCE_MINUTES
from .database.connection import DBConfig, DatabaseConnection
from .directory.mysql_directory_repository import MySQLDirectoryRepository
from .policies.mysql_policy_repository import MySQLPolicyRepository
from .policies.resolver import PolicyResolver
from .policies.service import WorkPolicyService
from .timezones.projector import LocalTimeProjector
from .timezones.resolver import TimeZoneResolver


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    attendance_repo: MySQLAttendanceRepository
    directory_repo: MySQLDirectoryRepository
    policies_repo: MySQLPolicyRepository

    zone_resolver: TimeZoneResolver
    policy_resolver: PolicyResolver
    classifier: AttendanceClassifier
    aggregator: AttendanceAggregator

    timekeeping_service: TimekeepingService
    policy_service: WorkPolicyService


def build_container(*, db_config: dict, default_timezone: Optional[str] = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    attendance_repo = MySQLAttendanceRepository(conn)
    directory_repo = MySQLDirectoryRepository(conn)
    policies_repo = MySQLPolicyRepository(conn)

    zone_resolver = TimeZoneResolver()
    policy_resolver = PolicyResolver()
    classifier = AttendanceClassifier(
        LocalTimeProjector(zone_resolver),
        policy_resolver,
        strategy_factory=AttendanceStrategyFactory(),
        tolerance_minutes=LATE_TOLERANCE_MINUTES,
    )
    aggregator = AttendanceAggregator(classifier, policy_resolver)

    timekeeping_service = TimekeepingService(
        attendance_repo,
        directory_repo,
        policies_repo,
        zone_resolver=zone_resolver,
        classifier=classifier,
        aggregator=aggregator,
        policy_resolver=policy_resolver,
        default_timezone=default_timezone or None,
    )
    policy_service = WorkPolicyService(policies_repo, policy_resolver)

    return Container(
        conn=conn,
        attendance_repo=attendance_repo,
        directory_repo=directory_repo,
        policies_repo=policies_repo,
        zone_resolver=zone_resolver,
        policy_resolver=policy_resolver,
        classifier=classifier,
        aggregator=aggregator,
        timekeeping_service=timekeeping_service,
        policy_service=policy_service,
    )
