from __future__ import annotations

from typing import Iterable, Optional

from ..core.enums import Role, Weekday
from ..core.exceptions import AuthorizationError, ValidationError
from ..common.validators import require_wall_clock
from .model import PolicyTimings, WeekSchedule, WorkPolicy
from .repository import PolicyRepository
from .resolver import PolicyResolver


class WorkPolicyService:
    """HR administration of an organization's work policy.

    Reads go through PolicyResolver so callers always see a complete policy.
    Writes are strict: unlike the read path, malformed input is rejected.
    """

    def __init__(self, policies: PolicyRepository, resolver: PolicyResolver | None = None):
        self._policies = policies
        self._resolver = resolver or PolicyResolver()

    def get_policy(self, organization_id: str) -> tuple[PolicyTimings, WeekSchedule]:
        raw = self._policies.get_for_organization(organization_id)
        return self._resolver.resolve_timings(raw), self._resolver.resolve_week_schedule(raw)

    @staticmethod
    def _weekdays(values: Optional[Iterable[str]], label: str) -> list[str]:
        out: list[str] = []
        for raw in values or ():
            try:
                day = Weekday(str(raw).strip().upper())
            except ValueError:
                raise ValidationError(f"{label} contains an unknown weekday: {raw!r}")
            if day.value not in out:
                out.append(day.value)
        return sorted(out, key=lambda v: Weekday(v).position)

    def update_policy(
        self,
        *,
        current_role: Role,
        organization_id: str,
        onsite_start: str,
        onsite_end: str,
        remote_start: str,
        remote_end: str,
        working_days: Iterable[str],
        weekend_days: Iterable[str],
    ) -> tuple[PolicyTimings, WeekSchedule]:
        if current_role != Role.HR_ADMIN:
            raise AuthorizationError("Only HR administrators can change the work policy.")

        timings = {}
        for name, value in (
            ("Onsite start time", onsite_start),
            ("Onsite end time", onsite_end),
            ("Remote start time", remote_start),
            ("Remote end time", remote_end),
        ):
            checked = require_wall_clock(value, name)
            if checked is None:
                raise ValidationError(f"{name} is required.")
            timings[name] = checked

        working = self._weekdays(working_days, "Working days")
        weekend = self._weekdays(weekend_days, "Weekend days")
        if not working:
            raise ValidationError("Select at least one working day.")
        overlap = set(working) & set(weekend)
        if overlap:
            raise ValidationError("A day cannot be both a working day and a weekend day.")

        policy = WorkPolicy(
            organization_id=organization_id,
            onsite_start=timings["Onsite start time"],
            onsite_end=timings["Onsite end time"],
            remote_start=timings["Remote start time"],
            remote_end=timings["Remote end time"],
            working_days=working,
            weekend_days=weekend,
        )
        self._policies.save(policy)
        return self._resolver.resolve_timings(policy), self._resolver.resolve_week_schedule(policy)
