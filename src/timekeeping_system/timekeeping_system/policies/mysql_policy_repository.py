from __future__ import annotations

import json
from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, load_json_list
from .model import WorkPolicy
from .repository import PolicyRepository


class MySQLPolicyRepository(PolicyRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_organization(self, organization_id: str) -> Optional[WorkPolicy]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT organization_id, onsite_start_time, onsite_end_time,
                       remote_start_time, remote_end_time, working_days, weekend_days
                FROM work_policies
                WHERE organization_id=%s
                """,
                (organization_id,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return WorkPolicy(
                organization_id=str(r["organization_id"]),
                onsite_start=r.get("onsite_start_time"),
                onsite_end=r.get("onsite_end_time"),
                remote_start=r.get("remote_start_time"),
                remote_end=r.get("remote_end_time"),
                working_days=load_json_list(r.get("working_days")),
                weekend_days=load_json_list(r.get("weekend_days")),
            )

    def save(self, policy: WorkPolicy) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO work_policies(
                    organization_id, onsite_start_time, onsite_end_time,
                    remote_start_time, remote_end_time, working_days, weekend_days
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    onsite_start_time=VALUES(onsite_start_time),
                    onsite_end_time=VALUES(onsite_end_time),
                    remote_start_time=VALUES(remote_start_time),
                    remote_end_time=VALUES(remote_end_time),
                    working_days=VALUES(working_days),
                    weekend_days=VALUES(weekend_days)
                """,
                (
                    policy.organization_id,
                    policy.onsite_start,
                    policy.onsite_end,
                    policy.remote_start,
                    policy.remote_end,
                    json.dumps(list(policy.working_days)),
                    json.dumps(list(policy.weekend_days)),
                ),
            )
