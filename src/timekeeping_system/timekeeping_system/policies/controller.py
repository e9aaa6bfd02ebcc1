from __future__ import annotations

from flask import Flask, jsonify, session

from ..common.http import error_response, hr_required, json_body
from ..core.enums import Role
from ..core.logging import get_logger
from ..container import Container

logger = get_logger("WorkPolicyController")


def _policy_payload(timings, schedule) -> dict:
    return {
        "onsite_start": timings.onsite_start,
        "onsite_end": timings.onsite_end,
        "remote_start": timings.remote_start,
        "remote_end": timings.remote_end,
        **schedule.to_dict(),
    }


def register(app: Flask, container: Container) -> None:
    service = container.policy_service

    @app.route("/api/hr/work-policy", methods=["GET"], endpoint="hr_work_policy")
    @hr_required
    def hr_work_policy():
        try:
            timings, schedule = service.get_policy(str(session["organization_id"]))
            return jsonify({"success": True, "data": _policy_payload(timings, schedule)})
        except Exception as e:
            return error_response(e)

    @app.route("/api/hr/work-policy", methods=["PUT"], endpoint="hr_work_policy_update")
    @hr_required
    def hr_work_policy_update():
        try:
            data = json_body()
            organization_id = str(session["organization_id"])
            timings, schedule = service.update_policy(
                current_role=Role(session.get("role")),
                organization_id=organization_id,
                onsite_start=data.get("onsite_start"),
                onsite_end=data.get("onsite_end"),
                remote_start=data.get("remote_start"),
                remote_end=data.get("remote_end"),
                working_days=data.get("working_days") or [],
                weekend_days=data.get("weekend_days") or [],
            )
            logger.info("Work policy updated organization=%s by=%s", organization_id, session.get("user_id"))
            return jsonify({"success": True, "message": "Work policy saved.", "data": _policy_payload(timings, schedule)})
        except Exception as e:
            return error_response(e)
