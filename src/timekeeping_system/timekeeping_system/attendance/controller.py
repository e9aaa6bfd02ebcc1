from __future__ import annotations

from flask import Flask, jsonify, request, session

from ..common.http import error_response, hr_required, int_arg, json_body, login_required
from ..common.validators import require_iso_date
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.timekeeping_service

    @app.route("/api/attendance/today", methods=["GET"], endpoint="attendance_today")
    @login_required
    def attendance_today():
        try:
            today = service.today(str(session["user_id"]))
            return jsonify({"success": True, "data": today.to_dict()})
        except Exception as e:
            return error_response(e)

    @app.route("/api/attendance/check-in", methods=["POST"], endpoint="attendance_check_in")
    @login_required
    def attendance_check_in():
        try:
            data = json_body()
            record = service.check_in(str(session["user_id"]), data.get("work_type") or "ONSITE")
            return jsonify({"success": True, "message": "Checked in.", "data": record.to_dict()}), 201
        except Exception as e:
            return error_response(e)

    @app.route("/api/attendance/check-out", methods=["POST"], endpoint="attendance_check_out")
    @login_required
    def attendance_check_out():
        try:
            data = json_body()
            record = service.check_out(
                str(session["user_id"]),
                data.get("work_seconds", 0),
                data.get("break_seconds"),
            )
            return jsonify({"success": True, "message": "Checked out.", "data": record.to_dict()})
        except Exception as e:
            return error_response(e)

    @app.route("/api/attendance/history", methods=["GET"], endpoint="attendance_history")
    @login_required
    def attendance_history():
        try:
            history = service.history(
                str(session["user_id"]),
                int_arg("month"),
                int_arg("year"),
            )
            return jsonify({"success": True, "data": history.to_dict()})
        except Exception as e:
            return error_response(e)

    @app.route("/api/attendance/dashboard", methods=["GET"], endpoint="attendance_dashboard")
    @login_required
    def attendance_dashboard():
        try:
            summary = service.dashboard_summary(str(session["user_id"]))
            return jsonify({"success": True, "data": summary.to_dict()})
        except Exception as e:
            return error_response(e)

    @app.route("/api/hr/attendance/overview", methods=["GET"], endpoint="hr_attendance_overview")
    @hr_required
    def hr_attendance_overview():
        try:
            raw = request.args.get("date")
            day = require_iso_date(raw, "date") if raw else None
            overview = service.day_overview(str(session["organization_id"]), day)
            return jsonify({"success": True, "data": overview.to_dict()})
        except Exception as e:
            return error_response(e)

    @app.route("/api/hr/attendance/history", methods=["GET"], endpoint="hr_attendance_history")
    @hr_required
    def hr_attendance_history():
        try:
            employee_id = request.args.get("employee_id")
            if not employee_id:
                raise ValidationError("employee_id is required.")
            history = service.hr_history(
                str(session["organization_id"]),
                employee_id,
                int_arg("month"),
                int_arg("year"),
            )
            return jsonify({"success": True, "data": history.to_dict()})
        except Exception as e:
            return error_response(e)

    @app.route("/api/hr/attendance/manual-entry", methods=["POST"], endpoint="hr_attendance_manual_entry")
    @hr_required
    def hr_attendance_manual_entry():
        try:
            data = json_body()
            attendance_date = require_iso_date(data.get("date"), "date")

            record = service.manual_entry(
                str(session["organization_id"]),
                str(data.get("employee_id") or ""),
                attendance_date,
                check_in=data.get("check_in") or None,
                check_out=data.get("check_out") or None,
                work_type=data.get("work_type") or "ONSITE",
                explicit_status=data.get("status") or None,
                note=data.get("note"),
            )
            return jsonify({"success": True, "message": "Attendance saved.", "data": record.to_dict()})
        except Exception as e:
            return error_response(e)
