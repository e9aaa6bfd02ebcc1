from __future__ import annotations

from functools import wraps
from typing import Optional

from flask import jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import DomainError, InternalError, ValidationError
from ..core.logging import get_logger

logger = get_logger("http")

STATUS_BY_CODE = {
    "BAD_REQUEST": 400,
    "CONFLICT": 409,
    "NOT_FOUND": 404,
    "FORBIDDEN": 403,
    "INTERNAL": 500,
}


def error_response(err: Exception):
    """JSON error body; anything that is not a domain error is hidden."""
    if not isinstance(err, (DomainError, InternalError)):
        logger.exception("Unhandled error in request %s %s", request.method, request.path)
        err = InternalError()
    status = STATUS_BY_CODE.get(err.code, 500)
    return jsonify({"success": False, "code": err.code, "message": str(err)}), status


def _unauthorized():
    return jsonify({"success": False, "code": "UNAUTHORIZED", "message": "Please sign in to continue."}), 401


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return _unauthorized()
        return view(*args, **kwargs)

    return wrapper


def hr_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return _unauthorized()
        if session.get("role") != Role.HR_ADMIN.value:
            return jsonify({"success": False, "code": "FORBIDDEN", "message": "HR access required."}), 403
        return view(*args, **kwargs)

    return wrapper


def int_arg(name: str, default: Optional[int] = None) -> Optional[int]:
    raw = request.args.get(name)
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be a whole number.")


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}
