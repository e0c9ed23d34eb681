from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Mapping, Optional

from flask import jsonify, request, session

from ..core.exceptions import (
    AuthorizationError,
    DomainError,
    NoFacultyFound,
    PersistenceError,
    StaleAttendanceRecord,
    ValidationError,
)
from ..faculty.model import CallerIdentity

logger = logging.getLogger(__name__)


def status_for(error: DomainError) -> int:
    # Order matters: StaleAttendanceRecord is also a PersistenceError.
    if isinstance(error, StaleAttendanceRecord):
        return 409
    if isinstance(error, PersistenceError):
        return 503
    if isinstance(error, NoFacultyFound):
        return 404
    if isinstance(error, AuthorizationError):
        return 403
    return 400


def error_response(error: DomainError):
    status = status_for(error)
    if status >= 500:
        logger.error("%s: %s", error.code, error)
    return (
        jsonify(
            {
                "success": False,
                "code": error.code,
                "message": str(error),
                "details": list(getattr(error, "details", []) or []),
            }
        ),
        status,
    )


def ok(payload: Optional[Mapping[str, Any]] = None, status: int = 200):
    body = {"success": True}
    body.update(payload or {})
    return jsonify(body), status


def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def current_caller() -> Optional[CallerIdentity]:
    if "user_id" not in session:
        return None
    return CallerIdentity(user_id=str(session["user_id"]), role=str(session.get("role") or ""))


def api_login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "code": "LOGIN_REQUIRED", "message": "Login required", "details": []}), 401
        return view(*args, **kwargs)

    return wrapper
