from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import to_reference_date
from ..common.http import api_login_required, current_caller, error_response, json_body, ok
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.exceptions import DomainError, ValidationError
from ..container import Container
from ..faculty.model import ResolutionContext


def _int_arg(name: str, default: int) -> int:
    raw = request.args.get(name)
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValidationError(f"{name} must be an integer") from e


def register(app: Flask, container: Container) -> None:
    def _faculty_id_from_args() -> str:
        faculty_id = (request.args.get("faculty_id") or "").strip()
        if faculty_id:
            return faculty_id
        context = ResolutionContext.from_mapping(request.args, caller=current_caller())
        return container.faculty_service.resolve_faculty_id(context).faculty_id

    def _class_key_from_args():
        context = ResolutionContext.from_mapping(request.args)
        if context.class_key:
            return context.class_key
        return {"cohort": context.cohort, "year": context.year, "term": context.term, "section": context.section}

    @app.route("/api/attendance/mark", methods=["POST"], endpoint="api_attendance_mark")
    @api_login_required
    def api_attendance_mark():
        try:
            data = json_body()
            context = ResolutionContext.from_mapping(data, caller=current_caller())
            summary = container.capture_service.capture(
                context,
                data.get("date"),
                data.get("absent_roster", data.get("absentRoster")),
                data.get("notes"),
            )
        except DomainError as e:
            return error_response(e)
        message = "Attendance marked successfully" if summary.created else "Attendance updated successfully"
        return ok({"message": message, "data": summary.as_dict()}, 201 if summary.created else 200)

    @app.route("/api/attendance/can-edit", methods=["GET"], endpoint="api_attendance_can_edit")
    @api_login_required
    def api_attendance_can_edit():
        try:
            day = to_reference_date(request.args.get("date"))
            window = _int_arg("window", -1)
            allowed = container.attendance_service.can_edit(day, window if window >= 0 else None)
        except DomainError as e:
            return error_response(e)
        return ok({"date": day.strftime("%Y-%m-%d"), "can_edit": allowed})

    @app.route("/api/attendance/record", methods=["GET"], endpoint="api_attendance_record")
    @api_login_required
    def api_attendance_record():
        try:
            record = container.attendance_service.get_attendance(
                _faculty_id_from_args(), _class_key_from_args(), request.args.get("date")
            )
        except DomainError as e:
            return error_response(e)
        if record is None:
            return (
                jsonify({"success": False, "code": "NOT_FOUND", "message": "No attendance recorded", "details": []}),
                404,
            )
        return ok({"data": record.as_dict()})

    @app.route("/api/attendance/history", methods=["GET"], endpoint="api_attendance_history")
    @api_login_required
    def api_attendance_history():
        try:
            records = container.attendance_service.list_history(
                _faculty_id_from_args(),
                _class_key_from_args(),
                start=request.args.get("start") or None,
                end=request.args.get("end") or None,
                limit=_int_arg("limit", DEFAULT_HISTORY_LIMIT),
            )
        except DomainError as e:
            return error_response(e)
        return ok({"data": [r.as_dict() for r in records]})
