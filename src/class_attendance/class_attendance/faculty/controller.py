from __future__ import annotations

from flask import Flask

from ..common.http import api_login_required, current_caller, error_response, json_body, ok
from ..common.validators import require_non_empty
from ..container import Container
from ..core.exceptions import DomainError
from .model import ResolutionContext


def register(app: Flask, container: Container) -> None:
    @app.route("/api/faculty/resolve", methods=["POST"], endpoint="api_faculty_resolve")
    @api_login_required
    def api_faculty_resolve():
        try:
            context = ResolutionContext.from_mapping(json_body(), caller=current_caller())
            result = container.faculty_service.resolve_faculty_id(context)
        except DomainError as e:
            return error_response(e)
        return ok(
            {
                "faculty_id": result.faculty_id,
                "faculty_name": result.faculty.name,
                "department": result.faculty.department,
                "source": result.source.value,
            }
        )

    @app.route("/api/faculty/authorize", methods=["POST"], endpoint="api_faculty_authorize")
    @api_login_required
    def api_faculty_authorize():
        try:
            data = json_body()
            faculty_id = require_non_empty(data.get("faculty_id", data.get("facultyId")), "Faculty id")
            context = ResolutionContext.from_mapping(data)
            class_key = context.class_key or {
                "cohort": context.cohort,
                "year": context.year,
                "term": context.term,
                "section": context.section,
            }
            authorized = container.faculty_service.is_authorized(
                faculty_id, class_key, {"department": context.department}
            )
        except DomainError as e:
            return error_response(e)
        return ok({"faculty_id": faculty_id, "authorized": authorized})

    @app.route("/api/faculty/<faculty_id>/assignments", methods=["GET"], endpoint="api_faculty_assignments")
    @api_login_required
    def api_faculty_assignments(faculty_id: str):
        try:
            rows = container.faculty_service.list_assignments(faculty_id)
        except DomainError as e:
            return error_response(e)
        return ok(
            {
                "data": [
                    {
                        "assignment_id": a.assignment_id,
                        "class_key": a.class_key,
                        "cohort": a.cohort,
                        "year": a.year,
                        "term": a.term,
                        "section": a.section,
                    }
                    for a in rows
                ]
            }
        )
