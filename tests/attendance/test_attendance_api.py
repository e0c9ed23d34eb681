from datetime import datetime
from types import SimpleNamespace

import pytest
import pytz
from flask import Flask

from src.class_attendance.class_attendance.attendance.capture import AttendanceCaptureService
from src.class_attendance.class_attendance.attendance.controller import register as register_attendance
from src.class_attendance.class_attendance.attendance.service import AttendanceService
from src.class_attendance.class_attendance.audit.logger import AuditLogger
from src.class_attendance.class_attendance.core.exceptions import PersistenceError, StaleAttendanceRecord
from src.class_attendance.class_attendance.faculty.binding import BindingValidator
from src.class_attendance.class_attendance.faculty.controller import register as register_faculty
from src.class_attendance.class_attendance.faculty.resolver import FacultyResolver
from src.class_attendance.class_attendance.faculty.service import FacultyClassService

from tests.fakes import (
    CLASS_A,
    InMemoryAssignments,
    InMemoryAttendance,
    InMemoryAudit,
    InMemoryFacultyDirectory,
    InMemoryRoster,
    advisor,
)


@pytest.fixture()
def attendance_repo():
    return InMemoryAttendance()


@pytest.fixture()
def client(attendance_repo):
    directory = InMemoryFacultyDirectory([advisor("F001")])
    assignments = InMemoryAssignments([])
    faculty_service = FacultyClassService(
        FacultyResolver(directory), BindingValidator(directory, assignments), assignments
    )
    attendance_service = AttendanceService(
        attendance_repo,
        InMemoryRoster({CLASS_A.key: ["101", "102", "103", "104"]}),
        clock=lambda: pytz.timezone("Asia/Kolkata").localize(datetime(2025, 1, 10, 9, 0)),
    )
    container = SimpleNamespace(
        faculty_service=faculty_service,
        attendance_service=attendance_service,
        capture_service=AttendanceCaptureService(faculty_service, attendance_service, AuditLogger(InMemoryAudit())),
    )

    app = Flask(__name__)
    app.secret_key = "test"
    register_faculty(app, container)
    register_attendance(app, container)

    client = app.test_client()
    with client.session_transaction() as sess:
        sess["user_id"] = "U-F001"
        sess["role"] = "faculty"
    return client


def test_requires_login():
    app = Flask(__name__)
    app.secret_key = "test"
    register_attendance(app, SimpleNamespace())

    resp = app.test_client().get("/api/attendance/can-edit?date=2025-01-09")

    assert resp.status_code == 401
    assert resp.get_json()["code"] == "LOGIN_REQUIRED"


def test_mark_then_remark(client):
    body = {"classKey": CLASS_A.key, "department": "CSE", "date": "2025-01-09", "absent_roster": ["102", "104"]}

    created = client.post("/api/attendance/mark", json=body)
    updated = client.post("/api/attendance/mark", json=body)

    assert created.status_code == 201
    assert created.get_json()["data"]["present_roster"] == ["101", "103"]
    assert updated.status_code == 200
    assert updated.get_json()["data"]["status"] == "modified"


def test_mark_invalid_roll_numbers_is_400(client):
    resp = client.post(
        "/api/attendance/mark",
        json={"classKey": CLASS_A.key, "department": "CSE", "date": "2025-01-09", "absent_roster": ["999"]},
    )

    assert resp.status_code == 400
    assert resp.get_json() == {
        "success": False,
        "code": "INVALID_ROLL_NUMBERS",
        "message": "Invalid roll numbers not found in class",
        "details": ["999"],
    }


def test_mark_for_unbound_class_is_403(client):
    resp = client.post(
        "/api/attendance/mark",
        json={"classKey": CLASS_A.key, "department": "ECE", "date": "2025-01-09", "absent_roster": []},
    )

    # The session caller still resolves, but does not advise ECE.
    assert resp.status_code == 403


def test_persistence_errors_map_to_503_and_409(client, attendance_repo):
    body = {"classKey": CLASS_A.key, "department": "CSE", "date": "2025-01-09", "absent_roster": []}

    def unavailable(record, *, expected_revision):
        raise PersistenceError("Database unavailable")

    attendance_repo.save_attendance = unavailable
    assert client.post("/api/attendance/mark", json=body).status_code == 503

    def stale(record, *, expected_revision):
        raise StaleAttendanceRecord("revision changed")

    attendance_repo.save_attendance = stale
    assert client.post("/api/attendance/mark", json=body).status_code == 409


def test_can_edit(client):
    assert client.get("/api/attendance/can-edit?date=2025-01-05").get_json()["can_edit"] is True
    assert client.get("/api/attendance/can-edit?date=2024-12-30").get_json()["can_edit"] is False
    assert client.get("/api/attendance/can-edit?date=2024-12-30&window=14").get_json()["can_edit"] is True
    assert client.get("/api/attendance/can-edit?date=yesterday").status_code == 400


def test_record_lookup(client):
    client.post(
        "/api/attendance/mark",
        json={"classKey": CLASS_A.key, "department": "CSE", "date": "2025-01-09", "absent_roster": ["101"]},
    )

    found = client.get(f"/api/attendance/record?faculty_id=F001&classKey={CLASS_A.key}&date=2025-01-09")
    missing = client.get(f"/api/attendance/record?faculty_id=F001&classKey={CLASS_A.key}&date=2025-01-08")

    assert found.status_code == 200
    assert found.get_json()["data"]["absent_roster"] == ["101"]
    assert missing.status_code == 404


def test_faculty_resolve_and_authorize(client):
    resolved = client.post("/api/faculty/resolve", json={"cohort": "2022", "year": "3", "term": "5"})
    authorized = client.post(
        "/api/faculty/authorize", json={"faculty_id": "F001", "classKey": CLASS_A.key, "department": "ECE"}
    )

    assert resolved.get_json()["faculty_id"] == "F001"
    assert resolved.get_json()["source"] == "session"
    assert authorized.get_json()["authorized"] is False


def test_faculty_resolve_without_match_is_404(client):
    with client.session_transaction() as sess:
        sess["role"] = "admin"

    resp = client.post("/api/faculty/resolve", json={"department": "CIVIL"})

    assert resp.status_code == 404
    assert resp.get_json()["code"] == "NO_FACULTY_FOUND"


def test_non_json_body_is_400(client):
    resp = client.post("/api/faculty/resolve", data="nope", content_type="text/plain")

    assert resp.status_code == 400


def test_mark_without_department_is_403(client):
    # The caller's own department does not stand in for the class's.
    resp = client.post(
        "/api/attendance/mark", json={"classKey": CLASS_A.key, "date": "2025-01-09", "absent_roster": []}
    )

    assert resp.status_code == 403
    assert resp.get_json()["code"] == "NOT_AUTHORIZED"


@pytest.mark.parametrize("absent_roster", [102, "102,104", {"roll": "102"}])
def test_mark_rejects_non_list_roster(client, attendance_repo, absent_roster):
    resp = client.post(
        "/api/attendance/mark",
        json={"classKey": CLASS_A.key, "department": "CSE", "date": "2025-01-09", "absent_roster": absent_roster},
    )

    assert resp.status_code == 400
    assert resp.get_json()["code"] == "VALIDATION_ERROR"
    assert attendance_repo.saves == 0


@pytest.mark.parametrize("limit", ["0", "-1"])
def test_history_rejects_non_positive_limit(client, limit):
    resp = client.get(f"/api/attendance/history?faculty_id=F001&classKey={CLASS_A.key}&limit={limit}")

    assert resp.status_code == 400
    assert resp.get_json()["code"] == "VALIDATION_ERROR"
