from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.capture import AttendanceCaptureService
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.mysql_holiday_repository import MySQLHolidayCalendar
from .attendance.mysql_roster_repository import MySQLRosterRepository
from .attendance.service import AttendanceService
from .audit.logger import AuditLogger
from .audit.mysql_audit_repository import MySQLAuditRepository
from .core.constants import DEFAULT_EDIT_WINDOW_DAYS, DEFAULT_REFERENCE_TIMEZONE
from .database.connection import DBConfig, DatabaseConnection
from .faculty.binding import BindingValidator
from .faculty.factory import ResolutionStrategyFactory
from .faculty.mysql_assignment_repository import MySQLAssignmentRepository
from .faculty.mysql_faculty_repository import MySQLFacultyDirectory
from .faculty.resolver import FacultyResolver
from .faculty.service import FacultyClassService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    faculty_repo: MySQLFacultyDirectory
    assignments_repo: MySQLAssignmentRepository
    attendance_repo: MySQLAttendanceRepository
    roster_repo: MySQLRosterRepository
    holidays_repo: MySQLHolidayCalendar
    audit_repo: MySQLAuditRepository

    faculty_service: FacultyClassService
    audit_logger: AuditLogger
    attendance_service: AttendanceService
    capture_service: AttendanceCaptureService


def build_container(
    *,
    db_config: dict,
    edit_window_days: int = DEFAULT_EDIT_WINDOW_DAYS,
    tz_name: str = DEFAULT_REFERENCE_TIMEZONE,
    enforce_edit_window: bool = True,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    if conn is None:
        conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    faculty_repo = MySQLFacultyDirectory(conn)
    assignments_repo = MySQLAssignmentRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    roster_repo = MySQLRosterRepository(conn)
    holidays_repo = MySQLHolidayCalendar(conn)
    audit_repo = MySQLAuditRepository(conn)

    resolver = FacultyResolver(faculty_repo, strategy_factory=ResolutionStrategyFactory())
    validator = BindingValidator(faculty_repo, assignments_repo)
    faculty_service = FacultyClassService(resolver, validator, assignments_repo)
    audit_logger = AuditLogger(audit_repo)
    attendance_service = AttendanceService(
        attendance_repo,
        roster_repo,
        holidays=holidays_repo,
        tz_name=tz_name,
        edit_window_days=edit_window_days,
        enforce_edit_window=enforce_edit_window,
    )
    capture_service = AttendanceCaptureService(faculty_service, attendance_service, audit_logger)

    return Container(
        conn=conn,
        faculty_repo=faculty_repo,
        assignments_repo=assignments_repo,
        attendance_repo=attendance_repo,
        roster_repo=roster_repo,
        holidays_repo=holidays_repo,
        audit_repo=audit_repo,
        faculty_service=faculty_service,
        audit_logger=audit_logger,
        attendance_service=attendance_service,
        capture_service=capture_service,
    )
