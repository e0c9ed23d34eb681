from __future__ import annotations

from enum import Enum


class ResolutionSource(str, Enum):
    """Which resolution strategy produced a faculty match."""

    SESSION = "session"
    CLASS_KEY_LOOKUP = "classKeyLookup"
    COHORT_LOOKUP = "cohortLookup"
    DEPARTMENT_FALLBACK = "departmentFallback"


class FacultyStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class AttendanceStatus(str, Enum):
    """Lifecycle of a class-day attendance record."""

    FINALIZED = "finalized"
    MODIFIED = "modified"


class AuditOperation(str, Enum):
    RESOLVE_FACULTY = "resolve_faculty"
    VALIDATE_BINDING = "validate_binding"
    MARK_ATTENDANCE = "mark_attendance"


class AuditOutcome(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
