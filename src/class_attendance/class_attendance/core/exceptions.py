from __future__ import annotations

from typing import Sequence


class DomainError(Exception):
    """Base exception for business rule violations."""

    code = "DOMAIN_ERROR"


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "VALIDATION_ERROR"


class AuthorizationError(DomainError):
    """Raised when a caller lacks permission for an action."""

    code = "NOT_AUTHORIZED"


class InvalidClassKey(ValidationError):
    code = "INVALID_CLASS_KEY"


class NoFacultyFound(DomainError):
    """Every resolution strategy was tried and none matched."""

    code = "NO_FACULTY_FOUND"


class NotAuthorized(AuthorizationError):
    """Faculty-class binding validation failed."""

    code = "NOT_AUTHORIZED"


class NoStudents(ValidationError):
    code = "NO_STUDENTS"


class _RollNumberError(ValidationError):
    def __init__(self, message: str, details: Sequence[str]):
        super().__init__(message)
        self.details = list(details)


class InvalidRollNumbers(_RollNumberError):
    code = "INVALID_ROLL_NUMBERS"


class DuplicateRollNumbers(_RollNumberError):
    code = "DUPLICATE_ROLL_NUMBERS"


class EditWindowClosed(ValidationError):
    code = "EDIT_WINDOW_CLOSED"


class HolidayDate(ValidationError):
    code = "HOLIDAY_DATE"


class PersistenceError(DomainError):
    """Underlying store failure; the driver exception is kept as __cause__."""

    code = "PERSISTENCE_ERROR"


class StaleAttendanceRecord(PersistenceError):
    """Another writer changed the record between our read and our write."""

    code = "STALE_RECORD"
