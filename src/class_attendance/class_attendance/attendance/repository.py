from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..classes.model import ClassKey
from .model import AttendanceKey, AttendanceRecord


class AttendanceRepository(Protocol):
    def get_attendance(self, key: AttendanceKey) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def save_attendance(self, record: AttendanceRecord, *, expected_revision: Optional[int]) -> AttendanceRecord:
        """Write the whole record as one unit.

        expected_revision=None inserts a new record; otherwise the stored
        record is replaced only if it is still at `expected_revision`.
        Either way a lost race raises StaleAttendanceRecord.
        """

        raise NotImplementedError

    def list_for_class(
        self,
        *,
        faculty_id: str,
        class_key: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int = 50,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError


class RosterQuery(Protocol):
    def list_enrolled_roll_numbers(self, faculty_id: str, class_key: ClassKey) -> Sequence[str]:
        """Roll numbers currently enrolled in the class, in roster order."""

        raise NotImplementedError


class HolidayCalendar(Protocol):
    def holiday_reason(self, *, class_key: ClassKey, department: Optional[str], on_date: date) -> Optional[str]:
        """Reason text when `on_date` is a declared holiday for the class, else None."""

        raise NotImplementedError
