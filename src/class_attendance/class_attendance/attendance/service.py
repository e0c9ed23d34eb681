from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, Iterable, Optional, Sequence, Union

from ..classes.model import ClassKey
from ..classes.normalizer import coerce_class_key
from ..common.datetime_utils import DateLike, can_edit, now_local, to_reference_date
from ..common.validators import require_max_length, require_non_empty
from ..core.constants import (
    DEFAULT_EDIT_WINDOW_DAYS,
    DEFAULT_HISTORY_LIMIT,
    DEFAULT_REFERENCE_TIMEZONE,
    MAX_NOTES_LENGTH,
)
from ..core.enums import AttendanceStatus
from ..core.exceptions import (
    DuplicateRollNumbers,
    EditWindowClosed,
    HolidayDate,
    InvalidRollNumbers,
    NoStudents,
    ValidationError,
)
from .model import AttendanceKey, AttendanceRecord, AttendanceSummary
from .repository import AttendanceRepository, HolidayCalendar, RosterQuery

logger = logging.getLogger(__name__)


def _clean_rolls(values: Optional[Iterable[object]]) -> list[str]:
    return [str(v).strip() for v in (values or []) if v is not None and str(v).strip()]


def _ordered_unique(values: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(values))


class AttendanceService:
    """Roster-aware create-or-update of a class's daily attendance record."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        roster: RosterQuery,
        *,
        holidays: Optional[HolidayCalendar] = None,
        clock: Optional[Callable[[], datetime]] = None,
        tz_name: str = DEFAULT_REFERENCE_TIMEZONE,
        edit_window_days: int = DEFAULT_EDIT_WINDOW_DAYS,
        enforce_edit_window: bool = True,
    ):
        self._attendance = attendance
        self._roster = roster
        self._holidays = holidays
        self._tz_name = tz_name
        self._clock = clock or (lambda: now_local(tz_name))
        self._edit_window_days = int(edit_window_days)
        self._enforce_edit_window = bool(enforce_edit_window)

    def _today(self) -> date:
        return to_reference_date(self._clock(), self._tz_name)

    def can_edit(self, attendance_date: DateLike, edit_window_days: Optional[int] = None) -> bool:
        window = self._edit_window_days if edit_window_days is None else edit_window_days
        return can_edit(attendance_date, window, today=self._today(), tz_name=self._tz_name)

    def _live_roster(self, faculty_id: str, class_key: ClassKey) -> list[str]:
        roster = _ordered_unique(_clean_rolls(self._roster.list_enrolled_roll_numbers(faculty_id, class_key)))
        if not roster:
            raise NoStudents(f"No students found in class {class_key.key}")
        return roster

    @staticmethod
    def _validate_absent(absent_roster: Optional[Iterable[object]], roster: Sequence[str]) -> set[str]:
        absent = _clean_rolls(absent_roster)
        enrolled = set(roster)

        invalid = _ordered_unique(r for r in absent if r not in enrolled)
        if invalid:
            raise InvalidRollNumbers("Invalid roll numbers not found in class", invalid)

        seen: set[str] = set()
        repeated: list[str] = []
        for r in absent:
            if r in seen:
                repeated.append(r)
            seen.add(r)
        if repeated:
            raise DuplicateRollNumbers("Roll numbers listed more than once", _ordered_unique(repeated))

        return seen

    def mark_attendance(
        self,
        faculty_id: str,
        class_key: Union[str, ClassKey],
        attendance_date: DateLike,
        absent_roster: Optional[Iterable[object]],
        notes: Optional[str] = None,
        *,
        actor: Optional[str] = None,
        department: Optional[str] = None,
    ) -> AttendanceSummary:
        faculty_id = require_non_empty(faculty_id, "Faculty id")
        target = coerce_class_key(class_key)
        day = to_reference_date(attendance_date, self._tz_name)
        notes = require_max_length(notes, "Notes", MAX_NOTES_LENGTH)
        if absent_roster is not None and not isinstance(absent_roster, (list, tuple)):
            raise ValidationError("Absent roster must be a list of roll numbers")
        actor = actor or faculty_id

        if self._holidays:
            reason = self._holidays.holiday_reason(class_key=target, department=department, on_date=day)
            if reason:
                raise HolidayDate(f"Cannot mark attendance on {reason} (Holiday)")

        roster = self._live_roster(faculty_id, target)
        absent_set = self._validate_absent(absent_roster, roster)
        present = tuple(r for r in roster if r not in absent_set)
        absent = tuple(r for r in roster if r in absent_set)

        existing = self._attendance.get_attendance(AttendanceKey(faculty_id, target.key, day))
        if existing is None:
            record = AttendanceRecord(
                attendance_id=None,
                faculty_id=faculty_id,
                class_key=target.key,
                cohort=target.cohort,
                year=target.year,
                term=target.term,
                section=target.section,
                department=department,
                attendance_date=day,
                present_roster=present,
                absent_roster=absent,
                total_students=len(roster),
                total_present=len(present),
                total_absent=len(absent),
                status=AttendanceStatus.FINALIZED,
                created_by=actor,
                updated_by=actor,
                notes=notes,
                revision=1,
            )
            saved = self._attendance.save_attendance(record, expected_revision=None)
            logger.info(
                "Attendance created for %s on %s by %s (%d/%d present)",
                target.key,
                day,
                faculty_id,
                saved.total_present,
                saved.total_students,
            )
            return AttendanceSummary.of(saved, created=True)

        if self._enforce_edit_window and not self.can_edit(existing.attendance_date):
            raise EditWindowClosed(
                f"Attendance for {existing.attendance_date:%Y-%m-%d} can no longer be edited "
                f"(window is {self._edit_window_days} days)"
            )

        record = replace(
            existing,
            present_roster=present,
            absent_roster=absent,
            total_students=len(roster),
            total_present=len(present),
            total_absent=len(absent),
            status=AttendanceStatus.MODIFIED,
            updated_by=actor,
            department=existing.department or department,
            notes=notes or existing.notes,
            revision=existing.revision + 1,
        )
        saved = self._attendance.save_attendance(record, expected_revision=existing.revision)
        logger.info(
            "Attendance updated for %s on %s by %s (revision %d, %d/%d present)",
            target.key,
            day,
            actor,
            saved.revision,
            saved.total_present,
            saved.total_students,
        )
        return AttendanceSummary.of(saved, created=False)

    def get_attendance(
        self, faculty_id: str, class_key: Union[str, ClassKey], attendance_date: DateLike
    ) -> Optional[AttendanceRecord]:
        target = coerce_class_key(class_key)
        day = to_reference_date(attendance_date, self._tz_name)
        return self._attendance.get_attendance(AttendanceKey(faculty_id, target.key, day))

    def list_history(
        self,
        faculty_id: str,
        class_key: Union[str, ClassKey],
        *,
        start: Optional[DateLike] = None,
        end: Optional[DateLike] = None,
        limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> Sequence[AttendanceRecord]:
        if int(limit) < 1:
            raise ValidationError("limit must be at least 1")
        target = coerce_class_key(class_key)
        return self._attendance.list_for_class(
            faculty_id=faculty_id,
            class_key=target.key,
            start_date=to_reference_date(start, self._tz_name) if start is not None else None,
            end_date=to_reference_date(end, self._tz_name) if end is not None else None,
            limit=int(limit),
        )
