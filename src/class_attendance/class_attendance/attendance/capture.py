from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Optional

from ..audit.logger import AuditLogger
from ..audit.model import AuditEntry
from ..classes.model import ClassKey
from ..classes.normalizer import coerce_class_key, is_valid_year_term
from ..common.datetime_utils import DateLike
from ..core.enums import AuditOperation, AuditOutcome
from ..core.exceptions import DomainError, InvalidClassKey, NoFacultyFound, NotAuthorized
from ..faculty.model import ResolutionContext, ResolutionResult
from ..faculty.service import FacultyClassService
from .model import AttendanceSummary
from .service import AttendanceService


class AttendanceCaptureService:
    """Use case: mark a class's attendance from raw caller context.

    Flow: canonical class key -> faculty resolution -> binding check ->
    roster-aware mark. Every decision leaves one audit entry, failures
    included; audit problems never interrupt the flow.
    """

    def __init__(self, faculty: FacultyClassService, attendance: AttendanceService, audit: AuditLogger):
        self._faculty = faculty
        self._attendance = attendance
        self._audit = audit

    @staticmethod
    def _class_key_for(context: ResolutionContext) -> ClassKey:
        if context.class_key:
            class_key = coerce_class_key(context.class_key)
        else:
            class_key = coerce_class_key(
                {"cohort": context.cohort, "year": context.year, "term": context.term, "section": context.section}
            )
        if not is_valid_year_term(class_key.year, class_key.term):
            raise InvalidClassKey(f"{class_key.term} does not belong to {class_key.year}")
        return class_key

    def _resolve(self, context: ResolutionContext, class_key: ClassKey, actor: Optional[str]) -> ResolutionResult:
        try:
            resolution = self._faculty.resolve_faculty_id(context)
        except NoFacultyFound as e:
            self._audit.record(
                AuditEntry(
                    operation=AuditOperation.RESOLVE_FACULTY,
                    faculty_id=None,
                    class_key=class_key.key,
                    source=None,
                    actor=actor,
                    status=AuditOutcome.FAILURE,
                    details={"department": context.department},
                    error_message=str(e),
                )
            )
            raise

        self._audit.record(
            AuditEntry(
                operation=AuditOperation.RESOLVE_FACULTY,
                faculty_id=resolution.faculty_id,
                class_key=class_key.key,
                source=resolution.source,
                actor=actor,
                details={"faculty_name": resolution.faculty.name, "department": resolution.faculty.department},
            )
        )
        return resolution

    def _authorize(
        self, resolution: ResolutionResult, class_key: ClassKey, department: Optional[str], actor: Optional[str]
    ) -> None:
        authorized = self._faculty.is_authorized(resolution.faculty_id, class_key, {"department": department})
        self._audit.record(
            AuditEntry(
                operation=AuditOperation.VALIDATE_BINDING,
                faculty_id=resolution.faculty_id,
                class_key=class_key.key,
                source=resolution.source,
                actor=actor,
                status=AuditOutcome.SUCCESS if authorized else AuditOutcome.FAILURE,
                details={"department": department, "validation_passed": authorized},
                error_message=None if authorized else "Faculty not authorized for this class",
            )
        )
        if not authorized:
            raise NotAuthorized("Faculty not authorized for this class")

    def capture(
        self,
        context: ResolutionContext,
        attendance_date: DateLike,
        absent_roster: Optional[Iterable[object]],
        notes: Optional[str] = None,
    ) -> AttendanceSummary:
        actor = context.caller.user_id if context.caller else None
        class_key = self._class_key_for(context)
        context = replace(context, class_key=class_key.key)

        resolution = self._resolve(context, class_key, actor)
        # The advisor check compares against the class's department, never the faculty's.
        self._authorize(resolution, class_key, context.department, actor)
        department = context.department or resolution.faculty.department

        try:
            summary = self._attendance.mark_attendance(
                resolution.faculty_id,
                class_key,
                attendance_date,
                absent_roster,
                notes,
                actor=actor or resolution.faculty_id,
                department=department,
            )
        except DomainError as e:
            self._audit.record(
                AuditEntry(
                    operation=AuditOperation.MARK_ATTENDANCE,
                    faculty_id=resolution.faculty_id,
                    class_key=class_key.key,
                    source=resolution.source,
                    actor=actor,
                    status=AuditOutcome.FAILURE,
                    details={"code": e.code, "details": list(getattr(e, "details", []))},
                    error_message=str(e),
                )
            )
            raise

        self._audit.record(
            AuditEntry(
                operation=AuditOperation.MARK_ATTENDANCE,
                faculty_id=resolution.faculty_id,
                class_key=class_key.key,
                source=resolution.source,
                actor=actor,
                student_count=summary.total_students,
                student_ids=summary.absent_roster,
                details={
                    "date": summary.attendance_date.strftime("%Y-%m-%d"),
                    "status": summary.status.value,
                    "total_present": summary.total_present,
                    "total_absent": summary.total_absent,
                    "revision": summary.revision,
                },
            )
        )
        return summary
