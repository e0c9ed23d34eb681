from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from ..classes.model import ClassKey
from ..classes.normalizer import normalize
from ..core.exceptions import NotAuthorized
from .binding import BindingValidator
from .model import ResolutionContext, ResolutionResult
from .repository import AssignmentRepository
from .resolver import FacultyResolver


@dataclass(frozen=True)
class AssignmentView:
    assignment_id: int
    faculty_id: str
    class_key: str
    cohort: str
    year: str
    term: str
    section: str


class FacultyClassService:
    """Use case: decide which faculty member a class operation belongs to."""

    def __init__(self, resolver: FacultyResolver, validator: BindingValidator, assignments: AssignmentRepository):
        self._resolver = resolver
        self._validator = validator
        self._assignments = assignments

    def resolve_faculty_id(self, context: ResolutionContext) -> ResolutionResult:
        return self._resolver.resolve(context)

    def is_authorized(
        self,
        faculty_id: str,
        class_key: Union[str, ClassKey],
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> bool:
        return self._validator.is_authorized(faculty_id, class_key, metadata)

    def require_authorized(
        self,
        faculty_id: str,
        class_key: Union[str, ClassKey],
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> None:
        if not self.is_authorized(faculty_id, class_key, metadata):
            raise NotAuthorized("Faculty not authorized for this class")

    def list_assignments(self, faculty_id: str) -> list[AssignmentView]:
        rows = sorted(
            self._assignments.list_active_for_faculty(faculty_id),
            key=lambda a: (a.assigned_at is None, -(a.assigned_at.timestamp() if a.assigned_at else 0.0)),
        )
        out: list[AssignmentView] = []
        for a in rows:
            canonical = normalize(a.class_key)
            out.append(
                AssignmentView(
                    assignment_id=a.assignment_id,
                    faculty_id=a.faculty_id,
                    class_key=canonical.key,
                    cohort=canonical.cohort,
                    year=canonical.year,
                    term=canonical.term,
                    section=canonical.section,
                )
            )
        return out
