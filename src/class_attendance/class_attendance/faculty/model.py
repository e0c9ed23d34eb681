from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

from ..classes.model import ClassKey
from ..classes.normalizer import normalize
from ..core.enums import FacultyStatus, ResolutionSource


@dataclass(frozen=True)
class FacultyRecord:
    """Directory entry for a faculty member (read-only to this package).

    cohort/year/term/section are the record's own denormalized class
    assignment; `class_key` is its canonical form when one was stored.
    """

    faculty_id: str
    user_id: Optional[str]
    name: str
    department: str
    is_class_advisor: bool
    status: FacultyStatus = FacultyStatus.ACTIVE
    class_key: Optional[str] = None
    cohort: Optional[str] = None
    year: Optional[str] = None
    term: Optional[str] = None
    section: Optional[str] = None
    assigned_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status == FacultyStatus.ACTIVE


@dataclass(frozen=True)
class ClassAssignment:
    """Authoritative binding of a faculty member to a class."""

    assignment_id: int
    faculty_id: str
    cohort: str
    year: str
    term: str
    section: str
    department: Optional[str] = None
    active: bool = True
    assigned_at: Optional[datetime] = None

    @property
    def class_key(self) -> ClassKey:
        return ClassKey(cohort=self.cohort, year=self.year, term=self.term, section=self.section)


@dataclass(frozen=True)
class FacultyQuery:
    """Predicate for directory lookups; None fields are not constrained."""

    faculty_id: Optional[str] = None
    user_id: Optional[str] = None
    class_key: Optional[str] = None
    cohort: Optional[str] = None
    year: Optional[str] = None
    term: Optional[str] = None
    section: Optional[str] = None
    department: Optional[str] = None
    class_advisor_only: bool = True
    active_only: bool = True

    def matches(self, faculty: FacultyRecord) -> bool:
        if self.class_advisor_only and not faculty.is_class_advisor:
            return False
        if self.active_only and not faculty.is_active:
            return False
        for field in ("faculty_id", "user_id", "class_key", "cohort", "year", "term", "section", "department"):
            expected = getattr(self, field)
            if expected is not None and getattr(faculty, field) != expected:
                return False
        return True


@dataclass(frozen=True)
class AssignmentQuery:
    """Canonical class components to look for; stored rows are normalized before comparing."""

    faculty_id: str
    year: str
    term: str
    section: str
    cohort: Optional[str] = None
    active_only: bool = True

    def matches(self, assignment: ClassAssignment) -> bool:
        if self.active_only and not assignment.active:
            return False
        if assignment.faculty_id != self.faculty_id:
            return False
        stored = normalize(assignment.class_key)
        if self.cohort is not None and stored.cohort != self.cohort:
            return False
        return stored.year == self.year and stored.term == self.term and stored.section == self.section


@dataclass(frozen=True)
class CallerIdentity:
    """Who is asking, as supplied by the (external) session layer."""

    user_id: str
    role: str

    @property
    def is_faculty(self) -> bool:
        return self.role == "faculty"


@dataclass(frozen=True)
class ResolutionContext:
    caller: Optional[CallerIdentity] = None
    class_key: Optional[str] = None
    cohort: Optional[str] = None
    year: Optional[str] = None
    term: Optional[str] = None
    section: Optional[str] = None
    department: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, caller: Optional[CallerIdentity] = None) -> "ResolutionContext":
        def _get(*names: str) -> Optional[str]:
            for name in names:
                value = data.get(name)
                if value not in (None, ""):
                    return str(value)
            return None

        return cls(
            caller=caller,
            class_key=_get("class_key", "classKey", "classId"),
            cohort=_get("cohort", "batch"),
            year=_get("year"),
            term=_get("term", "semester"),
            section=_get("section"),
            department=_get("department"),
        )


@dataclass(frozen=True)
class ResolutionResult:
    faculty_id: str
    faculty: FacultyRecord
    source: ResolutionSource

    def __post_init__(self):
        if not self.faculty_id:
            raise ValueError("ResolutionResult requires a faculty_id")
