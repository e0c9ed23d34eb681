from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import AssignmentQuery, ClassAssignment, FacultyQuery, FacultyRecord


class FacultyDirectory(Protocol):
    """Read-only view of the faculty directory.

    Note (DIP): resolution and binding depend on this interface, not on a
    concrete store.
    """

    def get_by_id(self, faculty_id: str) -> Optional[FacultyRecord]:
        raise NotImplementedError

    def find_faculty(self, query: FacultyQuery) -> Sequence[FacultyRecord]:
        """All records matching `query`; callers pick among them."""

        raise NotImplementedError


class AssignmentRepository(Protocol):
    def find_assignments(self, query: AssignmentQuery) -> Sequence[ClassAssignment]:
        raise NotImplementedError

    def list_active_for_faculty(self, faculty_id: str) -> Sequence[ClassAssignment]:
        raise NotImplementedError
