from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from ...core.enums import ResolutionSource
from ..model import FacultyQuery, FacultyRecord, ResolutionContext, ResolutionResult
from ..repository import FacultyDirectory

logger = logging.getLogger(__name__)


def _preference(faculty: FacultyRecord) -> tuple:
    stamp = faculty.assigned_at.timestamp() if faculty.assigned_at else 0.0
    return (faculty.assigned_at is None, -stamp, faculty.faculty_id)


def pick_preferred(candidates: Sequence[FacultyRecord]) -> Optional[FacultyRecord]:
    """Most recently assigned first, then lowest faculty_id."""
    if not candidates:
        return None
    return min(candidates, key=_preference)


class ResolutionStrategy(ABC):
    """Strategy Pattern: one rule of the faculty resolution chain."""

    source: ResolutionSource

    def __init__(self, directory: FacultyDirectory):
        self._directory = directory

    @abstractmethod
    def build_query(self, context: ResolutionContext) -> Optional[FacultyQuery]:
        """Directory predicate for this rule, or None when the context lacks its inputs."""

        raise NotImplementedError

    def try_resolve(self, context: ResolutionContext) -> Optional[ResolutionResult]:
        query = self.build_query(context)
        if query is None:
            return None

        candidates = self._directory.find_faculty(query)
        faculty = pick_preferred(candidates)
        if faculty is None:
            return None
        if len(candidates) > 1:
            logger.info(
                "%s matched %d faculty records, picked %s", self.source.value, len(candidates), faculty.faculty_id
            )
        return ResolutionResult(faculty_id=faculty.faculty_id, faculty=faculty, source=self.source)
