from __future__ import annotations

from typing import Optional

from ...core.enums import ResolutionSource
from ..model import FacultyQuery, ResolutionContext
from .base import ResolutionStrategy


class SessionStrategy(ResolutionStrategy):
    """The caller is an active class-advisor."""

    source = ResolutionSource.SESSION

    def build_query(self, context: ResolutionContext) -> Optional[FacultyQuery]:
        caller = context.caller
        if caller is None or not caller.is_faculty:
            return None
        return FacultyQuery(user_id=caller.user_id)
