from __future__ import annotations

from typing import Optional

from ...classes.normalizer import parse_key
from ...core.enums import ResolutionSource
from ..model import FacultyQuery, ResolutionContext
from .base import ResolutionStrategy


class ClassKeyStrategy(ResolutionStrategy):
    """An active class-advisor whose own class key equals the requested one."""

    source = ResolutionSource.CLASS_KEY_LOOKUP

    def build_query(self, context: ResolutionContext) -> Optional[FacultyQuery]:
        if not context.class_key:
            return None
        parsed = parse_key(context.class_key)
        return FacultyQuery(class_key=parsed.key if parsed else context.class_key)
