from __future__ import annotations

import logging
from typing import Optional

from ...core.enums import ResolutionSource
from ..model import FacultyQuery, ResolutionContext, ResolutionResult
from .base import ResolutionStrategy

logger = logging.getLogger(__name__)


class DepartmentFallbackStrategy(ResolutionStrategy):
    """Last resort: any active class-advisor of the department."""

    source = ResolutionSource.DEPARTMENT_FALLBACK

    def build_query(self, context: ResolutionContext) -> Optional[FacultyQuery]:
        if not context.department:
            return None
        return FacultyQuery(department=context.department)

    def try_resolve(self, context: ResolutionContext) -> Optional[ResolutionResult]:
        result = super().try_resolve(context)
        if result is not None:
            logger.warning(
                "Low-confidence faculty match %s from department fallback (%s)",
                result.faculty_id,
                context.department,
            )
        return result
