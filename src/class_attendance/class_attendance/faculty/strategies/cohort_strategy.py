from __future__ import annotations

from typing import Optional

from ...classes import normalizer
from ...core.enums import ResolutionSource
from ..model import FacultyQuery, ResolutionContext
from .base import ResolutionStrategy


class CohortStrategy(ResolutionStrategy):
    """Cohort + year + term, narrowed by section and department when given."""

    source = ResolutionSource.COHORT_LOOKUP

    def build_query(self, context: ResolutionContext) -> Optional[FacultyQuery]:
        if not (context.cohort and context.year and context.term):
            return None
        return FacultyQuery(
            cohort=normalizer.normalize_cohort(context.cohort),
            year=normalizer.normalize_year(context.year),
            term=normalizer.normalize_term(context.term),
            section=normalizer.normalize_section(context.section) if context.section else None,
            department=context.department or None,
        )
