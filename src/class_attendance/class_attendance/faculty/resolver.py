from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..core.exceptions import NoFacultyFound
from .factory import ResolutionStrategyFactory
from .model import ResolutionContext, ResolutionResult
from .repository import FacultyDirectory
from .strategies.base import ResolutionStrategy

logger = logging.getLogger(__name__)


class FacultyResolver:
    """Runs the resolution chain; the first strategy that matches wins."""

    def __init__(
        self,
        directory: FacultyDirectory,
        *,
        strategies: Optional[Sequence[ResolutionStrategy]] = None,
        strategy_factory: Optional[ResolutionStrategyFactory] = None,
    ):
        factory = strategy_factory or ResolutionStrategyFactory()
        self._strategies = list(strategies) if strategies is not None else factory.default_chain(directory)

    @property
    def strategies(self) -> Sequence[ResolutionStrategy]:
        return tuple(self._strategies)

    def resolve(self, context: ResolutionContext) -> ResolutionResult:
        for strategy in self._strategies:
            result = strategy.try_resolve(context)
            if result is not None:
                logger.info("Faculty %s resolved via %s", result.faculty_id, result.source.value)
                return result

        logger.warning(
            "No faculty found (class_key=%s, cohort=%s, year=%s, term=%s, section=%s, department=%s)",
            context.class_key,
            context.cohort,
            context.year,
            context.term,
            context.section,
            context.department,
        )
        raise NoFacultyFound("No valid faculty found for the specified class")
