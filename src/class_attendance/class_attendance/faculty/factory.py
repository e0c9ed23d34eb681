from __future__ import annotations

from dataclasses import dataclass
from typing import List

from .repository import FacultyDirectory
from .strategies.base import ResolutionStrategy
from .strategies.class_key_strategy import ClassKeyStrategy
from .strategies.cohort_strategy import CohortStrategy
from .strategies.department_strategy import DepartmentFallbackStrategy
from .strategies.session_strategy import SessionStrategy


@dataclass
class ResolutionStrategyFactory:
    """Factory Pattern: build the resolution chain in priority order."""

    def default_chain(self, directory: FacultyDirectory) -> List[ResolutionStrategy]:
        return [
            SessionStrategy(directory),
            ClassKeyStrategy(directory),
            CohortStrategy(directory),
            DepartmentFallbackStrategy(directory),
        ]
