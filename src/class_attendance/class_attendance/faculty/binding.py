from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Union

from ..classes.model import ClassKey
from ..classes.normalizer import coerce_class_key
from .model import AssignmentQuery
from .repository import AssignmentRepository, FacultyDirectory

logger = logging.getLogger(__name__)


class BindingValidator:
    """Decides whether a faculty id may be attached to a class.

    Checks, first success wins:
    1. an active assignment for exactly this class;
    2. an active assignment for the same year/term/section in any cohort
       (absorbs cohort drift in older assignments);
    3. the faculty member is an active class-advisor of the class's department.

    This gates which faculty id a mutation is recorded under; it is not an
    access-control boundary.
    """

    def __init__(self, directory: FacultyDirectory, assignments: AssignmentRepository):
        self._directory = directory
        self._assignments = assignments

    def is_authorized(
        self,
        faculty_id: str,
        class_key: Union[str, ClassKey],
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> bool:
        target = coerce_class_key(class_key)
        department = (metadata or {}).get("department")

        exact = AssignmentQuery(
            faculty_id=faculty_id, cohort=target.cohort, year=target.year, term=target.term, section=target.section
        )
        if self._assignments.find_assignments(exact):
            logger.info("Faculty %s assigned to %s", faculty_id, target.key)
            return True

        same_term = AssignmentQuery(faculty_id=faculty_id, year=target.year, term=target.term, section=target.section)
        if self._assignments.find_assignments(same_term):
            logger.info("Faculty %s assigned to %s in another cohort", faculty_id, target.key)
            return True

        faculty = self._directory.get_by_id(faculty_id)
        if (
            faculty is not None
            and department
            and faculty.is_active
            and faculty.is_class_advisor
            and faculty.department == department
        ):
            logger.info("Faculty %s authorized as %s class-advisor for %s", faculty_id, department, target.key)
            return True

        logger.warning("Faculty %s is not authorized for %s", faculty_id, target.key)
        return False
