from __future__ import annotations

from typing import Any, Dict, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import AssignmentQuery, ClassAssignment
from .repository import AssignmentRepository


def _to_assignment(row: Dict[str, Any]) -> ClassAssignment:
    return ClassAssignment(
        assignment_id=int(row["assignment_id"]),
        faculty_id=str(row["faculty_id"]),
        cohort=row["cohort"],
        year=row["year"],
        term=row["term"],
        section=row["section"],
        department=row.get("department"),
        active=bool(row.get("active", True)),
        assigned_at=row.get("assigned_at"),
    )


class MySQLAssignmentRepository(AssignmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find_assignments(self, query: AssignmentQuery) -> Sequence[ClassAssignment]:
        # Older rows hold raw components ("2022", "3", "5"), so the class match
        # happens on normalized values rather than in SQL.
        active = " AND active=1" if query.active_only else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT assignment_id, faculty_id, cohort, year, term, section, department, active, assigned_at
                FROM class_assignments
                WHERE faculty_id=%s{active}
                ORDER BY assigned_at DESC, assignment_id DESC
                """,
                (query.faculty_id,),
            )
            rows = [_to_assignment(r) for r in fetchall(cur)]
        return [a for a in rows if query.matches(a)]

    def list_active_for_faculty(self, faculty_id: str) -> Sequence[ClassAssignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT assignment_id, faculty_id, cohort, year, term, section, department, active, assigned_at
                FROM class_assignments
                WHERE faculty_id=%s AND active=1
                ORDER BY assigned_at DESC, assignment_id DESC
                """,
                (faculty_id,),
            )
            return [_to_assignment(r) for r in fetchall(cur)]
