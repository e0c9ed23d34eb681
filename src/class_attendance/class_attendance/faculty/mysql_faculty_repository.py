from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from ..core.enums import FacultyStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import FacultyQuery, FacultyRecord
from .repository import FacultyDirectory

_FACULTY_COLUMNS = """
    faculty_id, user_id, name, department, is_class_advisor, status,
    class_key, cohort, year, term, section, assigned_at
"""

_QUERY_FIELDS = ("faculty_id", "user_id", "class_key", "cohort", "year", "term", "section", "department")


def _to_faculty(row: Dict[str, Any]) -> FacultyRecord:
    return FacultyRecord(
        faculty_id=str(row["faculty_id"]),
        user_id=str(row["user_id"]) if row.get("user_id") is not None else None,
        name=row["name"],
        department=row["department"],
        is_class_advisor=bool(row.get("is_class_advisor", False)),
        status=FacultyStatus(row.get("status") or FacultyStatus.ACTIVE.value),
        class_key=row.get("class_key"),
        cohort=row.get("cohort"),
        year=row.get("year"),
        term=row.get("term"),
        section=row.get("section"),
        assigned_at=row.get("assigned_at"),
    )


class MySQLFacultyDirectory(FacultyDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, faculty_id: str) -> Optional[FacultyRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_FACULTY_COLUMNS}
                FROM faculty
                WHERE faculty_id=%s
                """,
                (faculty_id,),
            )
            row = fetchone(cur)
            return _to_faculty(row) if row else None

    def find_faculty(self, query: FacultyQuery) -> Sequence[FacultyRecord]:
        clauses: List[str] = []
        params: List[Any] = []
        for field in _QUERY_FIELDS:
            value = getattr(query, field)
            if value is not None:
                clauses.append(f"{field}=%s")
                params.append(value)
        if query.class_advisor_only:
            clauses.append("is_class_advisor=1")
        if query.active_only:
            clauses.append("status='active'")

        where = " AND ".join(clauses) if clauses else "1=1"
        with db_cursor(self._conn_factory) as (_, cur):
            # Newest assignment first, then lowest id, so callers can take the head.
            cur.execute(
                f"""
                SELECT {_FACULTY_COLUMNS}
                FROM faculty
                WHERE {where}
                ORDER BY assigned_at IS NULL, assigned_at DESC, faculty_id
                """,
                tuple(params),
            )
            return [_to_faculty(r) for r in fetchall(cur)]
