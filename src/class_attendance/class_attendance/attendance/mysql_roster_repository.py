from __future__ import annotations

from typing import Optional, Sequence

from ..classes.model import ClassKey
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .repository import RosterQuery


class MySQLRosterRepository(RosterQuery):
    """Read-only roster lookup over students + student_enrollments.

    Enrollments are matched on the canonical class key first; rows written
    before keys were canonical are then picked up by year/term/section.
    Both lookups are scoped to the faculty member's department.
    """

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_enrolled_roll_numbers(self, faculty_id: str, class_key: ClassKey) -> Sequence[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            department = self._department_of(cur, faculty_id)
            if department is None:
                return []

            cur.execute(
                """
                SELECT s.roll_number
                FROM students s
                JOIN student_enrollments e ON e.student_id = s.student_id
                WHERE e.class_key=%s AND e.status='active'
                  AND s.department=%s AND s.status='active'
                ORDER BY s.roll_number
                """,
                (class_key.key, department),
            )
            rows = fetchall(cur)
            if not rows:
                cur.execute(
                    """
                    SELECT s.roll_number
                    FROM students s
                    JOIN student_enrollments e ON e.student_id = s.student_id
                    WHERE e.year=%s AND e.term=%s AND e.section=%s AND e.status='active'
                      AND s.department=%s AND s.status='active'
                    ORDER BY s.roll_number
                    """,
                    (class_key.year, class_key.term, class_key.section, department),
                )
                rows = fetchall(cur)
            return list(dict.fromkeys(str(r["roll_number"]) for r in rows))

    @staticmethod
    def _department_of(cur, faculty_id: str) -> Optional[str]:
        cur.execute("SELECT department FROM faculty WHERE faculty_id=%s", (faculty_id,))
        row = fetchone(cur)
        return row["department"] if row else None
