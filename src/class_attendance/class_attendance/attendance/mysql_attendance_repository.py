from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional, Sequence

import mysql.connector
from mysql.connector import errorcode

from ..core.enums import AttendanceStatus
from ..core.exceptions import PersistenceError, StaleAttendanceRecord
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json_list, fetchall, fetchone, load_json_list
from .model import AttendanceKey, AttendanceRecord
from .repository import AttendanceRepository

_ATTENDANCE_COLUMNS = """
    attendance_id, faculty_id, class_key, cohort, year, term, section, department,
    attendance_date, present_roster, absent_roster, total_students, total_present,
    total_absent, status, notes, created_by, updated_by, revision, created_at, updated_at
"""


def _to_record(row: Dict[str, Any]) -> AttendanceRecord:
    try:
        return _build_record(row)
    except (KeyError, TypeError, ValueError) as e:
        raise PersistenceError(f"Stored attendance row {row.get('attendance_id')} is inconsistent: {e}") from e


def _build_record(row: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(row["attendance_id"]),
        faculty_id=str(row["faculty_id"]),
        class_key=row["class_key"],
        cohort=row["cohort"],
        year=row["year"],
        term=row["term"],
        section=row["section"],
        department=row.get("department"),
        attendance_date=row["attendance_date"],
        present_roster=load_json_list(row.get("present_roster")),
        absent_roster=load_json_list(row.get("absent_roster")),
        total_students=int(row["total_students"]),
        total_present=int(row["total_present"]),
        total_absent=int(row["total_absent"]),
        status=AttendanceStatus(row["status"]),
        notes=row.get("notes") or "",
        created_by=str(row["created_by"]),
        updated_by=str(row["updated_by"]),
        revision=int(row.get("revision") or 1),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_attendance(self, key: AttendanceKey) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_ATTENDANCE_COLUMNS}
                FROM class_attendance
                WHERE faculty_id=%s AND class_key=%s AND attendance_date=%s
                """,
                (key.faculty_id, key.class_key, key.attendance_date),
            )
            row = fetchone(cur)
            return _to_record(row) if row else None

    def save_attendance(self, record: AttendanceRecord, *, expected_revision: Optional[int]) -> AttendanceRecord:
        if expected_revision is None:
            return self._insert(record)
        return self._update(record, expected_revision)

    def _insert(self, record: AttendanceRecord) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(
                    """
                    INSERT INTO class_attendance(
                        faculty_id, class_key, cohort, year, term, section, department,
                        attendance_date, present_roster, absent_roster,
                        total_students, total_present, total_absent,
                        status, notes, created_by, updated_by, revision
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        record.faculty_id,
                        record.class_key,
                        record.cohort,
                        record.year,
                        record.term,
                        record.section,
                        record.department,
                        record.attendance_date,
                        dump_json_list(record.present_roster),
                        dump_json_list(record.absent_roster),
                        record.total_students,
                        record.total_present,
                        record.total_absent,
                        record.status.value,
                        record.notes,
                        record.created_by,
                        record.updated_by,
                        record.revision,
                    ),
                )
            except mysql.connector.IntegrityError as e:
                if e.errno == errorcode.ER_DUP_ENTRY:
                    raise StaleAttendanceRecord(
                        f"Attendance for {record.class_key} on {record.attendance_date} was created concurrently"
                    ) from e
                raise
            return self._reload(cur, int(cur.lastrowid))

    def _update(self, record: AttendanceRecord, expected_revision: int) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE class_attendance
                SET present_roster=%s, absent_roster=%s,
                    total_students=%s, total_present=%s, total_absent=%s,
                    status=%s, notes=%s, department=%s, updated_by=%s, revision=%s
                WHERE attendance_id=%s AND revision=%s
                """,
                (
                    dump_json_list(record.present_roster),
                    dump_json_list(record.absent_roster),
                    record.total_students,
                    record.total_present,
                    record.total_absent,
                    record.status.value,
                    record.notes,
                    record.department,
                    record.updated_by,
                    record.revision,
                    record.attendance_id,
                    int(expected_revision),
                ),
            )
            if cur.rowcount == 0:
                raise StaleAttendanceRecord(
                    f"Attendance for {record.class_key} on {record.attendance_date} changed since revision "
                    f"{expected_revision}"
                )
            return self._reload(cur, int(record.attendance_id))

    @staticmethod
    def _reload(cur, attendance_id: int) -> AttendanceRecord:
        cur.execute(
            f"""
            SELECT {_ATTENDANCE_COLUMNS}
            FROM class_attendance
            WHERE attendance_id=%s
            """,
            (attendance_id,),
        )
        return _to_record(fetchone(cur))

    def list_for_class(
        self,
        *,
        faculty_id: str,
        class_key: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int = 50,
    ) -> Sequence[AttendanceRecord]:
        clauses: List[str] = ["faculty_id=%s", "class_key=%s"]
        params: List[Any] = [faculty_id, class_key]
        if start_date is not None:
            clauses.append("attendance_date>=%s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("attendance_date<=%s")
            params.append(end_date)
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_ATTENDANCE_COLUMNS}
                FROM class_attendance
                WHERE {" AND ".join(clauses)}
                ORDER BY attendance_date DESC
                LIMIT %s
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]
