from datetime import date, datetime

import mysql.connector
import pytest

from src.class_attendance.class_attendance.attendance.model import AttendanceKey, AttendanceRecord
from src.class_attendance.class_attendance.attendance.mysql_attendance_repository import MySQLAttendanceRepository
from src.class_attendance.class_attendance.core.enums import AttendanceStatus
from src.class_attendance.class_attendance.core.exceptions import PersistenceError, StaleAttendanceRecord
from src.class_attendance.class_attendance.database.mysql_base import db_cursor, load_json_list
from src.class_attendance.class_attendance.faculty.model import AssignmentQuery, FacultyQuery
from src.class_attendance.class_attendance.faculty.mysql_assignment_repository import MySQLAssignmentRepository
from src.class_attendance.class_attendance.faculty.mysql_faculty_repository import MySQLFacultyDirectory

from tests.fakes import CLASS_A


class FakeCursor:
    def __init__(self, rows=(), rowcount=1, error=None):
        self.rows = list(rows)
        self.rowcount = rowcount
        self.lastrowid = 42
        self.error = error
        self.executed = []
        self.closed = False

    def execute(self, sql, params=None):
        self.executed.append((" ".join(sql.split()), params))
        if self.error is not None:
            raise self.error

    def fetchone(self):
        return self.rows.pop(0) if self.rows else None

    def fetchall(self):
        rows, self.rows = self.rows, []
        return rows

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self, cursor):
        self._cursor = cursor
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def cursor(self, dictionary=True):
        return self._cursor

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


class FakeConnFactory:
    def __init__(self, cursor=None, connect_error=None):
        self.conn = FakeConnection(cursor or FakeCursor())
        self.connect_error = connect_error

    def connect(self):
        if self.connect_error is not None:
            raise self.connect_error
        return self.conn


def _row(**overrides):
    values = dict(
        attendance_id=7,
        faculty_id="F001",
        class_key=CLASS_A.key,
        cohort=CLASS_A.cohort,
        year=CLASS_A.year,
        term=CLASS_A.term,
        section=CLASS_A.section,
        department="CSE",
        attendance_date=date(2025, 1, 9),
        present_roster='["101", "103"]',
        absent_roster=b'["102"]',
        total_students=3,
        total_present=2,
        total_absent=1,
        status="finalized",
        notes=None,
        created_by="U1",
        updated_by="U1",
        revision=1,
        created_at=datetime(2025, 1, 9, 9, 0),
        updated_at=datetime(2025, 1, 9, 9, 0),
    )
    values.update(overrides)
    return values


def _record(**overrides):
    values = dict(
        attendance_id=7,
        faculty_id="F001",
        class_key=CLASS_A.key,
        cohort=CLASS_A.cohort,
        year=CLASS_A.year,
        term=CLASS_A.term,
        section=CLASS_A.section,
        attendance_date=date(2025, 1, 9),
        present_roster=("101",),
        absent_roster=("102", "103"),
        total_students=3,
        total_present=1,
        total_absent=2,
        status=AttendanceStatus.MODIFIED,
        created_by="U1",
        updated_by="U2",
        revision=2,
    )
    values.update(overrides)
    return AttendanceRecord(**values)


def test_db_cursor_commits_and_closes():
    factory = FakeConnFactory()

    with db_cursor(factory) as (_, cur):
        cur.execute("SELECT 1")

    assert factory.conn.committed and factory.conn.closed and cur.closed


def test_db_cursor_wraps_driver_errors():
    factory = FakeConnFactory(FakeCursor(error=mysql.connector.Error(msg="lost connection")))

    with pytest.raises(PersistenceError) as exc:
        with db_cursor(factory) as (_, cur):
            cur.execute("SELECT 1")

    assert isinstance(exc.value.__cause__, mysql.connector.Error)
    assert factory.conn.rolled_back and not factory.conn.committed


def test_db_cursor_reports_unreachable_server():
    factory = FakeConnFactory(connect_error=mysql.connector.Error(msg="timeout"))

    with pytest.raises(PersistenceError, match="Database unavailable"):
        with db_cursor(factory):
            pass


def test_json_helpers_accept_driver_representations():
    assert load_json_list(b'["1", 2]') == ("1", "2")
    assert load_json_list(None) == ()
    assert load_json_list(["a"]) == ("a",)


def test_get_attendance_maps_row():
    factory = FakeConnFactory(FakeCursor(rows=[_row()]))

    record = MySQLAttendanceRepository(factory).get_attendance(AttendanceKey("F001", CLASS_A.key, date(2025, 1, 9)))

    assert record.present_roster == ("101", "103")
    assert record.absent_roster == ("102",)
    assert record.status == AttendanceStatus.FINALIZED
    assert record.notes == ""


@pytest.mark.parametrize(
    "overrides",
    [{"total_present": 3}, {"absent_roster": '["101"]'}, {"status": "draft"}],
)
def test_inconsistent_row_is_a_persistence_error(overrides):
    factory = FakeConnFactory(FakeCursor(rows=[_row(**overrides)]))

    with pytest.raises(PersistenceError):
        MySQLAttendanceRepository(factory).get_attendance(AttendanceKey("F001", CLASS_A.key, date(2025, 1, 9)))


def test_update_with_old_revision_is_stale():
    cursor = FakeCursor(rowcount=0)
    factory = FakeConnFactory(cursor)

    with pytest.raises(StaleAttendanceRecord):
        MySQLAttendanceRepository(factory).save_attendance(_record(), expected_revision=1)

    sql, params = cursor.executed[0]
    assert sql.startswith("UPDATE class_attendance")
    assert "revision=%s" in sql
    assert params[-2:] == (7, 1)
    assert factory.conn.rolled_back


def test_update_reloads_saved_row():
    cursor = FakeCursor(rows=[_row(status="modified", revision=2)], rowcount=1)

    saved = MySQLAttendanceRepository(FakeConnFactory(cursor)).save_attendance(_record(), expected_revision=1)

    assert saved.revision == 2
    assert saved.status == AttendanceStatus.MODIFIED


def test_duplicate_insert_is_stale():
    duplicate = mysql.connector.IntegrityError(msg="Duplicate entry", errno=1062)
    factory = FakeConnFactory(FakeCursor(error=duplicate))

    with pytest.raises(StaleAttendanceRecord):
        MySQLAttendanceRepository(factory).save_attendance(
            _record(attendance_id=None, status=AttendanceStatus.FINALIZED, revision=1), expected_revision=None
        )


def test_find_faculty_builds_filters_and_orders_by_recency():
    cursor = FakeCursor(rows=[])

    MySQLFacultyDirectory(FakeConnFactory(cursor)).find_faculty(FacultyQuery(class_key=CLASS_A.key))

    sql, params = cursor.executed[0]
    assert "class_key=%s" in sql
    assert "is_class_advisor=1" in sql
    assert "status='active'" in sql
    assert sql.endswith("ORDER BY assigned_at IS NULL, assigned_at DESC, faculty_id")
    assert params == (CLASS_A.key,)


def _assignment_row(assignment_id, **overrides):
    values = dict(
        assignment_id=assignment_id,
        faculty_id="F100",
        cohort=CLASS_A.cohort,
        year=CLASS_A.year,
        term=CLASS_A.term,
        section=CLASS_A.section,
        department="CSE",
        active=1,
        assigned_at=None,
    )
    values.update(overrides)
    return values


def test_find_assignments_compares_normalized_components():
    cursor = FakeCursor(
        rows=[
            _assignment_row(1, cohort="2022", year="3", term="5", section="a"),
            _assignment_row(2, cohort="2021-2025"),
            _assignment_row(3, term="Sem 6"),
        ]
    )
    query = AssignmentQuery(
        faculty_id="F100", cohort=CLASS_A.cohort, year=CLASS_A.year, term=CLASS_A.term, section=CLASS_A.section
    )

    found = MySQLAssignmentRepository(FakeConnFactory(cursor)).find_assignments(query)

    assert [a.assignment_id for a in found] == [1]
    sql, params = cursor.executed[0]
    assert "faculty_id=%s AND active=1" in sql
    assert params == ("F100",)
