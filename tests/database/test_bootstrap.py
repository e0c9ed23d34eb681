from pathlib import Path

from src.class_attendance.class_attendance.database.bootstrap import (
    _as_config,
    _iter_sql_statements,
    _strip_create_db_and_use,
)

REPO_ROOT = Path(__file__).resolve().parents[2]


def test_splitter_respects_quotes_and_comments():
    sql = """
    -- seed; with a semicolon in the comment
    INSERT INTO holidays(reason) VALUES('New Year; observed');
    INSERT INTO holidays(reason) VALUES("it\\'s a \\"holiday\\"");
    SELECT 1
    """

    statements = list(_iter_sql_statements(sql))

    assert statements == [
        "INSERT INTO holidays(reason) VALUES('New Year; observed')",
        'INSERT INTO holidays(reason) VALUES("it\\\'s a \\"holiday\\"")',
        "SELECT 1",
    ]


def test_create_database_and_use_are_stripped():
    sql = "CREATE DATABASE IF NOT EXISTS x;\nUSE x;\nCREATE TABLE t (id INT);"

    assert list(_iter_sql_statements(_strip_create_db_and_use(sql))) == ["CREATE TABLE t (id INT)"]


def test_schema_declares_every_table():
    sql = _strip_create_db_and_use((REPO_ROOT / "database" / "schema.sql").read_text(encoding="utf-8"))
    tables = [s.split()[5] for s in _iter_sql_statements(sql)]

    assert tables == [
        "faculty",
        "class_assignments",
        "students",
        "student_enrollments",
        "holidays",
        "class_attendance",
        "faculty_audit_log",
    ]


def test_as_config_fills_defaults():
    cfg = _as_config({"host": "db", "password": None})

    assert (cfg.host, cfg.port, cfg.user, cfg.password, cfg.database) == ("db", 3306, "root", "", "class_attendance")
