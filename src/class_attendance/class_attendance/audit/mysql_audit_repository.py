from __future__ import annotations

import json

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json_list
from .model import AuditEntry
from .repository import AuditRepository


class MySQLAuditRepository(AuditRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def append(self, entry: AuditEntry) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO faculty_audit_log(
                    operation, faculty_id, class_key, source, actor, status,
                    student_count, student_ids, details, error_message, recorded_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    entry.operation.value,
                    entry.faculty_id,
                    entry.class_key,
                    entry.source.value if entry.source else None,
                    entry.actor,
                    entry.status.value,
                    int(entry.student_count),
                    dump_json_list(entry.student_ids),
                    json.dumps(dict(entry.details), default=str),
                    (entry.error_message or "")[:500] or None,
                    entry.recorded_at.replace(tzinfo=None),
                ),
            )
            return int(cur.lastrowid)
