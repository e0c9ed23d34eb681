from __future__ import annotations

from datetime import date
from typing import Optional

from ..classes.model import ClassKey
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .repository import HolidayCalendar


class MySQLHolidayCalendar(HolidayCalendar):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def holiday_reason(self, *, class_key: ClassKey, department: Optional[str], on_date: date) -> Optional[str]:
        # NULL department/class_key rows are institution-wide holidays.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT reason
                FROM holidays
                WHERE holiday_date=%s AND is_active=1
                  AND (department IS NULL OR department=%s)
                  AND (class_key IS NULL OR class_key=%s)
                ORDER BY class_key IS NULL, department IS NULL
                LIMIT 1
                """,
                (on_date, department, class_key.key),
            )
            row = fetchone(cur)
            return row["reason"] if row else None
