from __future__ import annotations

from datetime import date, datetime
from typing import Union

import pytz

from ..core.constants import DEFAULT_EDIT_WINDOW_DAYS, DEFAULT_REFERENCE_TIMEZONE
from ..core.exceptions import ValidationError

DateLike = Union[date, datetime, str]


def get_tz(tz_name: str = DEFAULT_REFERENCE_TIMEZONE):
    return pytz.timezone(tz_name)


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local(tz_name: str = DEFAULT_REFERENCE_TIMEZONE) -> datetime:
    """Current time in the reference timezone.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(get_tz(tz_name))


def to_reference_date(value: DateLike, tz_name: str = DEFAULT_REFERENCE_TIMEZONE) -> date:
    """Calendar day of `value` in the reference timezone.

    Aware datetimes are converted first; naive datetimes are taken to be
    reference-local already. Strings may be a plain ISO date or an ISO
    datetime (a trailing "Z" is accepted).
    """
    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            raise ValidationError("Attendance date is required")
        try:
            if len(raw) == 10:
                return parse_iso_date(raw)
            value = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            raise ValidationError(f"Invalid date: {value!r}")

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(get_tz(tz_name))
        return value.date()
    if isinstance(value, date):
        return value
    raise ValidationError(f"Unsupported date value: {value!r}")


def can_edit(
    attendance_date: DateLike,
    edit_window_days: int = DEFAULT_EDIT_WINDOW_DAYS,
    *,
    today: date | None = None,
    tz_name: str = DEFAULT_REFERENCE_TIMEZONE,
) -> bool:
    """True while `today - attendance_date` is at most `edit_window_days` days."""
    day = to_reference_date(attendance_date, tz_name)
    today = today or now_local(tz_name).date()
    return (today - day).days <= int(edit_window_days)
