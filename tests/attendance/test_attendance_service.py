from dataclasses import replace
from datetime import date, datetime

import pytest
import pytz

from src.class_attendance.class_attendance.attendance.service import AttendanceService
from src.class_attendance.class_attendance.core.enums import AttendanceStatus
from src.class_attendance.class_attendance.core.exceptions import (
    DuplicateRollNumbers,
    EditWindowClosed,
    HolidayDate,
    InvalidClassKey,
    InvalidRollNumbers,
    NoStudents,
    StaleAttendanceRecord,
    ValidationError,
)

from tests.fakes import CLASS_A, InMemoryAttendance, InMemoryHolidays, InMemoryRoster

IST = pytz.timezone("Asia/Kolkata")
TODAY = date(2025, 1, 10)


def _service(rolls=("101", "102", "103", "104"), *, holidays=None, enforce=True, attendance=None):
    attendance = attendance or InMemoryAttendance()
    roster = InMemoryRoster({CLASS_A.key: list(rolls)})
    service = AttendanceService(
        attendance,
        roster,
        holidays=holidays,
        clock=lambda: IST.localize(datetime(2025, 1, 10, 10, 0)),
        enforce_edit_window=enforce,
    )
    return service, attendance


def test_mark_creates_finalized_record_with_complementary_rosters():
    service, attendance = _service()

    summary = service.mark_attendance("F001", CLASS_A.key, "2025-01-09", [102, 104], "first period")

    assert summary.created is True
    assert summary.status == AttendanceStatus.FINALIZED
    assert summary.present_roster == ("101", "103")
    assert summary.absent_roster == ("102", "104")
    assert (summary.total_present, summary.total_absent, summary.total_students) == (2, 2, 4)
    assert summary.attendance_percentage == 50.0
    assert summary.revision == 1

    stored = service.get_attendance("F001", CLASS_A.key, date(2025, 1, 9))
    assert stored.created_by == "F001"
    assert stored.notes == "first period"


def test_unknown_roll_number_rejected():
    service, attendance = _service()

    with pytest.raises(InvalidRollNumbers) as exc:
        service.mark_attendance("F001", CLASS_A.key, "2025-01-09", ["102", "999"])

    assert exc.value.details == ["999"]
    assert attendance.saves == 0


def test_repeated_roll_number_rejected():
    service, _ = _service()

    with pytest.raises(DuplicateRollNumbers) as exc:
        service.mark_attendance("F001", CLASS_A.key, "2025-01-09", ["102", "102"])

    assert exc.value.details == ["102"]


def test_invalid_roll_numbers_reported_before_duplicates():
    service, _ = _service()

    with pytest.raises(InvalidRollNumbers) as exc:
        service.mark_attendance("F001", CLASS_A.key, "2025-01-09", ["999", "102", "102", "999"])

    assert exc.value.details == ["999"]


def test_empty_roster_raises_no_students():
    service, _ = _service(rolls=())

    with pytest.raises(NoStudents):
        service.mark_attendance("F001", CLASS_A.key, "2025-01-09", [])


def test_everyone_present_when_absent_roster_missing():
    service, _ = _service()

    summary = service.mark_attendance("F001", CLASS_A.key, "2025-01-09", None)

    assert summary.total_present == 4
    assert summary.absent_roster == ()


def test_remark_same_day_updates_in_place():
    service, attendance = _service()
    first = service.mark_attendance("F001", CLASS_A.key, "2025-01-09", ["102", "104"], "morning", actor="U1")

    second = service.mark_attendance("F001", CLASS_A.key, "2025-01-09", ["104", "102"], actor="U2")

    assert second.created is False
    assert second.status == AttendanceStatus.MODIFIED
    assert second.attendance_id == first.attendance_id
    assert (second.total_present, second.total_absent, second.total_students) == (2, 2, 4)
    assert second.revision == 2

    stored = service.get_attendance("F001", CLASS_A.key, "2025-01-09")
    assert stored.created_by == "U1"
    assert stored.updated_by == "U2"
    assert stored.notes == "morning"
    assert len(service.list_history("F001", CLASS_A.key)) == 1


def test_update_follows_current_roster():
    attendance = InMemoryAttendance()
    service, _ = _service(attendance=attendance)
    service.mark_attendance("F001", CLASS_A.key, "2025-01-09", ["102"])

    grown, _ = _service(rolls=("101", "102", "103", "104", "105"), attendance=attendance)
    summary = grown.mark_attendance("F001", CLASS_A.key, "2025-01-09", ["105"])

    assert summary.total_students == 5
    assert summary.present_roster == ("101", "102", "103", "104")


@pytest.mark.parametrize("absent", [[], ["101"], ["101", "103"], ["104", "103", "102", "101"]])
def test_counts_always_agree_with_rosters(absent):
    service, _ = _service()

    summary = service.mark_attendance("F001", CLASS_A.key, "2025-01-09", absent)

    assert summary.total_present + summary.total_absent == summary.total_students
    assert not set(summary.present_roster) & set(summary.absent_roster)


def test_stale_revision_is_not_overwritten():
    service, attendance = _service()
    service.mark_attendance("F001", CLASS_A.key, "2025-01-09", ["102"])
    original_save = attendance.save_attendance

    def racing_save(record, *, expected_revision):
        # Another writer lands between our read and our write.
        current = attendance.get_attendance(record.key)
        original_save(replace(current, revision=current.revision + 1), expected_revision=current.revision)
        return original_save(record, expected_revision=expected_revision)

    attendance.save_attendance = racing_save

    with pytest.raises(StaleAttendanceRecord):
        service.mark_attendance("F001", CLASS_A.key, "2025-01-09", ["101"])


def test_edit_window_blocks_updates_of_old_records():
    service, _ = _service()
    service.mark_attendance("F001", CLASS_A.key, "2024-12-20", ["102"])

    with pytest.raises(EditWindowClosed):
        service.mark_attendance("F001", CLASS_A.key, "2024-12-20", ["101"])


def test_edit_window_can_be_disabled():
    service, _ = _service(enforce=False)
    service.mark_attendance("F001", CLASS_A.key, "2024-12-20", ["102"])

    summary = service.mark_attendance("F001", CLASS_A.key, "2024-12-20", ["101"])

    assert summary.status == AttendanceStatus.MODIFIED


def test_holiday_blocks_marking():
    service, attendance = _service(holidays=InMemoryHolidays({date(2025, 1, 9): "Pongal"}))

    with pytest.raises(HolidayDate, match="Pongal"):
        service.mark_attendance("F001", CLASS_A.key, "2025-01-09", [])
    assert attendance.saves == 0


def test_date_is_taken_in_reference_timezone():
    service, _ = _service()

    # 20:00 UTC on the 8th is already the 9th in India.
    summary = service.mark_attendance("F001", CLASS_A.key, "2025-01-08T20:00:00Z", [])

    assert summary.attendance_date == date(2025, 1, 9)


def test_notes_length_is_limited():
    service, _ = _service()

    with pytest.raises(ValidationError):
        service.mark_attendance("F001", CLASS_A.key, "2025-01-09", [], "x" * 1001)


@pytest.mark.parametrize("absent", [102, "102,104", {"102": True}])
def test_absent_roster_must_be_a_list(absent):
    service, attendance = _service()

    with pytest.raises(ValidationError):
        service.mark_attendance("F001", CLASS_A.key, "2025-01-09", absent)

    assert attendance.saves == 0


def test_malformed_class_key_rejected():
    service, _ = _service()

    with pytest.raises(InvalidClassKey):
        service.mark_attendance("F001", "CSE-3A", "2025-01-09", [])


def test_list_history_newest_first_within_range():
    service, _ = _service()
    for day in ("2025-01-06", "2025-01-07", "2025-01-08", "2025-01-09"):
        service.mark_attendance("F001", CLASS_A.key, day, [])

    rows = service.list_history("F001", CLASS_A.key, start="2025-01-07", end="2025-01-09", limit=2)

    assert [r.attendance_date for r in rows] == [date(2025, 1, 9), date(2025, 1, 8)]


@pytest.mark.parametrize("limit", [0, -1])
def test_list_history_rejects_non_positive_limit(limit):
    service, _ = _service()

    with pytest.raises(ValidationError):
        service.list_history("F001", CLASS_A.key, limit=limit)
