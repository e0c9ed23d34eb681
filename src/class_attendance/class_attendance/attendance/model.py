from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Tuple

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceKey:
    """One record per faculty member, class and calendar day."""

    faculty_id: str
    class_key: str
    attendance_date: date


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: a class's attendance for one day.

    The two rosters are disjoint and together form the class roster for the
    day; the counts always agree with them. Construction fails otherwise, so
    no inconsistent record can reach the store.
    """

    attendance_id: Optional[int]
    faculty_id: str
    class_key: str
    cohort: str
    year: str
    term: str
    section: str
    attendance_date: date
    present_roster: Tuple[str, ...]
    absent_roster: Tuple[str, ...]
    total_students: int
    total_present: int
    total_absent: int
    status: AttendanceStatus
    created_by: str
    updated_by: str
    department: Optional[str] = None
    notes: str = ""
    revision: int = 1
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if set(self.present_roster) & set(self.absent_roster):
            raise ValueError("present and absent rosters overlap")
        if self.total_present != len(self.present_roster) or self.total_absent != len(self.absent_roster):
            raise ValueError("roster counts do not match rosters")
        if self.total_present + self.total_absent != self.total_students:
            raise ValueError("present + absent must equal total students")

    @property
    def key(self) -> AttendanceKey:
        return AttendanceKey(self.faculty_id, self.class_key, self.attendance_date)

    @property
    def attendance_percentage(self) -> float:
        if not self.total_students:
            return 0.0
        return round(self.total_present * 100 / self.total_students, 2)

    def as_dict(self) -> dict:
        return {
            "attendance_id": self.attendance_id,
            "faculty_id": self.faculty_id,
            "class_key": self.class_key,
            "cohort": self.cohort,
            "year": self.year,
            "term": self.term,
            "section": self.section,
            "department": self.department,
            "date": self.attendance_date.strftime("%Y-%m-%d"),
            "present_roster": list(self.present_roster),
            "absent_roster": list(self.absent_roster),
            "total_students": self.total_students,
            "total_present": self.total_present,
            "total_absent": self.total_absent,
            "attendance_percentage": self.attendance_percentage,
            "status": self.status.value,
            "notes": self.notes,
            "created_by": self.created_by,
            "updated_by": self.updated_by,
            "revision": self.revision,
        }


@dataclass(frozen=True)
class AttendanceSummary:
    """What callers get back from marking attendance."""

    attendance_id: Optional[int]
    faculty_id: str
    class_key: str
    attendance_date: date
    present_roster: Tuple[str, ...]
    absent_roster: Tuple[str, ...]
    total_students: int
    total_present: int
    total_absent: int
    attendance_percentage: float
    status: AttendanceStatus
    revision: int
    created: bool

    @classmethod
    def of(cls, record: AttendanceRecord, *, created: bool) -> "AttendanceSummary":
        return cls(
            attendance_id=record.attendance_id,
            faculty_id=record.faculty_id,
            class_key=record.class_key,
            attendance_date=record.attendance_date,
            present_roster=record.present_roster,
            absent_roster=record.absent_roster,
            total_students=record.total_students,
            total_present=record.total_present,
            total_absent=record.total_absent,
            attendance_percentage=record.attendance_percentage,
            status=record.status,
            revision=record.revision,
            created=created,
        )

    def as_dict(self) -> dict:
        return {
            "attendance_id": self.attendance_id,
            "faculty_id": self.faculty_id,
            "class_key": self.class_key,
            "date": self.attendance_date.strftime("%Y-%m-%d"),
            "present_roster": list(self.present_roster),
            "absent_roster": list(self.absent_roster),
            "total_students": self.total_students,
            "total_present": self.total_present,
            "total_absent": self.total_absent,
            "attendance_percentage": self.attendance_percentage,
            "status": self.status.value,
            "revision": self.revision,
            "created": self.created,
        }
