from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.constants import GENERAL_COURSE_KEY
from ..core.enums import AttendanceStatus, AttendanceType, DigitalMethod


@dataclass(frozen=True)
class AttendanceKey:
    """Natural key: one record per student, course (or general) and calendar day."""

    student_id: str
    course_id: Optional[str]
    work_date: date

    @property
    def course_key(self) -> str:
        return self.course_id or GENERAL_COURSE_KEY


@dataclass(frozen=True)
class AttendanceRecord:
    student_id: str
    course_id: Optional[str]
    timestamp: datetime
    status: AttendanceStatus
    attendance_type: AttendanceType
    digital_method: Optional[DigitalMethod] = None
    marked_by_user_id: Optional[str] = None
    remarks: Optional[str] = None
    attendance_id: Optional[int] = None

    @property
    def work_date(self) -> date:
        return self.timestamp.date()

    @property
    def key(self) -> AttendanceKey:
        return AttendanceKey(student_id=self.student_id, course_id=self.course_id or None, work_date=self.work_date)


@dataclass(frozen=True)
class UpsertResult:
    record: AttendanceRecord
    is_update: bool


@dataclass(frozen=True)
class ScanRequest:
    """A card scan as posted by the scanner or the attendance page."""

    card_value: Optional[str]
    student_id: Optional[str]
    course_id: Optional[str]
    timestamp: Optional[datetime]
    late_threshold_hour: Optional[int]
    digital_method: DigitalMethod = DigitalMethod.CARD_SCAN
    marked_by_user_id: Optional[str] = None


@dataclass(frozen=True)
class BulkMarkRequest:
    student_ids: tuple[str, ...]
    status: AttendanceStatus
    course_id: Optional[str] = None
    timestamp: Optional[datetime] = None
    marked_by_user_id: Optional[str] = None
    remarks: Optional[str] = None


@dataclass(frozen=True)
class AttendanceReportRow:
    """Read-model for reports and CSV export."""

    attendance_id: int
    student_id: str
    full_name: str
    admission_no: str
    roll_no: str
    course_id: Optional[str]
    work_date: date
    timestamp: datetime
    status: AttendanceStatus
    attendance_type: AttendanceType
    digital_method: Optional[DigitalMethod] = None
    marked_by_user_id: Optional[str] = None
    remarks: Optional[str] = None
