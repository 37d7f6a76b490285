from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceType
from .model import AttendanceKey, AttendanceRecord, AttendanceReportRow


class AttendanceRepository(Protocol):
    def get_by_key(self, key: AttendanceKey) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def upsert(self, record: AttendanceRecord) -> AttendanceRecord:
        """Insert or update the record for its natural key; returns the row as stored.

        Must be atomic per key: concurrent calls for the same key leave exactly one row.
        A digital record never replaces a row holding a terminal manual status; the
        stored row comes back unchanged instead.
        """

        raise NotImplementedError

    def list_report_rows(
        self,
        *,
        start_date: date,
        end_date: date,
        student_id: Optional[str] = None,
        course_id: Optional[str] = None,
        attendance_type: Optional[AttendanceType] = None,
    ) -> Sequence[AttendanceReportRow]:
        raise NotImplementedError
