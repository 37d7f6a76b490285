from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import now_local
from ..common.validators import require_hour
from ..core.constants import DEFAULT_LATE_THRESHOLD_HOUR
from ..core.enums import MANUAL_STATUSES, AttendanceType
from ..core.exceptions import ValidationError
from ..students.model import Student
from ..students.service import StudentService
from .factory import AttendanceStrategyFactory
from .model import AttendanceKey, AttendanceRecord, BulkMarkRequest, ScanRequest, UpsertResult
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanResult:
    student: Student
    record: AttendanceRecord
    is_update: bool


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        students: StudentService,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
        late_threshold_hour: int = DEFAULT_LATE_THRESHOLD_HOUR,
    ):
        self._attendance = attendance
        self._students = students
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._late_threshold_hour = require_hour(late_threshold_hour, "Late threshold hour")

    @property
    def late_threshold_hour(self) -> int:
        return self._late_threshold_hour

    def get_record(self, student_id: str, course_id: Optional[str], work_date: date) -> Optional[AttendanceRecord]:
        key = AttendanceKey(student_id=str(student_id), course_id=course_id or None, work_date=work_date)
        return self._attendance.get_by_key(key)

    def upsert(self, record: AttendanceRecord) -> UpsertResult:
        """Store ``record`` as the single record of its natural key.

        A scan never replaces a status a person chose for the day: when the
        stored record carries a manual status, the store keeps it over a
        digital record and it is returned with ``is_update=True``.
        """

        if record.attendance_type == AttendanceType.DIGITAL:
            if record.digital_method is None:
                raise ValidationError("Digital attendance requires a digital method")
        elif record.digital_method is not None:
            record = replace(record, digital_method=None)

        existing = self._attendance.get_by_key(record.key)
        saved = self._attendance.upsert(record)

        if record.attendance_type == AttendanceType.DIGITAL and saved.status in MANUAL_STATUSES:
            logger.info(
                "Ignoring scan for %s on %s: already marked %s",
                record.student_id,
                record.work_date,
                saved.status.value,
            )
            return UpsertResult(record=saved, is_update=True)

        logger.info(
            "%s attendance %s for %s on %s (course=%s, %s)",
            "Updated" if existing else "Created",
            saved.status.value,
            saved.student_id,
            saved.work_date,
            saved.course_id or "general",
            saved.attendance_type.value,
        )
        return UpsertResult(record=saved, is_update=existing is not None)

    def scan(self, request: ScanRequest, *, now: Optional[datetime] = None) -> ScanResult:
        if request.card_value:
            student = self._students.resolve_card(request.card_value)
        else:
            student = self._students.get_active(request.student_id or "")

        timestamp = request.timestamp or now or now_local()
        threshold = (
            request.late_threshold_hour if request.late_threshold_hour is not None else self._late_threshold_hour
        )

        strategy = self._factory.for_event(timestamp=timestamp, late_threshold_hour=threshold)
        decision = strategy.decide(timestamp=timestamp, late_threshold_hour=threshold)

        result = self.upsert(
            AttendanceRecord(
                student_id=student.student_id,
                course_id=request.course_id,
                timestamp=timestamp,
                status=decision.status,
                attendance_type=AttendanceType.DIGITAL,
                digital_method=request.digital_method,
                marked_by_user_id=request.marked_by_user_id,
                remarks=decision.note,
            )
        )
        return ScanResult(student=student, record=result.record, is_update=result.is_update)

    def mark_bulk(self, request: BulkMarkRequest, *, now: Optional[datetime] = None) -> list[UpsertResult]:
        """Manually mark many students with one status for the same day.

        Every student is looked up before anything is written, so an unknown id
        rejects the whole batch.
        """

        students = [self._students.get(student_id) for student_id in request.student_ids]
        timestamp = request.timestamp or now or now_local()

        strategy = self._factory.for_event(
            timestamp=timestamp,
            late_threshold_hour=self._late_threshold_hour,
            explicit_status=request.status,
        )
        decision = strategy.decide(timestamp=timestamp, late_threshold_hour=self._late_threshold_hour)

        results = [
            self.upsert(
                AttendanceRecord(
                    student_id=student.student_id,
                    course_id=request.course_id,
                    timestamp=timestamp,
                    status=decision.status,
                    attendance_type=AttendanceType.MANUAL,
                    marked_by_user_id=request.marked_by_user_id,
                    remarks=request.remarks,
                )
            )
            for student in students
        ]

        logger.info(
            "Bulk marked %d students %s on %s (%d updated)",
            len(results),
            request.status.value,
            timestamp.date(),
            sum(1 for r in results if r.is_update),
        )
        return results


def record_to_dict(record: AttendanceRecord) -> dict:
    return {
        "id": record.attendance_id,
        "studentId": record.student_id,
        "courseId": record.course_id,
        "date": record.work_date.isoformat(),
        "timestamp": record.timestamp.isoformat(),
        "status": record.status.value,
        "attendanceType": record.attendance_type.value,
        "digitalMethod": record.digital_method.value if record.digital_method else None,
        "markedBy": record.marked_by_user_id,
        "remarks": record.remarks,
    }
