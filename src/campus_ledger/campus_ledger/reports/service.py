from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..common.money import percentage
from ..core.enums import AttendanceStatus, AttendanceType
from ..core.exceptions import ValidationError

REPORT_CSV_FIELDS = [
    "date",
    "student_id",
    "full_name",
    "admission_no",
    "roll_no",
    "course_id",
    "time",
    "status",
    "attendance_type",
    "digital_method",
    "marked_by",
    "remarks",
]

_ATTENDED = (AttendanceStatus.PRESENT, AttendanceStatus.LATE)


@dataclass(frozen=True)
class ReportData:
    rows: list[dict]
    summary: dict
    by_student: list[dict]
    by_date: list[dict]


def _empty_counts() -> dict:
    counts = {status.value: 0 for status in AttendanceStatus}
    counts["total"] = 0
    return counts


class AttendanceReportService:
    def __init__(self, attendance: AttendanceRepository):
        self._attendance = attendance

    def build_attendance_report(
        self,
        *,
        start: date,
        end: date,
        student_id: Optional[str] = None,
        course_id: Optional[str] = None,
        attendance_type: Optional[AttendanceType] = None,
    ) -> ReportData:
        if end < start:
            raise ValidationError("End date must not be before start date")

        query_rows = self._attendance.list_report_rows(
            start_date=start,
            end_date=end,
            student_id=student_id,
            course_id=course_id,
            attendance_type=attendance_type,
        )

        summary = _empty_counts()
        summary["manual"] = 0
        summary["digital"] = 0
        student_map: dict[str, dict] = {}
        date_map: dict[str, dict] = {}
        out_rows: list[dict] = []

        for r in query_rows:
            work_date = r.work_date.strftime("%Y-%m-%d")
            out_rows.append(
                {
                    "date": work_date,
                    "student_id": r.student_id,
                    "full_name": r.full_name,
                    "admission_no": r.admission_no,
                    "roll_no": r.roll_no,
                    "course_id": r.course_id or "-",
                    "time": r.timestamp.strftime("%H:%M"),
                    "status": r.status.value,
                    "attendance_type": r.attendance_type.value,
                    "digital_method": r.digital_method.value if r.digital_method else "-",
                    "marked_by": r.marked_by_user_id or "",
                    "remarks": r.remarks or "",
                }
            )

            summary[r.status.value] += 1
            summary["total"] += 1
            summary[r.attendance_type.value] += 1

            s = student_map.get(r.student_id)
            if not s:
                s = {
                    "student_id": r.student_id,
                    "full_name": r.full_name,
                    "admission_no": r.admission_no,
                    **_empty_counts(),
                }
                student_map[r.student_id] = s
            s[r.status.value] += 1
            s["total"] += 1

            d = date_map.get(work_date)
            if not d:
                d = {"date": work_date, **_empty_counts()}
                date_map[work_date] = d
            d[r.status.value] += 1
            d["total"] += 1

        for group in [summary, *student_map.values(), *date_map.values()]:
            attended = sum(group[status.value] for status in _ATTENDED)
            group["present_percentage"] = str(percentage(attended, group["total"]))

        by_student = sorted(student_map.values(), key=lambda x: (x["full_name"], x["student_id"]))
        by_date = sorted(date_map.values(), key=lambda x: x["date"])
        return ReportData(rows=out_rows, summary=summary, by_student=by_student, by_date=by_date)
