from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..core.enums import MANUAL_STATUSES, AttendanceStatus, AttendanceType, DigitalMethod
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, nullable_str
from .model import AttendanceKey, AttendanceRecord, AttendanceReportRow
from .repository import AttendanceRepository

_COLUMNS = (
    "attendance_id, student_id, course_key, ts, status, attendance_type, "
    "digital_method, marked_by_user_id, remarks"
)

# A scan leaves a row marked with a terminal manual status untouched. status is assigned
# last because later assignments in ON DUPLICATE KEY UPDATE see already-updated columns.
_TERMINAL_STATUSES = ", ".join(sorted(f"'{s.value}'" for s in MANUAL_STATUSES))
_KEEP_MARKED = f"VALUES(attendance_type)='{AttendanceType.DIGITAL.value}' AND status IN ({_TERMINAL_STATUSES})"
_UPDATE_COLUMNS = ("ts", "attendance_type", "digital_method", "marked_by_user_id", "remarks", "status")
_ON_DUPLICATE = ",\n".join(f"{c}=IF({_KEEP_MARKED}, {c}, VALUES({c}))" for c in _UPDATE_COLUMNS)


def _digital_method(value: Any) -> Optional[DigitalMethod]:
    try:
        return DigitalMethod(value) if value else None
    except ValueError:
        return None


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        student_id=str(r["student_id"]),
        course_id=nullable_str(r.get("course_key")),
        timestamp=r["ts"],
        status=AttendanceStatus(r["status"]),
        attendance_type=AttendanceType(r["attendance_type"]),
        digital_method=_digital_method(r.get("digital_method")),
        marked_by_user_id=r.get("marked_by_user_id"),
        remarks=r.get("remarks"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_key(self, key: AttendanceKey) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE student_id=%s AND course_key=%s AND work_date=%s
                """,
                (key.student_id, key.course_key, key.work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def upsert(self, record: AttendanceRecord) -> AttendanceRecord:
        key = record.key
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO attendance_records(
                    student_id, course_key, work_date, ts, status,
                    attendance_type, digital_method, marked_by_user_id, remarks
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    {_ON_DUPLICATE}
                """,
                (
                    key.student_id,
                    key.course_key,
                    key.work_date,
                    record.timestamp,
                    record.status.value,
                    record.attendance_type.value,
                    record.digital_method.value if record.digital_method else None,
                    record.marked_by_user_id,
                    record.remarks,
                ),
            )
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE student_id=%s AND course_key=%s AND work_date=%s
                """,
                (key.student_id, key.course_key, key.work_date),
            )
            return _to_record(fetchone(cur))

    def list_report_rows(
        self,
        *,
        start_date: date,
        end_date: date,
        student_id: Optional[str] = None,
        course_id: Optional[str] = None,
        attendance_type: Optional[AttendanceType] = None,
    ) -> Sequence[AttendanceReportRow]:
        clauses = ["ar.work_date BETWEEN %s AND %s"]
        params: list[object] = [start_date, end_date]

        if student_id is not None:
            clauses.append("ar.student_id=%s")
            params.append(str(student_id))
        if course_id is not None:
            clauses.append("ar.course_key=%s")
            params.append(str(course_id))
        if attendance_type is not None:
            clauses.append("ar.attendance_type=%s")
            params.append(attendance_type.value)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT
                    ar.attendance_id, ar.student_id, ar.course_key, ar.work_date, ar.ts,
                    ar.status, ar.attendance_type, ar.digital_method, ar.marked_by_user_id, ar.remarks,
                    s.full_name, s.admission_no, s.roll_no
                FROM attendance_records ar
                JOIN students s ON s.student_id = ar.student_id
                WHERE {where}
                ORDER BY ar.work_date DESC, s.full_name ASC
                """,
                tuple(params),
            )
            rows = fetchall(cur)

            return [
                AttendanceReportRow(
                    attendance_id=int(r["attendance_id"]),
                    student_id=str(r["student_id"]),
                    full_name=r["full_name"],
                    admission_no=r["admission_no"],
                    roll_no=r["roll_no"],
                    course_id=nullable_str(r.get("course_key")),
                    work_date=r["work_date"],
                    timestamp=r["ts"],
                    status=AttendanceStatus(r["status"]),
                    attendance_type=AttendanceType(r["attendance_type"]),
                    digital_method=_digital_method(r.get("digital_method")),
                    marked_by_user_id=r.get("marked_by_user_id"),
                    remarks=r.get("remarks"),
                )
                for r in rows
            ]
