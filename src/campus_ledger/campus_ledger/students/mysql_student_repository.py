from __future__ import annotations

from typing import Any, Dict, Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Student
from .repository import StudentRepository

_COLUMNS = "student_id, serial_no, admission_no, roll_no, full_name, father_name, course_id, card_code, is_active"


def _to_student(r: Dict[str, Any]) -> Student:
    return Student(
        student_id=str(r["student_id"]),
        serial_no=r["serial_no"],
        admission_no=r["admission_no"],
        roll_no=r["roll_no"],
        full_name=r["full_name"],
        father_name=r.get("father_name") or "",
        course_id=r.get("course_id"),
        card_code=r.get("card_code"),
        is_active=bool(r.get("is_active", 1)),
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, student_id: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE student_id=%s", (student_id,))
            r = fetchone(cur)
            return _to_student(r) if r else None

    def find_by_card(self, card_value: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM students
                WHERE card_code=%s OR admission_no=%s OR serial_no=%s OR roll_no=%s OR student_id=%s
                ORDER BY (card_code=%s) DESC
                LIMIT 1
                """,
                (card_value,) * 6,
            )
            r = fetchone(cur)
            return _to_student(r) if r else None
