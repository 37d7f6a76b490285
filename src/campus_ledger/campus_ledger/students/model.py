from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Student:
    """Domain entity: a student's identity and academic record.

    Identifiers are assigned once at admission and never change afterwards.
    """

    student_id: str
    serial_no: str
    admission_no: str
    roll_no: str
    full_name: str
    father_name: str = ""
    course_id: Optional[str] = None
    card_code: Optional[str] = None
    is_active: bool = True

    @property
    def card_id(self) -> str:
        """Identifier printed on the ID card and encoded in its QR code."""
        return self.card_code or self.admission_no or self.serial_no or self.roll_no or self.student_id
