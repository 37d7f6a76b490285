from __future__ import annotations

import json
import logging

from ..common.validators import require_non_empty
from ..core.exceptions import NotFoundError, ValidationError
from .model import Student
from .repository import StudentRepository

logger = logging.getLogger(__name__)


class StudentService:
    def __init__(self, students: StudentRepository):
        self._students = students

    def get(self, student_id: str) -> Student:
        student = self._students.get_by_id(str(student_id))
        if not student:
            raise NotFoundError(f"Student {student_id} not found")
        return student

    def get_active(self, student_id: str) -> Student:
        student = self.get(student_id)
        if not student.is_active:
            raise ValidationError("Student is not active")
        return student

    def resolve_card(self, raw_value: str) -> Student:
        """Find the student behind a scanned card.

        The scanner hands over either the bare identifier printed on the card
        or the JSON payload of the card's QR code (``{"cardId": ...}`` or
        ``{"studentId": ...}``).
        """

        value = require_non_empty(raw_value, "Card ID")

        student = None
        payload = _parse_qr_payload(value)
        if payload is not None:
            if payload.get("cardId"):
                value = str(payload["cardId"]).strip()
            elif payload.get("studentId"):
                student = self._students.get_by_id(str(payload["studentId"]))

        if student is None:
            student = self._students.find_by_card(value)
        if student is None:
            logger.info("No student matches card %r", value)
            raise NotFoundError("Student not found with this card ID")
        if not student.is_active:
            raise ValidationError("Student is not active")
        return student


def _parse_qr_payload(value: str):
    if not value.startswith("{"):
        return None
    try:
        payload = json.loads(value)
    except ValueError:
        return None
    return payload if isinstance(payload, dict) else None
