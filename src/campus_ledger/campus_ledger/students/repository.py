from __future__ import annotations

from typing import Optional, Protocol

from .model import Student


class StudentRepository(Protocol):
    def get_by_id(self, student_id: str) -> Optional[Student]:
        raise NotImplementedError

    def find_by_card(self, card_value: str) -> Optional[Student]:
        """Match a scanned value against card code, admission/serial/roll no or id."""

        raise NotImplementedError
