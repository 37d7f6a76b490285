from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class ManualStatusStrategy(AttendanceStrategy):
    """Status chosen by a person; the clock is not consulted."""

    def __init__(self, status: AttendanceStatus):
        self._status = status

    def decide(self, *, timestamp: datetime, late_threshold_hour: int) -> StatusDecision:
        return StatusDecision(status=self._status)
