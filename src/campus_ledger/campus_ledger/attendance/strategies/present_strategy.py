from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class PresentStrategy(AttendanceStrategy):
    """Scan at or before the late threshold hour."""

    def decide(self, *, timestamp: datetime, late_threshold_hour: int) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)
