from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Scan after the late threshold hour."""

    def decide(self, *, timestamp: datetime, late_threshold_hour: int) -> StatusDecision:
        return StatusDecision(
            status=AttendanceStatus.LATE,
            note=f"Arrived {timestamp.strftime('%H:%M')}, after {late_threshold_hour:02d}:59",
        )
