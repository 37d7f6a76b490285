from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import AttendanceStatus
from .strategies.base import AttendanceStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.manual_strategy import ManualStatusStrategy
from .strategies.present_strategy import PresentStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_event(
        self,
        *,
        timestamp: datetime,
        late_threshold_hour: int,
        explicit_status: Optional[AttendanceStatus] = None,
    ) -> AttendanceStrategy:
        if explicit_status is not None:
            return ManualStatusStrategy(explicit_status)

        # Hour-only comparison: 09:59 is still on time for a threshold of 9.
        if timestamp.hour <= late_threshold_hour:
            return PresentStrategy()
        return LateStrategy()
