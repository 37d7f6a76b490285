from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..core.enums import AttendanceStatus
from .factory import AttendanceStrategyFactory

_factory = AttendanceStrategyFactory()


def derive_status(
    timestamp: datetime,
    late_threshold_hour: int,
    explicit_status: Optional[AttendanceStatus] = None,
) -> AttendanceStatus:
    """Classify one attendance event.

    ``present`` when the event's hour is at or before ``late_threshold_hour``,
    otherwise ``late``. An explicit status chosen by a person (absent, excused,
    leave, holiday, sunday, or a manual present/late) is returned unchanged.
    """

    strategy = _factory.for_event(
        timestamp=timestamp,
        late_threshold_hour=late_threshold_hour,
        explicit_status=explicit_status,
    )
    return strategy.decide(timestamp=timestamp, late_threshold_hour=late_threshold_hour).status
