from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

from ..core.constants import MONTH_KEY_FORMAT, UNDATED_MONTH_KEY


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def coerce_datetime(value: Any) -> Optional[datetime]:
    """Best-effort conversion of JSON/DB date values into a naive local datetime.

    Accepts datetime, date, and ISO-8601 strings (with or without a trailing
    ``Z``). Timezone-aware values are converted to local time so that every
    datetime compared by the ledger and the attendance deriver is naive.
    Anything unparseable yields None.
    """

    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        return datetime.combine(value, datetime.min.time())
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt


def coerce_date(value: Any) -> Optional[date]:
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    dt = coerce_datetime(value)
    return dt.date() if dt else None


def month_key(value: Optional[datetime]) -> str:
    """Return the YYYY-MM grouping key for a payment date."""
    if value is None:
        return UNDATED_MONTH_KEY
    return value.strftime(MONTH_KEY_FORMAT)
