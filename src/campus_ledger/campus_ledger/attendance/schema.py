"""Parse attendance request bodies (scan and bulk mark) into request objects.

Unlike the fee ledger, these are commands: a body that cannot be turned into a
valid request is rejected with ``ValidationError``.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from ..common.datetime_utils import coerce_datetime
from ..common.validators import require_hour
from ..core.enums import AttendanceStatus, DigitalMethod
from ..core.exceptions import ValidationError
from .model import BulkMarkRequest, ScanRequest


def _pick(payload: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if payload.get(key) not in (None, ""):
            return payload[key]
    return None


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _timestamp(payload: Mapping[str, Any]):
    raw = _pick(payload, "timestamp", "date")
    if raw is None:
        return None
    ts = coerce_datetime(raw)
    if ts is None:
        raise ValidationError(f"Invalid timestamp: {raw!r}")
    return ts


def parse_status(value: Any) -> AttendanceStatus:
    try:
        return AttendanceStatus(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(s.value for s in AttendanceStatus)
        raise ValidationError(f"Status must be one of: {allowed}")


def scan_request_from_json(payload: Optional[Mapping[str, Any]]) -> ScanRequest:
    payload = payload or {}

    card_value = _optional_text(_pick(payload, "cardId", "card_id", "qrCode", "qr_code"))
    student_id = _optional_text(_pick(payload, "studentId", "student_id"))
    if not card_value and not student_id:
        raise ValidationError("Card ID or student ID is required")

    threshold = _pick(payload, "lateThresholdHour", "late_threshold_hour")

    method_raw = _pick(payload, "digitalMethod", "digital_method")
    try:
        method = DigitalMethod(str(method_raw).strip().lower()) if method_raw else DigitalMethod.CARD_SCAN
    except ValueError:
        allowed = ", ".join(m.value for m in DigitalMethod)
        raise ValidationError(f"Digital method must be one of: {allowed}")

    return ScanRequest(
        card_value=card_value,
        student_id=student_id,
        course_id=_optional_text(_pick(payload, "courseId", "course_id")),
        timestamp=_timestamp(payload),
        late_threshold_hour=require_hour(threshold, "Late threshold hour") if threshold is not None else None,
        digital_method=method,
        marked_by_user_id=_optional_text(_pick(payload, "markedBy", "marked_by_user_id")),
    )


def bulk_request_from_json(payload: Optional[Mapping[str, Any]]) -> BulkMarkRequest:
    payload = payload or {}

    raw_ids = _pick(payload, "studentIds", "student_ids")
    if not isinstance(raw_ids, list):
        raise ValidationError("studentIds must be a non-empty list")
    student_ids = tuple(dict.fromkeys(t for t in (_optional_text(v) for v in raw_ids) if t))
    if not student_ids:
        raise ValidationError("studentIds must be a non-empty list")

    status = _pick(payload, "status")
    if status is None:
        raise ValidationError("Status is required")

    return BulkMarkRequest(
        student_ids=student_ids,
        status=parse_status(status),
        course_id=_optional_text(_pick(payload, "courseId", "course_id")),
        timestamp=_timestamp(payload),
        marked_by_user_id=_optional_text(_pick(payload, "markedBy", "marked_by_user_id")),
        remarks=_optional_text(_pick(payload, "remarks")),
    )
