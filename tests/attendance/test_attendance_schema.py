from datetime import datetime

import pytest

from src.campus_ledger.campus_ledger.attendance.schema import bulk_request_from_json, scan_request_from_json
from src.campus_ledger.campus_ledger.core.enums import AttendanceStatus, DigitalMethod
from src.campus_ledger.campus_ledger.core.exceptions import ValidationError


def test_scan_request_from_camel_case():
    scan = scan_request_from_json(
        {"cardId": " ADM-2024-001 ", "courseId": "crs-web", "timestamp": "2024-03-15T09:30:00", "lateThresholdHour": "10"}
    )

    assert scan.card_value == "ADM-2024-001"
    assert scan.course_id == "crs-web"
    assert scan.timestamp == datetime(2024, 3, 15, 9, 30)
    assert scan.late_threshold_hour == 10
    assert scan.digital_method == DigitalMethod.CARD_SCAN


@pytest.mark.parametrize(
    "payload",
    [
        None,
        {},
        {"cardId": "   "},
        {"cardId": "X", "timestamp": "yesterday"},
        {"cardId": "X", "lateThresholdHour": 24},
        {"cardId": "X", "digitalMethod": "retina_scan"},
    ],
)
def test_scan_request_rejects_bad_input(payload):
    with pytest.raises(ValidationError):
        scan_request_from_json(payload)


def test_bulk_request_dedupes_students():
    bulk = bulk_request_from_json({"studentIds": ["stu-1", "stu-2", "stu-1", ""], "status": "Absent"})

    assert bulk.student_ids == ("stu-1", "stu-2")
    assert bulk.status == AttendanceStatus.ABSENT
    assert bulk.timestamp is None


@pytest.mark.parametrize(
    "payload",
    [
        {"status": "absent"},
        {"studentIds": [], "status": "absent"},
        {"studentIds": ["stu-1"]},
        {"studentIds": ["stu-1"], "status": "asleep"},
    ],
)
def test_bulk_request_rejects_bad_input(payload):
    with pytest.raises(ValidationError):
        bulk_request_from_json(payload)
