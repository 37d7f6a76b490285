from __future__ import annotations

from enum import Enum


class InvoiceStatus(str, Enum):
    """Invoice status derived from pending amount and due date."""

    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"
    OVERDUE = "overdue"
    # paid_amount was outside [0, total_amount] and had to be clamped.
    DATA_INCONSISTENT = "data-inconsistent"


class PaymentMethod(str, Enum):
    CASH = "cash"
    BANK_TRANSFER = "bank_transfer"
    ONLINE = "online"
    CHEQUE = "cheque"
    CARD = "card"


class PaymentStatus(str, Enum):
    """Per-invoice punctuality shown on the student fee history."""

    PAID_ON_TIME = "paid_on_time"
    PAID_LATE = "paid_late"
    PAID = "paid"
    PARTIAL = "partial"
    OVERDUE = "overdue"
    PENDING = "pending"


class OverallFeeStatus(str, Enum):
    COMPLETE = "complete"
    PENDING = "pending"
    OVERDUE = "overdue"


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    LATE = "late"
    ABSENT = "absent"
    EXCUSED = "excused"
    LEAVE = "leave"
    HOLIDAY = "holiday"
    SUNDAY = "sunday"


# Statuses only a human sets; scans never derive or overwrite them.
MANUAL_STATUSES = frozenset(
    {
        AttendanceStatus.ABSENT,
        AttendanceStatus.EXCUSED,
        AttendanceStatus.LEAVE,
        AttendanceStatus.HOLIDAY,
        AttendanceStatus.SUNDAY,
    }
)


class AttendanceType(str, Enum):
    MANUAL = "manual"
    DIGITAL = "digital"


class DigitalMethod(str, Enum):
    CARD_SCAN = "card_scan"
    FACE_SCAN = "face_scan"
    FINGERPRINT_SCAN = "fingerprint_scan"
