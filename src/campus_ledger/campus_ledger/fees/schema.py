"""Normalize loosely-typed JSON from the data service into fee entities.

The data service emits camelCase keys (``totalAmount``, ``paymentDate``)
and sometimes populates references (``invoiceId: {"_id": ..., "invoiceNo": ...}``).
Both shapes, and snake_case keys, are accepted. Missing or malformed fields
fall back to documented defaults: amounts become 0, strings become "",
dates and enums become None. Nothing in here raises for bad data.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from ..common.datetime_utils import coerce_date, coerce_datetime
from ..common.money import to_decimal
from ..core.enums import InvoiceStatus, PaymentMethod
from .model import Invoice, PaymentInstallment


def _pick(payload: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in payload and payload[key] is not None:
            return payload[key]
    return default


def _ref_id(value: Any) -> str:
    if isinstance(value, Mapping):
        value = _pick(value, "_id", "id", default="")
    return "" if value is None else str(value)


def _text(value: Any) -> str:
    if value is None or isinstance(value, (Mapping, list)):
        return ""
    return str(value).strip()


def _enum(enum_cls, value: Any):
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        return None


def invoice_from_json(payload: Mapping[str, Any]) -> Invoice:
    status = _enum(InvoiceStatus, _pick(payload, "status", default="")) or InvoiceStatus.PENDING
    return Invoice(
        invoice_id=_ref_id(_pick(payload, "_id", "id", "invoiceId", "invoice_id", default="")),
        invoice_no=_text(_pick(payload, "invoiceNo", "invoice_no")),
        student_id=_ref_id(_pick(payload, "studentId", "student_id", default="")),
        total_amount=to_decimal(_pick(payload, "totalAmount", "total_amount")),
        paid_amount=to_decimal(_pick(payload, "paidAmount", "paid_amount")),
        status=status,
        invoice_date=coerce_datetime(_pick(payload, "invoiceDate", "invoice_date", "createdAt")),
        due_date=coerce_date(_pick(payload, "dueDate", "due_date")),
        payment_date=coerce_datetime(_pick(payload, "paymentDate", "payment_date")),
        discount=to_decimal(_pick(payload, "discount")),
    )


def installment_from_json(payload: Mapping[str, Any]) -> PaymentInstallment:
    return PaymentInstallment(
        transaction_no=_text(_pick(payload, "transactionNo", "transaction_no")),
        invoice_id=_ref_id(_pick(payload, "invoiceId", "invoice_id", default="")),
        amount=to_decimal(_pick(payload, "amount")),
        payment_method=_enum(PaymentMethod, _pick(payload, "paymentMethod", "payment_method", default="")),
        payment_date=coerce_datetime(_pick(payload, "paymentDate", "payment_date")),
        created_at=coerce_datetime(_pick(payload, "createdAt", "created_at")),
        collected_by_name=_text(_pick(payload, "collectedByName", "collected_by_name")),
        student_id=_ref_id(_pick(payload, "studentId", "student_id", default="")),
        receipt_no=_text(_pick(payload, "receiptNo", "receipt_no")),
        notes=_text(_pick(payload, "notes")),
    )


def invoices_from_json(items: Optional[list]) -> list[Invoice]:
    return [invoice_from_json(item) for item in (items or []) if isinstance(item, Mapping)]


def installments_from_json(items: Optional[list]) -> list[PaymentInstallment]:
    return [installment_from_json(item) for item in (items or []) if isinstance(item, Mapping)]
