"""Single place where invoice and payment statuses are decided.

Badges, filters and exports all read these values instead of re-deriving them.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from ..core.enums import InvoiceStatus, PaymentStatus
from .model import Invoice


def _past_due(due_date: Optional[date], today: date) -> bool:
    return due_date is not None and due_date < today


def derive_invoice_status(
    *,
    total_amount: Decimal,
    paid_amount: Decimal,
    due_date: Optional[date],
    today: date,
) -> InvoiceStatus:
    pending = total_amount - paid_amount
    if pending <= 0:
        return InvoiceStatus.PAID
    if _past_due(due_date, today):
        return InvoiceStatus.OVERDUE
    if paid_amount > 0:
        return InvoiceStatus.PARTIAL
    return InvoiceStatus.PENDING


def is_overdue(invoice: Invoice, *, today: date) -> bool:
    return invoice.pending_amount > 0 and _past_due(invoice.due_date, today)


def derive_payment_status(invoice: Invoice, *, today: date) -> PaymentStatus:
    if invoice.pending_amount <= 0:
        if invoice.due_date and invoice.payment_date:
            if invoice.payment_date.date() <= invoice.due_date:
                return PaymentStatus.PAID_ON_TIME
            return PaymentStatus.PAID_LATE
        return PaymentStatus.PAID

    if is_overdue(invoice, today=today):
        return PaymentStatus.OVERDUE
    if invoice.paid_amount > 0:
        return PaymentStatus.PARTIAL
    return PaymentStatus.PENDING
