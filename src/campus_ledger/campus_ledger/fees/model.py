from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import InvoiceStatus, PaymentMethod


@dataclass(frozen=True)
class Invoice:
    """Domain entity: one billing document for a student.

    ``pending_amount`` is always derived from the two stored amounts.
    """

    invoice_id: str
    invoice_no: str
    student_id: str
    total_amount: Decimal
    paid_amount: Decimal
    status: InvoiceStatus = InvoiceStatus.PENDING
    invoice_date: Optional[datetime] = None
    due_date: Optional[date] = None
    payment_date: Optional[datetime] = None
    discount: Decimal = Decimal("0")

    @property
    def pending_amount(self) -> Decimal:
        return self.total_amount - self.paid_amount


@dataclass(frozen=True)
class PaymentInstallment:
    """Append-only ledger entry: one payment against an invoice."""

    transaction_no: str
    invoice_id: str
    amount: Decimal
    payment_method: Optional[PaymentMethod] = None
    payment_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    collected_by_name: str = ""
    student_id: str = ""
    receipt_no: str = ""
    notes: str = ""
    orphaned: bool = False

    @property
    def effective_date(self) -> Optional[datetime]:
        return self.payment_date or self.created_at


@dataclass(frozen=True)
class FeeSummary:
    total_fee: Decimal
    total_paid: Decimal
    pending_fee: Decimal


@dataclass(frozen=True)
class MonthGroup:
    month: str
    total_amount: Decimal
    transactions: tuple[PaymentInstallment, ...]

    @property
    def count(self) -> int:
        return len(self.transactions)


@dataclass(frozen=True)
class TimelineEntry:
    installment: PaymentInstallment
    running_total: Decimal
