from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import InvoiceStatus
from .model import Invoice, PaymentInstallment


class InvoiceReader(Protocol):
    def list_for_student(self, student_id: str) -> Sequence[Invoice]:
        raise NotImplementedError


class InstallmentReader(Protocol):
    def list_for_student(self, student_id: str) -> Sequence[PaymentInstallment]:
        raise NotImplementedError


class InvoiceRepository(InvoiceReader, Protocol):
    def get_by_id(self, invoice_id: str) -> Optional[Invoice]:
        raise NotImplementedError

    def record_payment(
        self,
        *,
        invoice_id: str,
        expected_paid_amount: Decimal,
        paid_amount: Decimal,
        status: InvoiceStatus,
        payment_date: datetime,
        installments: Sequence[PaymentInstallment],
    ) -> bool:
        """Move the invoice from ``expected_paid_amount`` to ``paid_amount`` and append ``installments``.

        The invoice update and the ledger entries commit together or not at
        all. Returns False without writing when the invoice is already paid or
        its stored paid amount is no longer ``expected_paid_amount``.
        """

        raise NotImplementedError


class InstallmentRepository(InstallmentReader, Protocol):
    def list_for_invoice(self, invoice_id: str) -> Sequence[PaymentInstallment]:
        raise NotImplementedError

    def count_for_day(self, day: date) -> int:
        """Number of installments created on ``day`` (for transaction numbers)."""

        raise NotImplementedError
