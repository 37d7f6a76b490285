from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..common.datetime_utils import now_local
from ..common.money import percentage
from ..common.validators import require_non_empty, require_positive_amount
from ..core.constants import TRANSACTION_PREFIX
from ..core.enums import InvoiceStatus, OverallFeeStatus, PaymentMethod, PaymentStatus
from ..core.exceptions import ImmutableRecordError, NotFoundError, ValidationError
from ..students.model import Student
from ..students.service import StudentService
from .ledger import (
    chronological,
    compute_monthly_breakdown,
    compute_summary,
    compute_timeline,
    flag_orphans,
    reconcile_invoices,
)
from .model import FeeSummary, Invoice, MonthGroup, PaymentInstallment, TimelineEntry
from .repository import InstallmentReader, InstallmentRepository, InvoiceReader, InvoiceRepository
from .status import derive_invoice_status, derive_payment_status, is_overdue

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InvoiceDetail:
    invoice: Invoice
    payment_status: PaymentStatus
    is_overdue: bool
    transactions: tuple[PaymentInstallment, ...]


@dataclass(frozen=True)
class StudentFeeHistory:
    """Everything the student fee history page shows, computed in one pass."""

    student: Student
    summary: FeeSummary
    invoices: list[InvoiceDetail]
    monthly_breakdown: list[MonthGroup]
    timeline: list[TimelineEntry]
    overdue_amount: Decimal
    payment_percentage: Decimal
    overall_status: OverallFeeStatus
    paid_on_time_count: int
    overdue_count: int
    pending_count: int
    orphaned_count: int

    @property
    def payment_count(self) -> int:
        return len(self.timeline)

    @property
    def last_payment_date(self) -> Optional[datetime]:
        return self.timeline[-1].installment.effective_date if self.timeline else None


@dataclass(frozen=True)
class PaymentResult:
    invoice: Invoice
    installment: PaymentInstallment


class FeeLedgerService:
    def __init__(self, students: StudentService, invoices: InvoiceReader, installments: InstallmentReader):
        self._students = students
        self._invoices = invoices
        self._installments = installments

    def student_history(self, student_id: str, *, today: Optional[date] = None) -> StudentFeeHistory:
        today = today or now_local().date()
        student = self._students.get(student_id)

        raw_invoices = list(self._invoices.list_for_student(student.student_id))
        installments = flag_orphans(list(self._installments.list_for_student(student.student_id)), raw_invoices)
        invoices = reconcile_invoices(raw_invoices, installments, today=today)

        summary = compute_summary(invoices)

        by_invoice: dict[str, list[PaymentInstallment]] = {}
        for installment in chronological(installments):
            by_invoice.setdefault(installment.invoice_id, []).append(installment)

        details: list[InvoiceDetail] = []
        overdue_amount = Decimal("0")
        paid_on_time = overdue = pending = 0

        ordered = sorted(invoices, key=lambda i: (i.invoice_date or datetime.min, i.invoice_no), reverse=True)
        for invoice in ordered:
            payment_status = derive_payment_status(invoice, today=today)
            overdue_flag = is_overdue(invoice, today=today)

            if payment_status in (PaymentStatus.PAID_ON_TIME, PaymentStatus.PAID):
                paid_on_time += 1
            elif payment_status in (PaymentStatus.PAID_LATE, PaymentStatus.OVERDUE):
                overdue += 1
            else:
                pending += 1

            if overdue_flag:
                overdue_amount += invoice.pending_amount

            details.append(
                InvoiceDetail(
                    invoice=invoice,
                    payment_status=payment_status,
                    is_overdue=overdue_flag,
                    transactions=tuple(by_invoice.get(invoice.invoice_id, ())),
                )
            )

        if summary.pending_fee > 0:
            overall = OverallFeeStatus.OVERDUE if overdue_amount > 0 else OverallFeeStatus.PENDING
        else:
            overall = OverallFeeStatus.COMPLETE

        return StudentFeeHistory(
            student=student,
            summary=summary,
            invoices=details,
            monthly_breakdown=compute_monthly_breakdown(installments),
            timeline=compute_timeline(installments),
            overdue_amount=overdue_amount,
            payment_percentage=percentage(summary.total_paid, summary.total_fee),
            overall_status=overall,
            paid_on_time_count=paid_on_time,
            overdue_count=overdue,
            pending_count=pending,
            orphaned_count=sum(1 for i in installments if i.orphaned),
        )


class PaymentService:
    """Appends installments to the ledger and keeps the invoice in step."""

    def __init__(self, invoices: InvoiceRepository, installments: InstallmentRepository):
        self._invoices = invoices
        self._installments = installments

    @staticmethod
    def _parse_method(value) -> PaymentMethod:
        if isinstance(value, PaymentMethod):
            return value
        try:
            return PaymentMethod(require_non_empty(value, "Payment method").lower())
        except ValueError:
            allowed = ", ".join(m.value for m in PaymentMethod)
            raise ValidationError(f"Payment method must be one of: {allowed}")

    def _transaction_numbers(self, day: date, count: int) -> list[str]:
        start = self._installments.count_for_day(day) + 1
        return [f"{TRANSACTION_PREFIX}-{day.strftime('%Y%m%d')}-{seq:04d}" for seq in range(start, start + count)]

    def record_payment(
        self,
        *,
        invoice_id: str,
        amount,
        payment_method,
        payment_date: Optional[datetime] = None,
        collected_by_name: str = "",
        notes: str = "",
        receipt_no: str = "",
        now: Optional[datetime] = None,
    ) -> PaymentResult:
        now = now or now_local()
        amount = require_positive_amount(amount, "Payment amount")
        method = self._parse_method(payment_method)

        stored = self._invoices.get_by_id(str(invoice_id))
        if not stored:
            raise NotFoundError(f"Invoice {invoice_id} not found")

        ledger = list(self._installments.list_for_invoice(stored.invoice_id))
        [current] = reconcile_invoices([stored], ledger, today=now.date())

        if current.status == InvoiceStatus.PAID:
            raise ImmutableRecordError(f"Invoice {stored.invoice_no} is already paid")
        if current.status == InvoiceStatus.DATA_INCONSISTENT:
            raise ValidationError(f"Invoice {stored.invoice_no} has inconsistent amounts; correct it before collecting")
        if amount > current.pending_amount:
            raise ValidationError(f"Payment exceeds pending amount ({current.pending_amount})")

        new_paid = current.paid_amount + amount
        status = derive_invoice_status(
            total_amount=current.total_amount,
            paid_amount=new_paid,
            due_date=current.due_date,
            today=now.date(),
        )
        paid_on = payment_date or now

        needs_opening = not ledger and current.paid_amount > 0
        numbers = iter(self._transaction_numbers(now.date(), 2 if needs_opening else 1))

        entries: list[PaymentInstallment] = []
        if needs_opening:
            # Amount paid before the ledger existed; book it so installments sum to paid_amount.
            entries.append(
                PaymentInstallment(
                    transaction_no=next(numbers),
                    invoice_id=current.invoice_id,
                    student_id=current.student_id,
                    amount=current.paid_amount,
                    payment_date=stored.payment_date or stored.invoice_date,
                    created_at=now,
                    notes="Opening balance",
                )
            )
        entries.append(
            PaymentInstallment(
                transaction_no=next(numbers),
                invoice_id=current.invoice_id,
                student_id=current.student_id,
                amount=amount,
                payment_method=method,
                payment_date=paid_on,
                created_at=now,
                collected_by_name=(collected_by_name or "").strip(),
                receipt_no=(receipt_no or "").strip(),
                notes=(notes or "").strip(),
            )
        )

        if not self._invoices.record_payment(
            invoice_id=current.invoice_id,
            expected_paid_amount=stored.paid_amount,
            paid_amount=new_paid,
            status=status,
            payment_date=paid_on,
            installments=entries,
        ):
            raise ImmutableRecordError(f"Invoice {stored.invoice_no} changed while recording the payment")

        installment = entries[-1]
        logger.info(
            "Recorded %s on invoice %s via %s (paid %s of %s, status %s)",
            amount,
            stored.invoice_no,
            method.value,
            new_paid,
            current.total_amount,
            status.value,
        )

        invoice = replace(current, paid_amount=new_paid, status=status, payment_date=paid_on)
        return PaymentResult(invoice=invoice, installment=installment)


def _amount(value: Decimal) -> float:
    return float(value)


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


def installment_to_dict(i: PaymentInstallment) -> dict:
    return {
        "transactionNo": i.transaction_no,
        "invoiceId": i.invoice_id,
        "amount": _amount(i.amount),
        "paymentMethod": i.payment_method.value if i.payment_method else None,
        "paymentDate": _iso(i.effective_date),
        "collectedByName": i.collected_by_name,
        "receiptNo": i.receipt_no,
        "notes": i.notes,
        "orphaned": i.orphaned,
    }


def invoice_to_dict(invoice: Invoice) -> dict:
    return {
        "invoiceId": invoice.invoice_id,
        "invoiceNo": invoice.invoice_no,
        "invoiceDate": _iso(invoice.invoice_date),
        "dueDate": _iso(invoice.due_date),
        "paymentDate": _iso(invoice.payment_date),
        "totalAmount": _amount(invoice.total_amount),
        "paidAmount": _amount(invoice.paid_amount),
        "pendingAmount": _amount(invoice.pending_amount),
        "discount": _amount(invoice.discount),
        "status": invoice.status.value,
    }


def history_to_dict(history: StudentFeeHistory) -> dict:
    s = history.student
    return {
        "student": {
            "id": s.student_id,
            "fullName": s.full_name,
            "fatherName": s.father_name,
            "srNo": s.serial_no,
            "admissionNo": s.admission_no,
            "rollNo": s.roll_no,
            "courseId": s.course_id,
        },
        "summary": {
            "totalFee": _amount(history.summary.total_fee),
            "totalPaid": _amount(history.summary.total_paid),
            "pendingFee": _amount(history.summary.pending_fee),
            "overdueAmount": _amount(history.overdue_amount),
            "paymentPercentage": str(history.payment_percentage),
            "overallStatus": history.overall_status.value,
        },
        "paymentStatus": {
            "paidOnTime": history.paid_on_time_count,
            "overdue": history.overdue_count,
            "pending": history.pending_count,
            "totalInvoices": len(history.invoices),
            "orphanedInstallments": history.orphaned_count,
        },
        "invoices": [
            {
                **invoice_to_dict(d.invoice),
                "paymentStatus": d.payment_status.value,
                "isOverdue": d.is_overdue,
                "transactions": [installment_to_dict(t) for t in d.transactions],
            }
            for d in history.invoices
        ],
        "monthlyBreakdown": [
            {
                "month": g.month,
                "totalAmount": _amount(g.total_amount),
                "count": g.count,
                "transactions": [installment_to_dict(t) for t in g.transactions],
            }
            for g in history.monthly_breakdown
        ],
        "paymentInstallments": [
            {**installment_to_dict(e.installment), "runningTotal": _amount(e.running_total)}
            for e in history.timeline
        ],
        "confirmation": {
            "lastPaymentDate": _iso(history.last_payment_date),
            "paymentCount": history.payment_count,
        },
    }
