"""Fee ledger aggregation.

Pure functions over a single student's invoices and payment installments.
They never perform I/O and never raise for bad data: corrupt amounts are
clamped and flagged, dangling invoice references are flagged ``orphaned``,
and the rest of the ledger is still produced.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from ..common.datetime_utils import month_key, now_local
from ..core.enums import InvoiceStatus
from .model import FeeSummary, Invoice, MonthGroup, PaymentInstallment, TimelineEntry
from .status import derive_invoice_status

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def _clamp(invoice: Invoice) -> tuple[Decimal, Decimal, bool]:
    """Return (total, paid, was_clamped) with 0 <= paid <= total."""

    total = max(invoice.total_amount, ZERO)
    paid = min(max(invoice.paid_amount, ZERO), total)
    clamped = total != invoice.total_amount or paid != invoice.paid_amount
    return total, paid, clamped


def _sort_key(installment: PaymentInstallment) -> tuple[datetime, str]:
    return (installment.effective_date or datetime.min, installment.transaction_no)


def chronological(installments: Iterable[PaymentInstallment]) -> list[PaymentInstallment]:
    """Oldest first by payment date (falling back to created_at), ties by transaction no."""
    return sorted(installments, key=_sort_key)


def compute_summary(invoices: Sequence[Invoice]) -> FeeSummary:
    """Totals over the invoices, each clamped to 0 <= paid <= total first.

    Clamping is only logged here; ``reconcile_invoices`` is where an invoice
    with out-of-range amounts gets its ``data-inconsistent`` status.
    """

    total_fee = ZERO
    total_paid = ZERO

    for invoice in invoices:
        total, paid, clamped = _clamp(invoice)
        if clamped:
            logger.warning(
                "Invoice %s has paid=%s total=%s; clamped to paid=%s total=%s",
                invoice.invoice_no or invoice.invoice_id,
                invoice.paid_amount,
                invoice.total_amount,
                paid,
                total,
            )
        total_fee += total
        total_paid += paid

    return FeeSummary(total_fee=total_fee, total_paid=total_paid, pending_fee=total_fee - total_paid)


def reconcile_invoices(
    invoices: Sequence[Invoice],
    installments: Optional[Sequence[PaymentInstallment]] = None,
    *,
    today: Optional[date] = None,
) -> list[Invoice]:
    """Recompute paid amount and status of every invoice.

    When installments are given, an invoice that has ledger entries gets its
    ``paid_amount`` recomputed as the sum of those entries. Amounts outside
    ``[0, total_amount]`` are clamped and the invoice is marked
    ``data-inconsistent``; otherwise the status is derived from the pending
    amount and due date. Any stored status or pending amount is ignored.
    """

    today = today or now_local().date()

    paid_by_invoice: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for installment in installments or ():
        paid_by_invoice[installment.invoice_id] += installment.amount

    out: list[Invoice] = []
    for invoice in invoices:
        if invoice.invoice_id in paid_by_invoice:
            ledger_paid = paid_by_invoice[invoice.invoice_id]
            if ledger_paid != invoice.paid_amount:
                logger.warning(
                    "Invoice %s paid_amount=%s disagrees with its installments (%s); using installments",
                    invoice.invoice_no or invoice.invoice_id,
                    invoice.paid_amount,
                    ledger_paid,
                )
            invoice = replace(invoice, paid_amount=ledger_paid)

        total, paid, clamped = _clamp(invoice)
        if clamped:
            status = InvoiceStatus.DATA_INCONSISTENT
        else:
            status = derive_invoice_status(
                total_amount=total,
                paid_amount=paid,
                due_date=invoice.due_date,
                today=today,
            )
        out.append(replace(invoice, total_amount=total, paid_amount=paid, status=status))
    return out


def flag_orphans(
    installments: Sequence[PaymentInstallment],
    invoices: Sequence[Invoice],
) -> list[PaymentInstallment]:
    known = {invoice.invoice_id for invoice in invoices}
    out: list[PaymentInstallment] = []
    for installment in installments:
        orphaned = installment.invoice_id not in known
        if orphaned:
            logger.warning(
                "Installment %s references unknown invoice %r",
                installment.transaction_no,
                installment.invoice_id,
            )
        out.append(replace(installment, orphaned=orphaned) if orphaned != installment.orphaned else installment)
    return out


def compute_monthly_breakdown(installments: Sequence[PaymentInstallment]) -> list[MonthGroup]:
    groups: dict[str, list[PaymentInstallment]] = defaultdict(list)
    for installment in chronological(installments):
        groups[month_key(installment.effective_date)].append(installment)

    return [
        MonthGroup(
            month=key,
            total_amount=sum((i.amount for i in groups[key]), ZERO),
            transactions=tuple(groups[key]),
        )
        for key in sorted(groups)
    ]


def compute_timeline(installments: Sequence[PaymentInstallment]) -> list[TimelineEntry]:
    running = ZERO
    timeline: list[TimelineEntry] = []
    for installment in chronological(installments):
        running += installment.amount
        timeline.append(TimelineEntry(installment=installment, running_total=running))
    return timeline
