from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from src.campus_ledger.campus_ledger.core.enums import InvoiceStatus, OverallFeeStatus, PaymentMethod, PaymentStatus
from src.campus_ledger.campus_ledger.core.exceptions import ImmutableRecordError, NotFoundError, ValidationError
from src.campus_ledger.campus_ledger.fees.model import Invoice, PaymentInstallment
from src.campus_ledger.campus_ledger.fees.service import FeeLedgerService, PaymentService, history_to_dict


def _invoice(invoice_id, total, paid, *, due, paid_on=None, status=InvoiceStatus.PENDING) -> Invoice:
    return Invoice(
        invoice_id=invoice_id,
        invoice_no=invoice_id.upper(),
        student_id="stu-001",
        total_amount=Decimal(total),
        paid_amount=Decimal(paid),
        status=status,
        invoice_date=datetime(2024, 1, 1, 9, 0),
        due_date=due,
        payment_date=paid_on,
    )


def _installment(txn, invoice_id, amount, when) -> PaymentInstallment:
    return PaymentInstallment(
        transaction_no=txn,
        invoice_id=invoice_id,
        student_id="stu-001",
        amount=Decimal(amount),
        payment_method=PaymentMethod.CASH,
        payment_date=when,
    )


@pytest.fixture
def seeded(invoices_repo, installments_repo):
    for inv in (
        _invoice("inv-001", "1000", "600", due=date(2024, 3, 31)),
        _invoice("inv-002", "500", "500", due=date(2024, 2, 28), paid_on=datetime(2024, 1, 20, 11, 30)),
    ):
        invoices_repo.by_id[inv.invoice_id] = inv
    installments_repo.items.extend(
        [
            _installment("TXN-20240105-0001", "inv-001", "200", datetime(2024, 1, 5, 10, 0)),
            _installment("TXN-20240120-0001", "inv-002", "500", datetime(2024, 1, 20, 11, 30)),
            _installment("TXN-20240203-0001", "inv-001", "400", datetime(2024, 2, 3, 15, 45)),
        ]
    )
    return invoices_repo, installments_repo


@pytest.fixture
def ledger(student_service, seeded) -> FeeLedgerService:
    invoices_repo, installments_repo = seeded
    return FeeLedgerService(student_service, invoices_repo, installments_repo)


@pytest.fixture
def payments(seeded) -> PaymentService:
    invoices_repo, installments_repo = seeded
    return PaymentService(invoices_repo, installments_repo)


def test_student_history_before_due_date(ledger):
    history = ledger.student_history("stu-001", today=date(2024, 3, 15))

    assert history.summary.total_fee == Decimal("1500")
    assert history.summary.total_paid == Decimal("1100")
    assert history.summary.pending_fee == Decimal("400")
    assert history.payment_percentage == Decimal("73.33")
    assert history.overall_status == OverallFeeStatus.PENDING
    assert (history.paid_on_time_count, history.overdue_count, history.pending_count) == (1, 0, 1)

    statuses = {d.invoice.invoice_id: d.payment_status for d in history.invoices}
    assert statuses == {"inv-001": PaymentStatus.PARTIAL, "inv-002": PaymentStatus.PAID_ON_TIME}

    assert [(g.month, g.total_amount) for g in history.monthly_breakdown] == [
        ("2024-01", Decimal("700")),
        ("2024-02", Decimal("400")),
    ]
    assert [e.running_total for e in history.timeline] == [Decimal("200"), Decimal("700"), Decimal("1100")]
    assert history.payment_count == 3
    assert history.last_payment_date == datetime(2024, 2, 3, 15, 45)


def test_student_history_after_due_date_is_overdue(ledger):
    history = ledger.student_history("stu-001", today=date(2024, 4, 5))

    assert history.overdue_amount == Decimal("400")
    assert history.overall_status == OverallFeeStatus.OVERDUE
    assert history.overdue_count == 1


def test_student_history_counts_orphaned_installments(ledger, installments_repo):
    installments_repo.items.append(_installment("TXN-20240301-0001", "inv-deleted", "50", datetime(2024, 3, 1)))

    history = ledger.student_history("stu-001", today=date(2024, 3, 15))

    assert history.orphaned_count == 1
    assert history.timeline[-1].installment.orphaned
    # Summary is computed from invoices only.
    assert history.summary.total_paid == Decimal("1100")


def test_student_history_unknown_student(ledger):
    with pytest.raises(NotFoundError):
        ledger.student_history("nobody")


def test_history_to_dict_is_json_friendly(ledger):
    body = history_to_dict(ledger.student_history("stu-001", today=date(2024, 3, 15)))

    assert body["summary"]["totalFee"] == 1500.0
    assert body["summary"]["paymentPercentage"] == "73.33"
    assert body["monthlyBreakdown"][0]["month"] == "2024-01"
    assert body["paymentInstallments"][-1]["runningTotal"] == 1100.0
    assert body["confirmation"]["lastPaymentDate"] == "2024-02-03T15:45:00"


def test_record_payment_appends_installment(payments, invoices_repo, installments_repo, fixed_now):
    result = payments.record_payment(invoice_id="inv-001", amount="150", payment_method="Cash", now=fixed_now)

    assert result.installment.transaction_no == "TXN-20240315-0001"
    assert result.installment.amount == Decimal("150")
    assert result.invoice.paid_amount == Decimal("750")
    assert result.invoice.status == InvoiceStatus.PARTIAL
    assert invoices_repo.by_id["inv-001"].paid_amount == Decimal("750")
    assert len(installments_repo.list_for_invoice("inv-001")) == 3


def test_record_payment_settles_invoice_then_rejects_more(payments, invoices_repo, fixed_now):
    result = payments.record_payment(invoice_id="inv-001", amount=400, payment_method="online", now=fixed_now)

    assert result.invoice.status == InvoiceStatus.PAID
    assert invoices_repo.by_id["inv-001"].status == InvoiceStatus.PAID

    with pytest.raises(ImmutableRecordError):
        payments.record_payment(invoice_id="inv-001", amount=1, payment_method="cash", now=fixed_now)


def test_sequence_numbers_increase_within_a_day(payments, fixed_now):
    first = payments.record_payment(invoice_id="inv-001", amount=100, payment_method="cash", now=fixed_now)
    second = payments.record_payment(invoice_id="inv-001", amount=100, payment_method="cash", now=fixed_now)

    assert first.installment.transaction_no == "TXN-20240315-0001"
    assert second.installment.transaction_no == "TXN-20240315-0002"


@pytest.mark.parametrize("amount", [0, -5, "abc", None])
def test_record_payment_rejects_non_positive_amount(payments, amount, fixed_now):
    with pytest.raises(ValidationError):
        payments.record_payment(invoice_id="inv-001", amount=amount, payment_method="cash", now=fixed_now)


def test_record_payment_rejects_overpayment(payments, invoices_repo, fixed_now):
    with pytest.raises(ValidationError):
        payments.record_payment(invoice_id="inv-001", amount="400.01", payment_method="cash", now=fixed_now)

    assert invoices_repo.payment_calls == 0


def test_record_payment_rejects_unknown_method(payments, fixed_now):
    with pytest.raises(ValidationError):
        payments.record_payment(invoice_id="inv-001", amount=10, payment_method="barter", now=fixed_now)


def test_record_payment_unknown_invoice(payments, fixed_now):
    with pytest.raises(NotFoundError):
        payments.record_payment(invoice_id="inv-404", amount=10, payment_method="cash", now=fixed_now)


def test_record_payment_books_opening_balance(invoices_repo, installments_repo, fixed_now):
    invoices_repo.by_id["legacy"] = _invoice("legacy", "1000", "300", due=date(2024, 6, 30))
    service = PaymentService(invoices_repo, installments_repo)

    result = service.record_payment(invoice_id="legacy", amount=100, payment_method="cash", now=fixed_now)

    ledger = installments_repo.list_for_invoice("legacy")
    assert [i.amount for i in ledger] == [Decimal("300"), Decimal("100")]
    assert ledger[0].notes == "Opening balance"
    assert result.installment.transaction_no == "TXN-20240315-0002"
    assert sum(i.amount for i in ledger) == invoices_repo.by_id["legacy"].paid_amount


def test_record_payment_refuses_inconsistent_invoice(invoices_repo, installments_repo, fixed_now):
    invoices_repo.by_id["bad"] = _invoice("bad", "100", "150", due=None)
    service = PaymentService(invoices_repo, installments_repo)

    with pytest.raises(ValidationError):
        service.record_payment(invoice_id="bad", amount=10, payment_method="cash", now=fixed_now)


class SnapshotInvoices:
    """Reads the invoices as they stood when created; writes go to the live store."""

    def __init__(self, store):
        self._store = store
        self._rows = dict(store.by_id)

    def get_by_id(self, invoice_id):
        return self._rows.get(invoice_id)

    def record_payment(self, **kwargs):
        return self._store.record_payment(**kwargs)


class SnapshotInstallments:
    def __init__(self, store):
        self._store = store
        self._items = list(store.items)

    def list_for_invoice(self, invoice_id):
        return [i for i in self._items if i.invoice_id == invoice_id]

    def count_for_day(self, day):
        return self._store.count_for_day(day)


def test_payment_based_on_stale_read_is_refused(payments, invoices_repo, installments_repo, fixed_now):
    stale = PaymentService(SnapshotInvoices(invoices_repo), SnapshotInstallments(installments_repo))
    payments.record_payment(invoice_id="inv-001", amount=100, payment_method="cash", now=fixed_now)

    with pytest.raises(ImmutableRecordError):
        stale.record_payment(invoice_id="inv-001", amount=100, payment_method="cash", now=fixed_now)

    ledger = installments_repo.list_for_invoice("inv-001")
    assert invoices_repo.by_id["inv-001"].paid_amount == Decimal("700")
    assert sum(i.amount for i in ledger) == Decimal("700")


def test_failed_ledger_append_leaves_invoice_unchanged(invoices_repo, installments_repo, fixed_now, monkeypatch):
    invoices_repo.by_id["legacy"] = _invoice("legacy", "1000", "300", due=date(2024, 6, 30))
    service = PaymentService(invoices_repo, installments_repo)
    real_add = installments_repo.add
    calls = []

    def add_then_fail(installment):
        calls.append(installment.transaction_no)
        if len(calls) == 2:
            raise RuntimeError("disk full")
        real_add(installment)

    monkeypatch.setattr(installments_repo, "add", add_then_fail)

    with pytest.raises(RuntimeError):
        service.record_payment(invoice_id="legacy", amount=100, payment_method="cash", now=fixed_now)

    assert invoices_repo.by_id["legacy"].paid_amount == Decimal("300")
    assert installments_repo.list_for_invoice("legacy") == []

    monkeypatch.setattr(installments_repo, "add", real_add)
    result = service.record_payment(invoice_id="legacy", amount=100, payment_method="cash", now=fixed_now)

    ledger = installments_repo.list_for_invoice("legacy")
    assert [i.amount for i in ledger] == [Decimal("300"), Decimal("100")]
    assert result.invoice.paid_amount == Decimal("400")


@pytest.mark.parametrize("amount", ["0.001", "0.004", "-0.001"])
def test_record_payment_rejects_amounts_below_one_cent(payments, invoices_repo, amount, fixed_now):
    with pytest.raises(ValidationError):
        payments.record_payment(invoice_id="inv-001", amount=amount, payment_method="cash", now=fixed_now)

    assert invoices_repo.payment_calls == 0


def test_record_payment_rounds_to_cents(payments, invoices_repo, installments_repo, fixed_now):
    result = payments.record_payment(invoice_id="inv-001", amount="150.005", payment_method="cash", now=fixed_now)

    assert result.installment.amount == Decimal("150.01")
    assert str(result.installment.amount) == "150.01"
    assert invoices_repo.by_id["inv-001"].paid_amount == Decimal("750.01")


def test_rounded_amount_is_checked_against_pending(payments, invoices_repo, fixed_now):
    result = payments.record_payment(invoice_id="inv-001", amount="400.004", payment_method="cash", now=fixed_now)

    assert result.invoice.status == InvoiceStatus.PAID
    assert invoices_repo.by_id["inv-001"].paid_amount == Decimal("1000")
