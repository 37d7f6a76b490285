from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Optional, Sequence

from ..common.money import to_decimal
from ..core.enums import InvoiceStatus, PaymentMethod
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Invoice, PaymentInstallment
from .repository import InstallmentRepository, InvoiceRepository

_INVOICE_COLUMNS = (
    "invoice_id, invoice_no, student_id, total_amount, paid_amount, discount, "
    "status, invoice_date, due_date, payment_date"
)
_INSTALLMENT_COLUMNS = (
    "transaction_no, invoice_id, student_id, amount, payment_method, payment_date, "
    "created_at, collected_by_name, receipt_no, notes"
)


def _to_invoice(r: Dict[str, Any]) -> Invoice:
    try:
        status = InvoiceStatus(r["status"])
    except ValueError:
        status = InvoiceStatus.PENDING
    return Invoice(
        invoice_id=str(r["invoice_id"]),
        invoice_no=r["invoice_no"],
        student_id=str(r["student_id"]),
        total_amount=to_decimal(r.get("total_amount")),
        paid_amount=to_decimal(r.get("paid_amount")),
        discount=to_decimal(r.get("discount")),
        status=status,
        invoice_date=r.get("invoice_date"),
        due_date=r.get("due_date"),
        payment_date=r.get("payment_date"),
    )


def _payment_method(value: Any) -> Optional[PaymentMethod]:
    try:
        return PaymentMethod(value) if value else None
    except ValueError:
        return None


def _to_installment(r: Dict[str, Any]) -> PaymentInstallment:
    return PaymentInstallment(
        transaction_no=r["transaction_no"],
        invoice_id=str(r["invoice_id"]),
        student_id=str(r["student_id"]),
        amount=to_decimal(r.get("amount")),
        payment_method=_payment_method(r.get("payment_method")),
        payment_date=r.get("payment_date"),
        created_at=r.get("created_at"),
        collected_by_name=r.get("collected_by_name") or "",
        receipt_no=r.get("receipt_no") or "",
        notes=r.get("notes") or "",
    )


def _insert_installment(cur, installment: PaymentInstallment) -> None:
    cur.execute(
        """
        INSERT INTO payment_installments(
            transaction_no, invoice_id, student_id, amount, payment_method,
            payment_date, created_at, collected_by_name, receipt_no, notes
        )
        VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
        """,
        (
            installment.transaction_no,
            installment.invoice_id,
            installment.student_id,
            installment.amount,
            installment.payment_method.value if installment.payment_method else None,
            installment.payment_date,
            installment.created_at,
            installment.collected_by_name,
            installment.receipt_no,
            installment.notes,
        ),
    )


class MySQLInvoiceRepository(InvoiceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_student(self, student_id: str) -> Sequence[Invoice]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_INVOICE_COLUMNS}
                FROM invoices
                WHERE student_id=%s
                ORDER BY invoice_date DESC
                """,
                (student_id,),
            )
            return [_to_invoice(r) for r in fetchall(cur)]

    def get_by_id(self, invoice_id: str) -> Optional[Invoice]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_INVOICE_COLUMNS} FROM invoices WHERE invoice_id=%s", (invoice_id,))
            r = fetchone(cur)
            return _to_invoice(r) if r else None

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE invoices
                SET paid_amount=%s, status=%s, payment_date=%s
                WHERE invoice_id=%s AND status <> %s AND paid_amount=%s
                """,
                (
                    paid_amount,
                    status.value,
                    payment_date,
                    invoice_id,
                    InvoiceStatus.PAID.value,
                    expected_paid_amount,
                ),
            )
            if cur.rowcount == 0:
                return False
            for installment in installments:
                _insert_installment(cur, installment)
            return True


class MySQLInstallmentRepository(InstallmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_student(self, student_id: str) -> Sequence[PaymentInstallment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_INSTALLMENT_COLUMNS}
                FROM payment_installments
                WHERE student_id=%s
                """,
                (student_id,),
            )
            return [_to_installment(r) for r in fetchall(cur)]

    def list_for_invoice(self, invoice_id: str) -> Sequence[PaymentInstallment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_INSTALLMENT_COLUMNS}
                FROM payment_installments
                WHERE invoice_id=%s
                """,
                (invoice_id,),
            )
            return [_to_installment(r) for r in fetchall(cur)]

    def count_for_day(self, day: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM payment_installments WHERE DATE(created_at)=%s", (day,))
            r = fetchone(cur)
            return int(r["n"]) if r else 0
