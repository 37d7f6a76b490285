from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Optional

import pytest

from src.campus_ledger.campus_ledger.attendance.model import AttendanceKey, AttendanceRecord
from src.campus_ledger.campus_ledger.core.enums import MANUAL_STATUSES, AttendanceType, InvoiceStatus
from src.campus_ledger.campus_ledger.fees.model import Invoice, PaymentInstallment
from src.campus_ledger.campus_ledger.students.model import Student
from src.campus_ledger.campus_ledger.students.service import StudentService


class InMemoryStudents:
    def __init__(self, students=()):
        self.by_id: dict[str, Student] = {s.student_id: s for s in students}

    def add(self, student: Student) -> Student:
        self.by_id[student.student_id] = student
        return student

    def get_by_id(self, student_id: str) -> Optional[Student]:
        return self.by_id.get(student_id)

    def find_by_card(self, card_value: str) -> Optional[Student]:
        for s in self.by_id.values():
            if card_value in (s.card_code, s.admission_no, s.serial_no, s.roll_no, s.student_id):
                return s
        return None


class InMemoryInvoices:
    """Invoice rows plus the ledger they commit to, like the invoices/payment_installments tables."""

    def __init__(self, invoices=(), *, ledger: Optional["InMemoryInstallments"] = None):
        self.by_id: dict[str, Invoice] = {i.invoice_id: i for i in invoices}
        self.ledger = ledger if ledger is not None else InMemoryInstallments()
        self.payment_calls = 0

    def list_for_student(self, student_id: str):
        return [i for i in self.by_id.values() if i.student_id == student_id]

    def get_by_id(self, invoice_id: str) -> Optional[Invoice]:
        return self.by_id.get(invoice_id)

    def record_payment(
        self, *, invoice_id, expected_paid_amount, paid_amount, status, payment_date, installments
    ) -> bool:
        self.payment_calls += 1
        current = self.by_id.get(invoice_id)
        if current is None or current.status == InvoiceStatus.PAID or current.paid_amount != expected_paid_amount:
            return False

        before = list(self.ledger.items)
        try:
            for installment in installments:
                self.ledger.add(installment)
        except Exception:
            self.ledger.items[:] = before
            raise
        self.by_id[invoice_id] = replace(current, paid_amount=paid_amount, status=status, payment_date=payment_date)
        return True


class InMemoryInstallments:
    def __init__(self, installments=()):
        self.items: list[PaymentInstallment] = list(installments)

    def list_for_student(self, student_id: str):
        return [i for i in self.items if i.student_id == student_id]

    def list_for_invoice(self, invoice_id: str):
        return [i for i in self.items if i.invoice_id == invoice_id]

    def count_for_day(self, day: date) -> int:
        return sum(1 for i in self.items if i.created_at and i.created_at.date() == day)

    def add(self, installment: PaymentInstallment) -> None:
        if any(i.transaction_no == installment.transaction_no for i in self.items):
            raise AssertionError(f"duplicate transaction_no {installment.transaction_no}")
        self.items.append(installment)


class InMemoryAttendance:
    """Keyed store: one row per natural key, like the unique index in MySQL."""

    def __init__(self):
        self.by_key: dict[tuple[str, str, date], AttendanceRecord] = {}
        self._id = 0
        self.report_rows: list = []
        self.last_report_args: Optional[dict] = None

    @staticmethod
    def _k(key: AttendanceKey):
        return (key.student_id, key.course_key, key.work_date)

    def get_by_key(self, key: AttendanceKey) -> Optional[AttendanceRecord]:
        return self.by_key.get(self._k(key))

    def upsert(self, record: AttendanceRecord) -> AttendanceRecord:
        k = self._k(record.key)
        existing = self.by_key.get(k)
        if existing is None:
            self._id += 1
            stored = replace(record, attendance_id=self._id)
        elif record.attendance_type == AttendanceType.DIGITAL and existing.status in MANUAL_STATUSES:
            stored = existing
        else:
            stored = replace(record, attendance_id=existing.attendance_id)
        self.by_key[k] = stored
        return stored

    def list_report_rows(self, *, start_date, end_date, student_id=None, course_id=None, attendance_type=None):
        self.last_report_args = {
            "start_date": start_date,
            "end_date": end_date,
            "student_id": student_id,
            "course_id": course_id,
            "attendance_type": attendance_type,
        }
        return self.report_rows


class FakeCursor:
    def __init__(self, conn: "FakeConnection"):
        self._conn = conn
        self.rowcount = 0

    def execute(self, sql: str, params=()):
        statement = " ".join(sql.split())
        self._conn.statements.append((statement, tuple(params)))
        if self._conn.fail_on and statement.startswith(self._conn.fail_on):
            raise RuntimeError(f"{self._conn.fail_on} failed")
        self.rowcount = self._conn.rowcount

    def fetchone(self):
        return self._conn.rows.pop(0) if self._conn.rows else None

    def fetchall(self):
        rows, self._conn.rows = self._conn.rows, []
        return rows

    def close(self):
        pass


class FakeConnection:
    """Records statements and commit/rollback, standing in for a mysql.connector connection."""

    def __init__(self, *, rowcount: int = 1, rows=(), fail_on: Optional[str] = None):
        self.statements: list[tuple[str, tuple]] = []
        self.rowcount = rowcount
        self.rows = list(rows)
        self.fail_on = fail_on
        self.commits = 0
        self.rollbacks = 0

    def cursor(self, dictionary: bool = False):
        return FakeCursor(self)

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1

    def close(self):
        pass


class FakeConnFactory:
    def __init__(self, conn: FakeConnection):
        self.conn = conn
        self.connects = 0

    def connect(self) -> FakeConnection:
        self.connects += 1
        return self.conn


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 3, 15, 8, 30, 0)


@pytest.fixture
def student() -> Student:
    return Student(
        student_id="stu-001",
        serial_no="SR-0001",
        admission_no="ADM-2024-001",
        roll_no="R-01",
        full_name="Ayesha Khan",
        father_name="Imran Khan",
        course_id="crs-web",
        card_code="CARD-0001",
    )


@pytest.fixture
def students_repo(student) -> InMemoryStudents:
    return InMemoryStudents([student])


@pytest.fixture
def student_service(students_repo) -> StudentService:
    return StudentService(students_repo)


@pytest.fixture
def invoices_repo(installments_repo) -> InMemoryInvoices:
    return InMemoryInvoices(ledger=installments_repo)


@pytest.fixture
def installments_repo() -> InMemoryInstallments:
    return InMemoryInstallments()


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def fake_conn() -> FakeConnection:
    return FakeConnection()


@pytest.fixture
def conn_factory(fake_conn) -> FakeConnFactory:
    return FakeConnFactory(fake_conn)
