from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .common.validators import require_hour
from .core.constants import DEFAULT_DATA_SERVICE_TIMEOUT, DEFAULT_LATE_THRESHOLD_HOUR
from .database.connection import DBConfig, DatabaseConnection
from .fees.http_fee_repository import DataServiceClient, HttpInstallmentReader, HttpInvoiceReader
from .fees.mysql_fee_repository import MySQLInstallmentRepository, MySQLInvoiceRepository
from .fees.service import FeeLedgerService, PaymentService
from .reports.service import AttendanceReportService
from .students.mysql_student_repository import MySQLStudentRepository
from .students.service import StudentService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerSettings:
    """Settings the services need, read once from the settings module."""

    late_threshold_hour: int = DEFAULT_LATE_THRESHOLD_HOUR
    data_service_url: str = ""
    data_service_timeout: float = DEFAULT_DATA_SERVICE_TIMEOUT

    @classmethod
    def from_module(cls, settings) -> "LedgerSettings":
        return cls(
            late_threshold_hour=require_hour(
                getattr(settings, "LATE_THRESHOLD_HOUR", DEFAULT_LATE_THRESHOLD_HOUR), "LATE_THRESHOLD_HOUR"
            ),
            data_service_url=str(getattr(settings, "DATA_SERVICE_URL", "") or ""),
            data_service_timeout=float(getattr(settings, "DATA_SERVICE_TIMEOUT", DEFAULT_DATA_SERVICE_TIMEOUT)),
        )


@dataclass(frozen=True)
class Container:
    settings: LedgerSettings

    student_service: StudentService
    fee_ledger_service: FeeLedgerService
    # None when invoices live in the remote data service.
    payment_service: Optional[PaymentService]
    attendance_service: AttendanceService
    attendance_report_service: AttendanceReportService

    conn: Optional[DatabaseConnection] = None


def build_container(*, db_config: dict, settings: Optional[LedgerSettings] = None) -> Container:
    settings = settings or LedgerSettings()
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    students_repo = MySQLStudentRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    student_service = StudentService(students_repo)

    if settings.data_service_url:
        logger.info("Reading fees from data service at %s", settings.data_service_url)
        client = DataServiceClient(settings.data_service_url, timeout=settings.data_service_timeout)
        fee_ledger_service = FeeLedgerService(student_service, HttpInvoiceReader(client), HttpInstallmentReader(client))
        payment_service = None
    else:
        invoices_repo = MySQLInvoiceRepository(conn)
        installments_repo = MySQLInstallmentRepository(conn)
        fee_ledger_service = FeeLedgerService(student_service, invoices_repo, installments_repo)
        payment_service = PaymentService(invoices_repo, installments_repo)

    attendance_service = AttendanceService(
        attendance_repo,
        student_service,
        strategy_factory=AttendanceStrategyFactory(),
        late_threshold_hour=settings.late_threshold_hour,
    )

    return Container(
        settings=settings,
        student_service=student_service,
        fee_ledger_service=fee_ledger_service,
        payment_service=payment_service,
        attendance_service=attendance_service,
        attendance_report_service=AttendanceReportService(attendance_repo),
        conn=conn,
    )
