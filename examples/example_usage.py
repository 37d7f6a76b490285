"""Print a student's fee history straight from the service layer (no Flask).

Usage: python -m examples.example_usage stu-001
"""

import importlib
import sys

from config import get_settings_module

from src.campus_ledger.campus_ledger.container import LedgerSettings, build_container


def main():
    student_id = sys.argv[1] if len(sys.argv) > 1 else "stu-001"

    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, settings=LedgerSettings.from_module(settings))
    history = container.fee_ledger_service.student_history(student_id)

    s = history.summary
    print(f"{history.student.full_name}: paid {s.total_paid} of {s.total_fee} (pending {s.pending_fee})")
    for group in history.monthly_breakdown:
        print(f"  {group.month or 'undated'}: {group.total_amount} in {group.count} payment(s)")
    for entry in history.timeline:
        i = entry.installment
        print(f"  {i.transaction_no} {i.amount} -> {entry.running_total}")


if __name__ == "__main__":
    main()
