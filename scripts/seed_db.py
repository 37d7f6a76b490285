from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.campus_ledger.campus_ledger.database.bootstrap import apply_seed_sql, count_rows

SEEDED_TABLES = ("students", "invoices", "payment_installments", "attendance_records")


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
    counts = count_rows(db_config, SEEDED_TABLES)

    target = f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
    print(f"OK: Seeded {target}")
    for table in SEEDED_TABLES:
        print(f"  {table}: {counts[table]} rows")


if __name__ == "__main__":
    main()
