"""Settings shared by every environment; the environment modules import from here."""

import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "campus_ledger"),
}

# Scans at or before this hour (0-23) are "present", later ones "late".
LATE_THRESHOLD_HOUR = int(os.getenv("LATE_THRESHOLD_HOUR", "9"))

# Optional remote data service for invoices and installments; empty means MySQL.
DATA_SERVICE_URL = os.getenv("DATA_SERVICE_URL", "")
DATA_SERVICE_TIMEOUT = float(os.getenv("DATA_SERVICE_TIMEOUT", "10"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
