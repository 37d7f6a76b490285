import os

from config.config import DATA_SERVICE_TIMEOUT, DB_CONFIG, LATE_THRESHOLD_HOUR

SECRET_KEY = "test-secret"

DEBUG = False
TESTING = True

# Tests never reach a remote service.
DATA_SERVICE_URL = ""
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING").upper()

AUTO_INIT_DB = False
AUTO_SEED_DB = False
