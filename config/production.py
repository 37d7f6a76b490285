import os

from config.config import DATA_SERVICE_TIMEOUT, DATA_SERVICE_URL, DB_CONFIG, LATE_THRESHOLD_HOUR, LOG_LEVEL

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DEBUG = False

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
