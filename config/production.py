import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "staffing_db"),
    "connection_timeout": int(os.getenv("DB_TIMEOUT_SECONDS", "5")),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

REALTIME_RELAY_URL = os.getenv("REALTIME_RELAY_URL", "")
REALTIME_TIMEOUT_SECONDS = float(os.getenv("REALTIME_TIMEOUT_SECONDS", "2.0"))

BULK_CLOSE_MAX_WORKERS = int(os.getenv("BULK_CLOSE_MAX_WORKERS", "8"))
MAX_TIME_ENTRIES = int(os.getenv("MAX_TIME_ENTRIES", "3"))
