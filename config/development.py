import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "staffing_db"),
    "connection_timeout": int(os.getenv("DB_TIMEOUT_SECONDS", "5")),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo users and a demo shift on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

# Empty means events stay in-process
REALTIME_RELAY_URL = os.getenv("REALTIME_RELAY_URL", "")
REALTIME_TIMEOUT_SECONDS = float(os.getenv("REALTIME_TIMEOUT_SECONDS", "2.0"))

BULK_CLOSE_MAX_WORKERS = int(os.getenv("BULK_CLOSE_MAX_WORKERS", "4"))
MAX_TIME_ENTRIES = int(os.getenv("MAX_TIME_ENTRIES", "3"))
