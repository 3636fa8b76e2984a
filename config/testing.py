import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "tardiness_test_db"),
}

STORE_BACKEND = os.getenv("STORE_BACKEND", "memory")

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = False
AUTO_SEED_DB = False

MAX_TRANSACTION_RETRIES = 3
ABSENCE_LOOKBACK_DAYS = 30
TERMINATION_RISK_ACTS = 3
TERMINATION_RISK_DAYS = 90
STRICT_RULE_RANGES = False
