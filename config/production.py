import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "tardiness_db"),
}

STORE_BACKEND = "mysql"

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

MAX_TRANSACTION_RETRIES = int(os.getenv("MAX_TRANSACTION_RETRIES", "5"))
ABSENCE_LOOKBACK_DAYS = int(os.getenv("ABSENCE_LOOKBACK_DAYS", "30"))
TERMINATION_RISK_ACTS = int(os.getenv("TERMINATION_RISK_ACTS", "3"))
TERMINATION_RISK_DAYS = int(os.getenv("TERMINATION_RISK_DAYS", "90"))
STRICT_RULE_RANGES = bool(int(os.getenv("STRICT_RULE_RANGES", "1")))
