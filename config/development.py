import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "tardiness_db"),
}

# mysql | memory
STORE_BACKEND = os.getenv("STORE_BACKEND", "mysql")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed the default tardiness/disciplinary rules on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

MAX_TRANSACTION_RETRIES = int(os.getenv("MAX_TRANSACTION_RETRIES", "3"))
ABSENCE_LOOKBACK_DAYS = int(os.getenv("ABSENCE_LOOKBACK_DAYS", "30"))
TERMINATION_RISK_ACTS = int(os.getenv("TERMINATION_RISK_ACTS", "3"))
TERMINATION_RISK_DAYS = int(os.getenv("TERMINATION_RISK_DAYS", "90"))
STRICT_RULE_RANGES = bool(int(os.getenv("STRICT_RULE_RANGES", "0")))
