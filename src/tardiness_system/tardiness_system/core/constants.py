"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_ABSENCE_LOOKBACK_DAYS = 30
DEFAULT_MAX_TRANSACTION_RETRIES = 3
DEFAULT_TERMINATION_RISK_ACTS = 3
DEFAULT_TERMINATION_RISK_DAYS = 90
DEFAULT_PENDING_LIMIT = 200

# Two aggregated metric values closer than this compare as equal.
THRESHOLD_EQ_TOLERANCE = 0.01
