from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Attendance status written by the check-in path; only absences are read here."""

    ABSENT = "ABSENT"


class TardinessType(str, Enum):
    """How a lateness rule feeds the monthly counters."""

    LATE_ARRIVAL = "LATE_ARRIVAL"
    DIRECT_TARDINESS = "DIRECT_TARDINESS"


class TriggerType(str, Enum):
    FORMAL_TARDIES = "FORMAL_TARDIES"
    UNJUSTIFIED_ABSENCES = "UNJUSTIFIED_ABSENCES"
    ADMINISTRATIVE_ACTS = "ADMINISTRATIVE_ACTS"


class DisciplinaryActionType(str, Enum):
    WARNING = "WARNING"
    WRITTEN_WARNING = "WRITTEN_WARNING"
    ADMINISTRATIVE_ACT = "ADMINISTRATIVE_ACT"
    SUSPENSION = "SUSPENSION"
    TERMINATION = "TERMINATION"


class RecordStatus(str, Enum):
    """Approval state of a disciplinary record.

    PENDING -> ACTIVE | CANCELLED is driven by approvals; ACTIVE -> COMPLETED
    only by the expiry sweep.
    """

    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class RiskLevel(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"


class ThresholdOperator(str, Enum):
    GT = "GT"
    LT = "LT"
    GTE = "GTE"
    LTE = "LTE"
    EQ = "EQ"


class CalculationMethod(str, Enum):
    RATE = "RATE"
    COUNT = "COUNT"
    AVERAGE = "AVERAGE"


class PeriodType(str, Enum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    YEARLY = "YEARLY"
