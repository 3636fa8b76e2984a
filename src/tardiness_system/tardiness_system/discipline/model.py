from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import DisciplinaryActionType, RecordStatus, RiskLevel, TriggerType


@dataclass(frozen=True)
class DisciplinaryActionRule:
    """Escalation rule: once ``trigger_count`` is reached, apply ``action_type``."""

    rule_id: str
    name: str
    trigger_type: TriggerType
    trigger_count: int
    action_type: DisciplinaryActionType
    period_days: int
    suspension_days: Optional[int] = None
    requires_approval: bool = True
    notification_enabled: bool = False
    is_active: bool = True
    description: Optional[str] = None


@dataclass(frozen=True)
class EmployeeDisciplinaryRecord:
    record_id: int
    employee_id: int
    rule_id: Optional[str]
    action_type: DisciplinaryActionType
    trigger_type: TriggerType
    trigger_count: int
    applied_date: datetime
    reason: str
    status: RecordStatus
    effective_date: Optional[datetime] = None
    expiration_date: Optional[datetime] = None
    suspension_days: Optional[int] = None
    approved_by_id: Optional[int] = None
    approved_at: Optional[datetime] = None
    notes: Optional[str] = None

    def as_dict(self) -> dict:
        def _iso(v: Optional[datetime]) -> Optional[str]:
            return v.isoformat() if v else None

        return {
            "record_id": self.record_id,
            "employee_id": self.employee_id,
            "rule_id": self.rule_id,
            "action_type": self.action_type.value,
            "trigger_type": self.trigger_type.value,
            "trigger_count": self.trigger_count,
            "applied_date": _iso(self.applied_date),
            "effective_date": _iso(self.effective_date),
            "expiration_date": _iso(self.expiration_date),
            "suspension_days": self.suspension_days,
            "reason": self.reason,
            "status": self.status.value,
            "approved_by_id": self.approved_by_id,
            "approved_at": _iso(self.approved_at),
            "notes": self.notes,
        }


@dataclass(frozen=True)
class DisciplinaryOutcome:
    """Summary of an escalation check that matched a rule.

    ``escalated_to`` carries the follow-up escalation an administrative act
    caused in the same transaction, if any.
    """

    rule_applied: str
    action_type: DisciplinaryActionType
    already_exists: bool = False
    record_id: Optional[int] = None
    requires_approval: Optional[bool] = None
    suspension_days: Optional[int] = None
    escalated_to: Optional["DisciplinaryOutcome"] = None

    def as_dict(self) -> dict:
        return {
            "rule_applied": self.rule_applied,
            "action_type": self.action_type.value,
            "already_exists": self.already_exists,
            "record_id": self.record_id,
            "requires_approval": self.requires_approval,
            "suspension_days": self.suspension_days,
            "escalated_to": self.escalated_to.as_dict() if self.escalated_to else None,
        }


@dataclass(frozen=True)
class DisciplinaryStats:
    total_records: int
    active_records: int
    last_30_days: int
    last_90_days: int
    administrative_acts: int
    suspensions: int
    recent_acts: int
    at_risk_of_termination: bool


@dataclass(frozen=True)
class EmployeeRisk:
    """An employee approaching the administrative-act termination threshold."""

    employee_id: int
    acts_count: int
    remaining_acts: int
    risk_level: RiskLevel

    def as_dict(self) -> dict:
        return {
            "employee_id": self.employee_id,
            "acts_count": self.acts_count,
            "remaining_acts": self.remaining_acts,
            "risk_level": self.risk_level.value,
        }
