from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import CalculationMethod, PeriodType, ThresholdOperator


@dataclass(frozen=True)
class IncidentType:
    incident_type_id: int
    name: str
    calculation_method: CalculationMethod


@dataclass(frozen=True)
class IncidentConfig:
    config_id: int
    incident_type_id: int
    threshold_value: float
    threshold_operator: ThresholdOperator
    period_type: PeriodType
    department_id: Optional[int] = None
    is_active: bool = True


@dataclass(frozen=True)
class Incident:
    incident_id: int
    incident_type_id: int
    date: date
    value: float
    department_id: Optional[int] = None


@dataclass(frozen=True)
class ThresholdAlert:
    config: IncidentConfig
    incident_type: IncidentType
    calculated_value: float
    threshold_value: float
    incidents: int
    message: str

    def as_dict(self) -> dict:
        return {
            "config_id": self.config.config_id,
            "incident_type": self.incident_type.name,
            "department_id": self.config.department_id,
            "period_type": self.config.period_type.value,
            "operator": self.config.threshold_operator.value,
            "calculated_value": self.calculated_value,
            "threshold_value": self.threshold_value,
            "incidents": self.incidents,
            "message": self.message,
        }
