from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..discipline.model import DisciplinaryOutcome
from ..tardiness.model import AccumulationSnapshot


@dataclass(frozen=True)
class TardinessProcessingResult:
    minutes_late: int
    rule_applied: Optional[str]
    accumulated: bool
    accumulation: Optional[AccumulationSnapshot] = None
    conversion_to_formal_tardiness: bool = False
    disciplinary_action_triggered: Optional[DisciplinaryOutcome] = None

    def as_dict(self) -> dict:
        return {
            "minutes_late": self.minutes_late,
            "rule_applied": self.rule_applied,
            "accumulated": self.accumulated,
            "accumulation": self.accumulation.as_dict() if self.accumulation else None,
            "conversion_to_formal_tardiness": self.conversion_to_formal_tardiness,
            "disciplinary_action_triggered": (
                self.disciplinary_action_triggered.as_dict() if self.disciplinary_action_triggered else None
            ),
        }


@dataclass(frozen=True)
class AbsenceProcessingResult:
    absence_count: int
    disciplinary_action_triggered: Optional[DisciplinaryOutcome] = None

    def as_dict(self) -> dict:
        return {
            "absence_count": self.absence_count,
            "disciplinary_action_triggered": (
                self.disciplinary_action_triggered.as_dict() if self.disciplinary_action_triggered else None
            ),
        }
