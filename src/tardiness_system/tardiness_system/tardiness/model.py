from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import TardinessType


@dataclass(frozen=True)
class TardinessRule:
    """Lateness classification rule covering an inclusive minutes-late range."""

    rule_id: str
    name: str
    type: TardinessType
    start_minutes_late: int
    end_minutes_late: Optional[int]
    accumulation_count: int
    equivalent_formal_tardies: int
    is_active: bool = True
    description: Optional[str] = None

    def contains(self, minutes_late: int) -> bool:
        if minutes_late < self.start_minutes_late:
            return False
        return self.end_minutes_late is None or minutes_late <= self.end_minutes_late


@dataclass(frozen=True)
class AccumulationSnapshot:
    """Counter values of one accumulation row (zero-filled when the row is absent)."""

    late_arrivals_count: int = 0
    direct_tardiness_count: int = 0
    formal_tardies_count: int = 0
    administrative_acts: int = 0

    def as_dict(self) -> dict:
        return {
            "late_arrivals_count": self.late_arrivals_count,
            "direct_tardiness_count": self.direct_tardiness_count,
            "formal_tardies_count": self.formal_tardies_count,
            "administrative_acts": self.administrative_acts,
        }


@dataclass(frozen=True)
class TardinessAccumulation:
    """Per-employee, per-month counter row."""

    accumulation_id: int
    employee_id: int
    month: int
    year: int
    late_arrivals_count: int = 0
    direct_tardiness_count: int = 0
    formal_tardies_count: int = 0
    administrative_acts: int = 0

    def snapshot(self) -> AccumulationSnapshot:
        return AccumulationSnapshot(
            late_arrivals_count=self.late_arrivals_count,
            direct_tardiness_count=self.direct_tardiness_count,
            formal_tardies_count=self.formal_tardies_count,
            administrative_acts=self.administrative_acts,
        )


@dataclass(frozen=True)
class AccumulationResult:
    accumulation: TardinessAccumulation
    conversion_occurred: bool
    formal_tardies_added: int = 0
