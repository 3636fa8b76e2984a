from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from ..common.validators import require_month, require_non_negative_int
from ..core.enums import TardinessType
from ..store.repository import TardinessUnitOfWork
from .model import AccumulationResult, TardinessAccumulation, TardinessRule

logger = logging.getLogger(__name__)

_COUNTER_FIELDS = (
    "late_arrivals_count",
    "direct_tardiness_count",
    "formal_tardies_count",
    "administrative_acts",
)


class MonthlyAccumulator:
    """Owns the per-(employee, month, year) counters.

    All mutations go through a unit of work whose row lock is held until the
    surrounding transaction commits.
    """

    def apply_rule(
        self,
        uow: TardinessUnitOfWork,
        *,
        employee_id: int,
        month: int,
        year: int,
        rule: TardinessRule,
    ) -> AccumulationResult:
        acc = uow.lock_accumulation(employee_id=employee_id, month=month, year=year)

        if rule.type == TardinessType.LATE_ARRIVAL:
            late_arrivals = acc.late_arrivals_count + 1
            if late_arrivals >= rule.accumulation_count:
                updated = replace(
                    acc,
                    late_arrivals_count=0,
                    formal_tardies_count=acc.formal_tardies_count + rule.equivalent_formal_tardies,
                )
                result = AccumulationResult(updated, True, rule.equivalent_formal_tardies)
            else:
                updated = replace(acc, late_arrivals_count=late_arrivals)
                result = AccumulationResult(updated, False)
        elif rule.type == TardinessType.DIRECT_TARDINESS:
            updated = replace(
                acc,
                direct_tardiness_count=acc.direct_tardiness_count + 1,
                formal_tardies_count=acc.formal_tardies_count + rule.equivalent_formal_tardies,
            )
            result = AccumulationResult(updated, True, rule.equivalent_formal_tardies)
        else:
            raise ValueError(f"Unsupported tardiness rule type: {rule.type!r}")

        uow.save_accumulation(updated)
        if result.conversion_occurred:
            logger.info(
                "employee=%s %02d/%d converted to %d formal tardies (total=%d) via rule %s",
                employee_id,
                month,
                year,
                result.formal_tardies_added,
                updated.formal_tardies_count,
                rule.rule_id,
            )
        return result

    def add_administrative_act(self, uow: TardinessUnitOfWork, *, employee_id: int, month: int, year: int) -> TardinessAccumulation:
        acc = uow.lock_accumulation(employee_id=employee_id, month=month, year=year)
        updated = replace(acc, administrative_acts=acc.administrative_acts + 1)
        uow.save_accumulation(updated)
        return updated

    def correct(
        self,
        uow: TardinessUnitOfWork,
        *,
        employee_id: int,
        month: int,
        year: int,
        late_arrivals_count: Optional[int] = None,
        direct_tardiness_count: Optional[int] = None,
        formal_tardies_count: Optional[int] = None,
        administrative_acts: Optional[int] = None,
    ) -> TardinessAccumulation:
        """Administrative override of counters; values are validated before anything is written."""

        month, year = require_month(month, year)
        values = {
            "late_arrivals_count": late_arrivals_count,
            "direct_tardiness_count": direct_tardiness_count,
            "formal_tardies_count": formal_tardies_count,
            "administrative_acts": administrative_acts,
        }
        changes = {
            name: require_non_negative_int(value, name)
            for name, value in values.items()
            if value is not None
        }

        acc = uow.lock_accumulation(employee_id=employee_id, month=month, year=year)
        if not changes:
            return acc

        updated = replace(acc, **changes)
        uow.save_accumulation(updated)
        logger.info(
            "employee=%s %02d/%d counters corrected: %s",
            employee_id,
            month,
            year,
            ", ".join(f"{k}={getattr(acc, k)}->{changes[k]}" for k in _COUNTER_FIELDS if k in changes),
        )
        return updated
