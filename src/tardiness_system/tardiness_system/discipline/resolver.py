from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable, Optional

from ..core.enums import TriggerType
from ..store.repository import TardinessUnitOfWork
from .model import DisciplinaryActionRule


def _severity(rule: DisciplinaryActionRule) -> tuple[int, str]:
    # highest threshold first, ties by rule_id
    return -rule.trigger_count, rule.rule_id


class DisciplinaryRuleResolver:
    """Picks the most severe escalation rule an employee currently qualifies for."""

    def resolve(self, uow: TardinessUnitOfWork, trigger_type: TriggerType, current_count: int) -> Optional[DisciplinaryActionRule]:
        rules = uow.list_escalation_rules(trigger_type=trigger_type, max_trigger_count=int(current_count))
        qualifying = [r for r in rules if r.is_active and r.trigger_type == trigger_type and r.trigger_count <= current_count]
        if not qualifying:
            return None
        return min(qualifying, key=_severity)

    def resolve_windowed(
        self,
        uow: TardinessUnitOfWork,
        trigger_type: TriggerType,
        *,
        now: datetime,
        count_since: Callable[[datetime], int],
    ) -> Optional[tuple[DisciplinaryActionRule, int]]:
        """Like ``resolve``, but each rule is measured against the count inside its own
        ``period_days`` window. Returns the rule together with that count."""

        matches: list[tuple[DisciplinaryActionRule, int]] = []
        counts: dict[int, int] = {}
        for rule in uow.list_escalation_rules(trigger_type=trigger_type):
            if not rule.is_active or rule.trigger_type != trigger_type:
                continue
            if rule.period_days not in counts:
                counts[rule.period_days] = count_since(now - timedelta(days=int(rule.period_days)))
            count = counts[rule.period_days]
            if rule.trigger_count <= count:
                matches.append((rule, count))
        if not matches:
            return None
        return min(matches, key=lambda match: _severity(match[0]))
