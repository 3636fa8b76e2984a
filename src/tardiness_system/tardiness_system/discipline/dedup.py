from __future__ import annotations

from datetime import datetime, timedelta

from ..store.repository import TardinessUnitOfWork


class DeduplicationGuard:
    """Keeps one escalation rule from firing twice for an employee inside its window."""

    def window_start(self, *, now: datetime, period_days: int) -> datetime:
        return now - timedelta(days=int(period_days))

    def has_recent_record(
        self,
        uow: TardinessUnitOfWork,
        *,
        employee_id: int,
        rule_id: str,
        period_days: int,
        now: datetime,
    ) -> bool:
        since = self.window_start(now=now, period_days=period_days)
        return uow.find_recent_record(employee_id=employee_id, rule_id=rule_id, since=since) is not None
