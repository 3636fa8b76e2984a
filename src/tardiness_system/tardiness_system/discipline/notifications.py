from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Protocol

from .model import DisciplinaryActionRule, EmployeeDisciplinaryRecord

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def notify(self, employee_id: int, rule: DisciplinaryActionRule, record: EmployeeDisciplinaryRecord) -> None:
        raise NotImplementedError


class LoggingNotifier:
    """Default sender: writes the notification to the application log."""

    def notify(self, employee_id: int, rule: DisciplinaryActionRule, record: EmployeeDisciplinaryRecord) -> None:
        logger.info(
            "notify employee=%s: %s (%s, record=%s, status=%s)",
            employee_id,
            rule.name,
            record.action_type.value,
            record.record_id,
            record.status.value,
        )


@dataclass(frozen=True)
class PendingNotification:
    employee_id: int
    rule: DisciplinaryActionRule
    record: EmployeeDisciplinaryRecord


def dispatch(notifier: Notifier, pending: Iterable[PendingNotification]) -> None:
    """Fire-and-forget delivery after commit; a failing sender never fails the operation."""
    for item in pending:
        try:
            notifier.notify(item.employee_id, item.rule, item.record)
        except Exception:
            logger.exception(
                "Notification failed for employee=%s record=%s",
                item.employee_id,
                item.record.record_id,
            )
