from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional

from ..common.datetime_utils import month_of
from ..core.enums import DisciplinaryActionType, RecordStatus
from ..core.exceptions import InvalidStateError, NotFoundError
from ..store.repository import TardinessUnitOfWork
from ..tardiness.accumulator import MonthlyAccumulator
from .model import DisciplinaryActionRule, EmployeeDisciplinaryRecord

logger = logging.getLogger(__name__)


def build_reason(rule: DisciplinaryActionRule, current_count: int) -> str:
    label = rule.trigger_type.value.lower().replace("_", " ")
    return f"Accumulated {current_count} {label} (rule {rule.rule_id}: {rule.name})"


def suspension_window(
    action_type: DisciplinaryActionType,
    suspension_days: Optional[int],
    start: datetime,
) -> tuple[Optional[datetime], Optional[datetime]]:
    """(effective_date, expiration_date) for a record starting at ``start``."""
    if action_type != DisciplinaryActionType.SUSPENSION:
        return None, None
    expiration = start + timedelta(days=int(suspension_days)) if suspension_days else None
    return start, expiration


class DisciplinaryRecordLifecycle:
    def __init__(self, accumulator: MonthlyAccumulator):
        self._accumulator = accumulator

    def create(
        self,
        uow: TardinessUnitOfWork,
        *,
        employee_id: int,
        rule: DisciplinaryActionRule,
        current_count: int,
        now: datetime,
        period: Optional[tuple[int, int]] = None,
    ) -> EmployeeDisciplinaryRecord:
        """Insert the record for ``rule``.

        An ADMINISTRATIVE_ACT also increments the ``(month, year)`` accumulation
        given as ``period`` (the row whose counters triggered it), or the month
        of ``now`` when the trigger is not a monthly counter.
        """
        status = RecordStatus.PENDING if rule.requires_approval else RecordStatus.ACTIVE
        effective, expiration = suspension_window(rule.action_type, rule.suspension_days, now)

        record = uow.create_record(
            employee_id=employee_id,
            rule_id=rule.rule_id,
            action_type=rule.action_type,
            trigger_type=rule.trigger_type,
            trigger_count=current_count,
            applied_date=now,
            reason=build_reason(rule, current_count),
            status=status,
            effective_date=effective,
            expiration_date=expiration,
            suspension_days=rule.suspension_days,
        )

        if rule.action_type == DisciplinaryActionType.ADMINISTRATIVE_ACT:
            month, year = period or month_of(now)
            self._accumulator.add_administrative_act(uow, employee_id=employee_id, month=month, year=year)

        logger.info(
            "Disciplinary record %s created for employee=%s: %s via rule %s (count=%d, status=%s)",
            record.record_id,
            employee_id,
            rule.action_type.value,
            rule.rule_id,
            current_count,
            status.value,
        )
        return record

    def decide(
        self,
        uow: TardinessUnitOfWork,
        *,
        record_id: int,
        approver_id: int,
        approved: bool,
        notes: Optional[str],
        now: datetime,
    ) -> EmployeeDisciplinaryRecord:
        record = uow.get_record(record_id)
        if not record:
            raise NotFoundError(f"Disciplinary record {record_id} not found")
        if record.status != RecordStatus.PENDING:
            raise InvalidStateError(f"Disciplinary record {record_id} was already processed ({record.status.value})")

        status = RecordStatus.ACTIVE if approved else RecordStatus.CANCELLED
        effective, expiration = record.effective_date, record.expiration_date
        if approved and record.action_type == DisciplinaryActionType.SUSPENSION:
            # a suspension starts when it is approved
            effective, expiration = suspension_window(record.action_type, record.suspension_days, now)

        decided = uow.decide_record(
            record_id=record.record_id,
            status=status,
            approved_by_id=approver_id,
            approved_at=now,
            notes=notes if notes is not None else record.notes,
            effective_date=effective,
            expiration_date=expiration,
        )
        if not decided:
            raise InvalidStateError(f"Disciplinary record {record_id} was processed concurrently")

        logger.info("Disciplinary record %s %s by %s", record_id, status.value, approver_id)
        updated = uow.get_record(record.record_id)
        if updated is None:
            raise NotFoundError(f"Disciplinary record {record_id} not found")
        return updated

    def complete_expired(self, uow: TardinessUnitOfWork, *, now: datetime) -> int:
        completed = 0
        for record in uow.list_expired_suspensions(now=now):
            if uow.update_record_status(record_id=record.record_id, expected=RecordStatus.ACTIVE, status=RecordStatus.COMPLETED):
                completed += 1
        if completed:
            logger.info("Completed %d expired suspensions", completed)
        return completed
