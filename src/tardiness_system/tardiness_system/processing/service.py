from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Callable, Optional, TypeVar

from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

from ..common.datetime_utils import Clock, SystemClock, month_of
from ..common.validators import require_month
from ..core.constants import (
    DEFAULT_ABSENCE_LOOKBACK_DAYS,
    DEFAULT_MAX_TRANSACTION_RETRIES,
    DEFAULT_PENDING_LIMIT,
    DEFAULT_TERMINATION_RISK_ACTS,
    DEFAULT_TERMINATION_RISK_DAYS,
)
from ..core.enums import DisciplinaryActionType, RecordStatus, RiskLevel, TriggerType
from ..core.exceptions import ConcurrencyConflict, ValidationError
from ..discipline.dedup import DeduplicationGuard
from ..discipline.lifecycle import DisciplinaryRecordLifecycle
from ..discipline.model import (
    DisciplinaryActionRule,
    DisciplinaryOutcome,
    DisciplinaryStats,
    EmployeeDisciplinaryRecord,
    EmployeeRisk,
)
from ..discipline.notifications import LoggingNotifier, Notifier, PendingNotification, dispatch
from ..discipline.resolver import DisciplinaryRuleResolver
from ..store.repository import TardinessStore, TardinessUnitOfWork
from ..tardiness.accumulator import MonthlyAccumulator
from ..tardiness.classifier import minutes_late as compute_minutes_late
from ..tardiness.model import AccumulationSnapshot
from ..tardiness.rules import TardinessRuleSet
from .model import AbsenceProcessingResult, TardinessProcessingResult

logger = logging.getLogger(__name__)

T = TypeVar("T")

_SETTLED = (RecordStatus.ACTIVE, RecordStatus.COMPLETED)


class TardinessProcessingService:
    """Single entry point of the tardiness and disciplinary engine.

    Every write operation runs in one store transaction, so an accumulation
    update and the escalation it triggers commit or roll back together.
    Transactions that lose against a concurrent writer are retried as a whole.
    """

    def __init__(
        self,
        store: TardinessStore,
        *,
        clock: Clock | None = None,
        notifier: Notifier | None = None,
        accumulator: MonthlyAccumulator | None = None,
        max_retries: int = DEFAULT_MAX_TRANSACTION_RETRIES,
        absence_lookback_days: int = DEFAULT_ABSENCE_LOOKBACK_DAYS,
        termination_risk_acts: int = DEFAULT_TERMINATION_RISK_ACTS,
        termination_risk_days: int = DEFAULT_TERMINATION_RISK_DAYS,
        strict_rule_ranges: bool = False,
    ):
        self._store = store
        self._clock = clock or SystemClock()
        self._notifier = notifier or LoggingNotifier()
        self._accumulator = accumulator or MonthlyAccumulator()
        self._resolver = DisciplinaryRuleResolver()
        self._dedup = DeduplicationGuard()
        self._lifecycle = DisciplinaryRecordLifecycle(self._accumulator)
        self._max_retries = max(0, int(max_retries))
        self._absence_lookback_days = int(absence_lookback_days)
        self._termination_risk_acts = int(termination_risk_acts)
        self._termination_risk_days = int(termination_risk_days)
        self._strict_rule_ranges = bool(strict_rule_ranges)

    def _run(self, operation: Callable[[], T]) -> T:
        retrying = Retrying(
            # first attempt plus max_retries retries
            stop=stop_after_attempt(self._max_retries + 1),
            wait=wait_exponential(multiplier=0.05, max=1) + wait_random(0, 0.05),
            retry=retry_if_exception_type(ConcurrencyConflict),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        return retrying(operation)

    # ---------------- escalation ----------------
    def _escalate(
        self,
        uow: TardinessUnitOfWork,
        *,
        employee_id: int,
        trigger_type: TriggerType,
        current_count: int,
        now: datetime,
        pending: list[PendingNotification],
        period: Optional[tuple[int, int]] = None,
    ) -> Optional[DisciplinaryOutcome]:
        rule = self._resolver.resolve(uow, trigger_type, current_count)
        if rule is None:
            logger.info("No escalation rule for %s=%d (employee=%s)", trigger_type.value, current_count, employee_id)
            return None
        return self._apply(
            uow,
            employee_id=employee_id,
            rule=rule,
            current_count=current_count,
            now=now,
            pending=pending,
            period=period,
        )

    def _escalate_administrative_acts(
        self,
        uow: TardinessUnitOfWork,
        *,
        employee_id: int,
        now: datetime,
        pending: list[PendingNotification],
    ) -> Optional[DisciplinaryOutcome]:
        def _acts_since(since: datetime) -> int:
            return uow.count_records(
                employee_id=employee_id,
                action_type=DisciplinaryActionType.ADMINISTRATIVE_ACT,
                statuses=_SETTLED,
                since=since,
            )

        match = self._resolver.resolve_windowed(uow, TriggerType.ADMINISTRATIVE_ACTS, now=now, count_since=_acts_since)
        if match is None:
            return None
        rule, acts = match
        return self._apply(uow, employee_id=employee_id, rule=rule, current_count=acts, now=now, pending=pending)

    def _apply(
        self,
        uow: TardinessUnitOfWork,
        *,
        employee_id: int,
        rule: DisciplinaryActionRule,
        current_count: int,
        now: datetime,
        pending: list[PendingNotification],
        period: Optional[tuple[int, int]] = None,
    ) -> DisciplinaryOutcome:
        if self._dedup.has_recent_record(
            uow,
            employee_id=employee_id,
            rule_id=rule.rule_id,
            period_days=rule.period_days,
            now=now,
        ):
            logger.info(
                "Rule %s already applied to employee=%s within %d days",
                rule.rule_id,
                employee_id,
                rule.period_days,
            )
            return DisciplinaryOutcome(rule_applied=rule.name, action_type=rule.action_type, already_exists=True)

        record = self._lifecycle.create(
            uow,
            employee_id=employee_id,
            rule=rule,
            current_count=current_count,
            now=now,
            period=period,
        )
        if rule.notification_enabled:
            pending.append(PendingNotification(employee_id=employee_id, rule=rule, record=record))

        escalated_to = None
        if (
            rule.action_type == DisciplinaryActionType.ADMINISTRATIVE_ACT
            and rule.trigger_type != TriggerType.ADMINISTRATIVE_ACTS
        ):
            escalated_to = self._escalate_administrative_acts(uow, employee_id=employee_id, now=now, pending=pending)

        return DisciplinaryOutcome(
            rule_applied=rule.name,
            action_type=rule.action_type,
            record_id=record.record_id,
            requires_approval=rule.requires_approval,
            suspension_days=rule.suspension_days,
            escalated_to=escalated_to,
        )

    # ---------------- processing ----------------
    def process_tardiness(
        self,
        employee_id: int,
        check_in_time: datetime,
        scheduled_time: datetime,
        attendance_id: Optional[int] = None,
    ) -> TardinessProcessingResult:
        minutes = compute_minutes_late(check_in_time, scheduled_time)
        if minutes == 0:
            return TardinessProcessingResult(minutes_late=0, rule_applied=None, accumulated=False)

        month, year = month_of(check_in_time)

        def _transaction() -> tuple[TardinessProcessingResult, list[PendingNotification]]:
            pending: list[PendingNotification] = []
            with self._store.transaction() as uow:
                rules = TardinessRuleSet(uow.list_active_tardiness_rules(), strict=self._strict_rule_ranges)
                rule = rules.resolve(minutes)
                if rule is None:
                    logger.warning(
                        "No tardiness rule covers %d minutes late (employee=%s, attendance=%s)",
                        minutes,
                        employee_id,
                        attendance_id,
                    )
                    return TardinessProcessingResult(minutes_late=minutes, rule_applied=None, accumulated=False), pending

                uow.lock_employee(employee_id)
                applied = self._accumulator.apply_rule(uow, employee_id=employee_id, month=month, year=year, rule=rule)

                outcome = None
                if applied.conversion_occurred:
                    outcome = self._escalate(
                        uow,
                        employee_id=employee_id,
                        trigger_type=TriggerType.FORMAL_TARDIES,
                        current_count=applied.accumulation.formal_tardies_count,
                        now=self._clock.now(),
                        pending=pending,
                        period=(month, year),
                    )

                # re-read: an administrative act may have bumped the same row
                acc = uow.get_accumulation(employee_id=employee_id, month=month, year=year) or applied.accumulation
                result = TardinessProcessingResult(
                    minutes_late=minutes,
                    rule_applied=rule.name,
                    accumulated=True,
                    accumulation=acc.snapshot(),
                    conversion_to_formal_tardiness=applied.conversion_occurred,
                    disciplinary_action_triggered=outcome,
                )
            return result, pending

        result, pending = self._run(_transaction)
        dispatch(self._notifier, pending)
        return result

    def process_unjustified_absence(self, employee_id: int, absence_date: date) -> AbsenceProcessingResult:
        def _transaction() -> tuple[AbsenceProcessingResult, list[PendingNotification]]:
            pending: list[PendingNotification] = []
            now = self._clock.now()
            since = (now - timedelta(days=self._absence_lookback_days)).date()
            with self._store.transaction() as uow:
                uow.lock_employee(employee_id)
                count = uow.count_absences(employee_id=employee_id, since=since)
                logger.info(
                    "employee=%s absence on %s: %d unjustified absences since %s",
                    employee_id,
                    absence_date,
                    count,
                    since,
                )
                outcome = self._escalate(
                    uow,
                    employee_id=employee_id,
                    trigger_type=TriggerType.UNJUSTIFIED_ABSENCES,
                    current_count=count,
                    now=now,
                    pending=pending,
                )
            return AbsenceProcessingResult(absence_count=count, disciplinary_action_triggered=outcome), pending

        result, pending = self._run(_transaction)
        dispatch(self._notifier, pending)
        return result

    def approve_disciplinary_record(
        self,
        record_id: int,
        approver_id: int,
        approved: bool,
        notes: Optional[str] = None,
    ) -> EmployeeDisciplinaryRecord:
        def _transaction() -> EmployeeDisciplinaryRecord:
            with self._store.transaction() as uow:
                return self._lifecycle.decide(
                    uow,
                    record_id=record_id,
                    approver_id=approver_id,
                    approved=approved,
                    notes=notes,
                    now=self._clock.now(),
                )

        return self._run(_transaction)

    def complete_expired_records(self) -> int:
        """ACTIVE -> COMPLETED for suspensions past their expiration; meant for a scheduled sweep."""

        def _transaction() -> int:
            with self._store.transaction() as uow:
                return self._lifecycle.complete_expired(uow, now=self._clock.now())

        return self._run(_transaction)

    def correct_accumulation(
        self,
        employee_id: int,
        month: int,
        year: int,
        *,
        late_arrivals_count: Optional[int] = None,
        direct_tardiness_count: Optional[int] = None,
        formal_tardies_count: Optional[int] = None,
        administrative_acts: Optional[int] = None,
    ) -> AccumulationSnapshot:
        def _transaction() -> AccumulationSnapshot:
            with self._store.transaction() as uow:
                uow.lock_employee(employee_id)
                acc = self._accumulator.correct(
                    uow,
                    employee_id=employee_id,
                    month=month,
                    year=year,
                    late_arrivals_count=late_arrivals_count,
                    direct_tardiness_count=direct_tardiness_count,
                    formal_tardies_count=formal_tardies_count,
                    administrative_acts=administrative_acts,
                )
                return acc.snapshot()

        return self._run(_transaction)

    # ---------------- queries ----------------
    def get_employee_accumulation(
        self,
        employee_id: int,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> AccumulationSnapshot:
        current_month, current_year = month_of(self._clock.now())
        month, year = require_month(
            current_month if month is None else month,
            current_year if year is None else year,
        )
        with self._store.transaction() as uow:
            acc = uow.get_accumulation(employee_id=employee_id, month=month, year=year)
        return acc.snapshot() if acc else AccumulationSnapshot()

    def get_employee_disciplinary_records(
        self,
        employee_id: int,
        *,
        status: Optional[RecordStatus] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> list[EmployeeDisciplinaryRecord]:
        if start_date and end_date and end_date < start_date:
            raise ValidationError("end_date must be >= start_date")
        with self._store.transaction() as uow:
            return list(
                uow.list_records(employee_id=employee_id, status=status, start_date=start_date, end_date=end_date)
            )

    def list_pending_records(self, *, limit: int = DEFAULT_PENDING_LIMIT) -> list[EmployeeDisciplinaryRecord]:
        with self._store.transaction() as uow:
            return list(uow.list_records(status=RecordStatus.PENDING, limit=limit))

    def get_employee_disciplinary_stats(self, employee_id: int) -> DisciplinaryStats:
        now = self._clock.now()
        with self._store.transaction() as uow:
            records = list(uow.list_records(employee_id=employee_id))

        last_30 = now - timedelta(days=30)
        last_90 = now - timedelta(days=90)
        risk_since = now - timedelta(days=self._termination_risk_days)

        acts = [r for r in records if r.action_type == DisciplinaryActionType.ADMINISTRATIVE_ACT and r.status in _SETTLED]
        recent_acts = sum(1 for r in acts if r.applied_date >= risk_since)

        return DisciplinaryStats(
            total_records=len(records),
            active_records=sum(1 for r in records if r.status == RecordStatus.ACTIVE),
            last_30_days=sum(1 for r in records if r.applied_date >= last_30),
            last_90_days=sum(1 for r in records if r.applied_date >= last_90),
            administrative_acts=len(acts),
            suspensions=sum(
                1 for r in records if r.action_type == DisciplinaryActionType.SUSPENSION and r.status in _SETTLED
            ),
            recent_acts=recent_acts,
            at_risk_of_termination=recent_acts >= self._termination_risk_acts,
        )

    def list_employees_at_risk(self) -> list[EmployeeRisk]:
        """Employees one act short of (or past) the termination threshold inside the risk window.

        HIGH means the next act reaches the threshold; MEDIUM means it was already reached.
        """
        now = self._clock.now()
        threshold = self._termination_risk_acts
        with self._store.transaction() as uow:
            counts = uow.count_records_by_employee(
                action_type=DisciplinaryActionType.ADMINISTRATIVE_ACT,
                statuses=_SETTLED,
                since=now - timedelta(days=self._termination_risk_days),
                min_count=max(1, threshold - 1),
            )

        risks = []
        for employee_id, acts in counts.items():
            remaining = max(0, threshold - acts)
            risks.append(
                EmployeeRisk(
                    employee_id=employee_id,
                    acts_count=acts,
                    remaining_acts=remaining,
                    risk_level=RiskLevel.HIGH if remaining == 1 else RiskLevel.MEDIUM,
                )
            )
        risks.sort(key=lambda r: (-r.acts_count, r.employee_id))
        return risks
