from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Collection, Iterable, Iterator, Mapping, Optional, Sequence

from ..core.enums import DisciplinaryActionType, RecordStatus, TriggerType
from ..discipline.model import DisciplinaryActionRule, EmployeeDisciplinaryRecord
from ..incidents.model import Incident, IncidentConfig, IncidentType
from ..tardiness.model import TardinessAccumulation, TardinessRule
from .repository import TardinessStore, TardinessUnitOfWork


@dataclass
class _State:
    accumulations: dict[tuple[int, int, int], TardinessAccumulation] = field(default_factory=dict)
    records: dict[int, EmployeeDisciplinaryRecord] = field(default_factory=dict)
    absences: set[tuple[int, date]] = field(default_factory=set)
    next_accumulation_id: int = 1
    next_record_id: int = 1

    def copy(self) -> "_State":
        return _State(
            accumulations=dict(self.accumulations),
            records=dict(self.records),
            absences=set(self.absences),
            next_accumulation_id=self.next_accumulation_id,
            next_record_id=self.next_record_id,
        )


class _MemoryUnitOfWork(TardinessUnitOfWork):
    def __init__(self, store: "InMemoryTardinessStore", state: _State):
        self._store = store
        self._state = state

    def lock_employee(self, employee_id: int) -> None:
        # The whole transaction already runs under the store lock.
        return None

    def list_active_tardiness_rules(self) -> Sequence[TardinessRule]:
        rules = [r for r in self._store.tardiness_rules if r.is_active]
        return sorted(rules, key=lambda r: (r.start_minutes_late, r.rule_id))

    def list_escalation_rules(
        self,
        *,
        trigger_type: TriggerType,
        max_trigger_count: Optional[int] = None,
    ) -> Sequence[DisciplinaryActionRule]:
        rules = [
            r
            for r in self._store.escalation_rules
            if r.is_active
            and r.trigger_type == trigger_type
            and (max_trigger_count is None or r.trigger_count <= max_trigger_count)
        ]
        return sorted(rules, key=lambda r: (-r.trigger_count, r.rule_id))

    def get_accumulation(self, *, employee_id: int, month: int, year: int) -> Optional[TardinessAccumulation]:
        return self._state.accumulations.get((int(employee_id), int(month), int(year)))

    def lock_accumulation(self, *, employee_id: int, month: int, year: int) -> TardinessAccumulation:
        key = (int(employee_id), int(month), int(year))
        acc = self._state.accumulations.get(key)
        if acc is None:
            acc = TardinessAccumulation(
                accumulation_id=self._state.next_accumulation_id,
                employee_id=key[0],
                month=key[1],
                year=key[2],
            )
            self._state.next_accumulation_id += 1
            self._state.accumulations[key] = acc
        return acc

    def save_accumulation(self, accumulation: TardinessAccumulation) -> None:
        key = (accumulation.employee_id, accumulation.month, accumulation.year)
        self._state.accumulations[key] = accumulation

    def find_recent_record(self, *, employee_id: int, rule_id: str, since: datetime) -> Optional[EmployeeDisciplinaryRecord]:
        for rec in self._state.records.values():
            if rec.employee_id == int(employee_id) and rec.rule_id == rule_id and rec.applied_date >= since:
                return rec
        return None

    def create_record(
        self,
        *,
        employee_id: int,
        rule_id: Optional[str],
        action_type: DisciplinaryActionType,
        trigger_type: TriggerType,
        trigger_count: int,
        applied_date: datetime,
        reason: str,
        status: RecordStatus,
        effective_date: Optional[datetime] = None,
        expiration_date: Optional[datetime] = None,
        suspension_days: Optional[int] = None,
    ) -> EmployeeDisciplinaryRecord:
        rec = EmployeeDisciplinaryRecord(
            record_id=self._state.next_record_id,
            employee_id=int(employee_id),
            rule_id=rule_id,
            action_type=action_type,
            trigger_type=trigger_type,
            trigger_count=int(trigger_count),
            applied_date=applied_date,
            reason=reason,
            status=status,
            effective_date=effective_date,
            expiration_date=expiration_date,
            suspension_days=suspension_days,
        )
        self._state.next_record_id += 1
        self._state.records[rec.record_id] = rec
        return rec

    def get_record(self, record_id: int) -> Optional[EmployeeDisciplinaryRecord]:
        return self._state.records.get(int(record_id))

    def decide_record(
        self,
        *,
        record_id: int,
        status: RecordStatus,
        approved_by_id: int,
        approved_at: datetime,
        notes: Optional[str],
        effective_date: Optional[datetime],
        expiration_date: Optional[datetime],
    ) -> bool:
        rec = self._state.records.get(int(record_id))
        if not rec or rec.status != RecordStatus.PENDING:
            return False
        self._state.records[rec.record_id] = replace(
            rec,
            status=status,
            approved_by_id=int(approved_by_id),
            approved_at=approved_at,
            notes=notes,
            effective_date=effective_date,
            expiration_date=expiration_date,
        )
        return True

    def update_record_status(self, *, record_id: int, expected: RecordStatus, status: RecordStatus) -> bool:
        rec = self._state.records.get(int(record_id))
        if not rec or rec.status != expected:
            return False
        self._state.records[rec.record_id] = replace(rec, status=status)
        return True

    def list_records(
        self,
        *,
        employee_id: Optional[int] = None,
        status: Optional[RecordStatus] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> Sequence[EmployeeDisciplinaryRecord]:
        items = list(self._state.records.values())
        if employee_id is not None:
            items = [r for r in items if r.employee_id == int(employee_id)]
        if status is not None:
            items = [r for r in items if r.status == status]
        if start_date is not None:
            items = [r for r in items if r.applied_date >= start_date]
        if end_date is not None:
            items = [r for r in items if r.applied_date <= end_date]
        items.sort(key=lambda r: (r.applied_date, r.record_id), reverse=True)
        return items[:limit] if limit is not None else items

    def _matching_records(
        self,
        action_type: DisciplinaryActionType,
        statuses: Collection[RecordStatus],
        since: datetime,
    ) -> list[EmployeeDisciplinaryRecord]:
        return [
            r
            for r in self._state.records.values()
            if r.action_type == action_type and r.status in statuses and r.applied_date >= since
        ]

    def count_records(
        self,
        *,
        employee_id: int,
        action_type: DisciplinaryActionType,
        statuses: Collection[RecordStatus],
        since: datetime,
    ) -> int:
        return sum(1 for r in self._matching_records(action_type, statuses, since) if r.employee_id == int(employee_id))

    def count_records_by_employee(
        self,
        *,
        action_type: DisciplinaryActionType,
        statuses: Collection[RecordStatus],
        since: datetime,
        min_count: int = 1,
    ) -> Mapping[int, int]:
        counts: dict[int, int] = {}
        for r in self._matching_records(action_type, statuses, since):
            counts[r.employee_id] = counts.get(r.employee_id, 0) + 1
        return {emp: n for emp, n in counts.items() if n >= min_count}

    def list_expired_suspensions(self, *, now: datetime) -> Sequence[EmployeeDisciplinaryRecord]:
        return [
            r
            for r in self._state.records.values()
            if r.status == RecordStatus.ACTIVE
            and r.action_type == DisciplinaryActionType.SUSPENSION
            and r.expiration_date is not None
            and r.expiration_date < now
        ]

    def count_absences(self, *, employee_id: int, since: date) -> int:
        return sum(1 for emp, day in self._state.absences if emp == int(employee_id) and day >= since)

    def list_incident_types(self) -> Sequence[IncidentType]:
        return list(self._store.incident_types)

    def list_incident_configs(self) -> Sequence[IncidentConfig]:
        return [c for c in self._store.incident_configs if c.is_active]

    def list_incidents(self, *, start: date, end: date) -> Sequence[Incident]:
        return [i for i in self._store.incidents if start <= i.date <= end]


class InMemoryTardinessStore(TardinessStore):
    """Process-local store.

    Transactions are serialized by a single lock and run against a private copy
    of the state that replaces the committed state only on success.
    """

    def __init__(
        self,
        *,
        tardiness_rules: Iterable[TardinessRule] = (),
        escalation_rules: Iterable[DisciplinaryActionRule] = (),
        incident_types: Iterable[IncidentType] = (),
        incident_configs: Iterable[IncidentConfig] = (),
        incidents: Iterable[Incident] = (),
    ):
        self.tardiness_rules: list[TardinessRule] = list(tardiness_rules)
        self.escalation_rules: list[DisciplinaryActionRule] = list(escalation_rules)
        self.incident_types: list[IncidentType] = list(incident_types)
        self.incident_configs: list[IncidentConfig] = list(incident_configs)
        self.incidents: list[Incident] = list(incidents)
        self._state = _State()
        self._lock = threading.RLock()

    @contextmanager
    def transaction(self) -> Iterator[TardinessUnitOfWork]:
        with self._lock:
            staged = self._state.copy()
            yield _MemoryUnitOfWork(self, staged)
            self._state = staged

    def add_absence(self, employee_id: int, work_date: date) -> None:
        with self._lock:
            self._state.absences.add((int(employee_id), work_date))
