from __future__ import annotations

from datetime import date, datetime
from typing import Collection, ContextManager, Mapping, Optional, Protocol, Sequence

from ..core.enums import DisciplinaryActionType, RecordStatus, TriggerType
from ..discipline.model import DisciplinaryActionRule, EmployeeDisciplinaryRecord
from ..incidents.model import Incident, IncidentConfig, IncidentType
from ..tardiness.model import TardinessAccumulation, TardinessRule


class TardinessUnitOfWork(Protocol):
    """Reads and writes of one transaction.

    Everything written through a unit of work becomes visible atomically when
    the surrounding ``TardinessStore.transaction()`` block exits normally, and
    is discarded when it raises.
    """

    # Locking
    def lock_employee(self, employee_id: int) -> None:
        """Serialize engine writes for one employee until the transaction ends."""

        raise NotImplementedError

    # Rules
    def list_active_tardiness_rules(self) -> Sequence[TardinessRule]:
        raise NotImplementedError

    def list_escalation_rules(
        self,
        *,
        trigger_type: TriggerType,
        max_trigger_count: Optional[int] = None,
    ) -> Sequence[DisciplinaryActionRule]:
        """Active rules for ``trigger_type`` (only ``trigger_count <= max_trigger_count``
        when a maximum is given), highest ``trigger_count`` first."""

        raise NotImplementedError

    # Accumulations
    def get_accumulation(self, *, employee_id: int, month: int, year: int) -> Optional[TardinessAccumulation]:
        raise NotImplementedError

    def lock_accumulation(self, *, employee_id: int, month: int, year: int) -> TardinessAccumulation:
        """Load-or-create the row with zeroed counters and hold it for update."""

        raise NotImplementedError

    def save_accumulation(self, accumulation: TardinessAccumulation) -> None:
        raise NotImplementedError

    # Disciplinary records
    def find_recent_record(
        self,
        *,
        employee_id: int,
        rule_id: str,
        since: datetime,
    ) -> Optional[EmployeeDisciplinaryRecord]:
        raise NotImplementedError

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
        raise NotImplementedError

    def get_record(self, record_id: int) -> Optional[EmployeeDisciplinaryRecord]:
        raise NotImplementedError

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
        """Compare-and-set: only applies while the record is still PENDING."""

        raise NotImplementedError

    def update_record_status(self, *, record_id: int, expected: RecordStatus, status: RecordStatus) -> bool:
        raise NotImplementedError

    def list_records(
        self,
        *,
        employee_id: Optional[int] = None,
        status: Optional[RecordStatus] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> Sequence[EmployeeDisciplinaryRecord]:
        """Newest ``applied_date`` first."""

        raise NotImplementedError

    def count_records(
        self,
        *,
        employee_id: int,
        action_type: DisciplinaryActionType,
        statuses: Collection[RecordStatus],
        since: datetime,
    ) -> int:
        raise NotImplementedError

    def count_records_by_employee(
        self,
        *,
        action_type: DisciplinaryActionType,
        statuses: Collection[RecordStatus],
        since: datetime,
        min_count: int = 1,
    ) -> Mapping[int, int]:
        """employee_id -> number of matching records, for employees with at least ``min_count``."""

        raise NotImplementedError

    def list_expired_suspensions(self, *, now: datetime) -> Sequence[EmployeeDisciplinaryRecord]:
        raise NotImplementedError

    # Attendance (owned by the check-in path, read-only here)
    def count_absences(self, *, employee_id: int, since: date) -> int:
        raise NotImplementedError

    # Incidents (read-only)
    def list_incident_types(self) -> Sequence[IncidentType]:
        raise NotImplementedError

    def list_incident_configs(self) -> Sequence[IncidentConfig]:
        """Active configurations only."""

        raise NotImplementedError

    def list_incidents(self, *, start: date, end: date) -> Sequence[Incident]:
        raise NotImplementedError


class TardinessStore(Protocol):
    def transaction(self) -> ContextManager[TardinessUnitOfWork]:
        raise NotImplementedError
