from __future__ import annotations

from contextlib import contextmanager
from datetime import date, datetime
from typing import Collection, Iterator, Mapping, Optional, Sequence

from ..core.enums import (
    AttendanceStatus,
    CalculationMethod,
    DisciplinaryActionType,
    PeriodType,
    RecordStatus,
    TardinessType,
    ThresholdOperator,
    TriggerType,
)
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from ..discipline.model import DisciplinaryActionRule, EmployeeDisciplinaryRecord
from ..incidents.model import Incident, IncidentConfig, IncidentType
from ..tardiness.model import TardinessAccumulation, TardinessRule
from .repository import TardinessStore, TardinessUnitOfWork

_RECORD_COLUMNS = """
    record_id, employee_id, rule_id, action_type, trigger_type, trigger_count,
    applied_date, effective_date, expiration_date, suspension_days, reason,
    status, approved_by_id, approved_at, notes
"""

_ACCUMULATION_COLUMNS = """
    accumulation_id, employee_id, month, year, late_arrivals_count,
    direct_tardiness_count, formal_tardies_count, administrative_acts
"""


def _placeholders(values: Sequence[object]) -> str:
    return ",".join(["%s"] * len(values))


def _optional_int(value) -> Optional[int]:
    return int(value) if value is not None else None


def _to_incident_config(r: dict) -> IncidentConfig:
    return IncidentConfig(
        config_id=int(r["config_id"]),
        incident_type_id=int(r["incident_type_id"]),
        threshold_value=float(r["threshold_value"]),
        threshold_operator=ThresholdOperator(r["threshold_operator"]),
        period_type=PeriodType(r["period_type"]),
        department_id=_optional_int(r.get("department_id")),
        is_active=bool(r["is_active"]),
    )


def _to_tardiness_rule(r: dict) -> TardinessRule:
    end = r.get("end_minutes_late")
    return TardinessRule(
        rule_id=str(r["rule_id"]),
        name=r["name"],
        type=TardinessType(r["type"]),
        start_minutes_late=int(r["start_minutes_late"]),
        end_minutes_late=int(end) if end is not None else None,
        accumulation_count=int(r["accumulation_count"]),
        equivalent_formal_tardies=int(r["equivalent_formal_tardies"]),
        is_active=bool(r["is_active"]),
        description=r.get("description"),
    )


def _to_escalation_rule(r: dict) -> DisciplinaryActionRule:
    days = r.get("suspension_days")
    return DisciplinaryActionRule(
        rule_id=str(r["rule_id"]),
        name=r["name"],
        trigger_type=TriggerType(r["trigger_type"]),
        trigger_count=int(r["trigger_count"]),
        action_type=DisciplinaryActionType(r["action_type"]),
        period_days=int(r["period_days"]),
        suspension_days=int(days) if days is not None else None,
        requires_approval=bool(r["requires_approval"]),
        notification_enabled=bool(r["notification_enabled"]),
        is_active=bool(r["is_active"]),
        description=r.get("description"),
    )


def _to_accumulation(r: dict) -> TardinessAccumulation:
    return TardinessAccumulation(
        accumulation_id=int(r["accumulation_id"]),
        employee_id=int(r["employee_id"]),
        month=int(r["month"]),
        year=int(r["year"]),
        late_arrivals_count=int(r["late_arrivals_count"]),
        direct_tardiness_count=int(r["direct_tardiness_count"]),
        formal_tardies_count=int(r["formal_tardies_count"]),
        administrative_acts=int(r["administrative_acts"]),
    )


def _to_record(r: dict) -> EmployeeDisciplinaryRecord:
    days = r.get("suspension_days")
    approved_by = r.get("approved_by_id")
    return EmployeeDisciplinaryRecord(
        record_id=int(r["record_id"]),
        employee_id=int(r["employee_id"]),
        rule_id=r.get("rule_id"),
        action_type=DisciplinaryActionType(r["action_type"]),
        trigger_type=TriggerType(r["trigger_type"]),
        trigger_count=int(r["trigger_count"]),
        applied_date=r["applied_date"],
        reason=r["reason"],
        status=RecordStatus(r["status"]),
        effective_date=r.get("effective_date"),
        expiration_date=r.get("expiration_date"),
        suspension_days=int(days) if days is not None else None,
        approved_by_id=int(approved_by) if approved_by is not None else None,
        approved_at=r.get("approved_at"),
        notes=r.get("notes"),
    )


class _MySQLUnitOfWork(TardinessUnitOfWork):
    def __init__(self, cur):
        self._cur = cur

    def lock_employee(self, employee_id: int) -> None:
        self._cur.execute(
            "INSERT IGNORE INTO disciplinary_employee_locks(employee_id) VALUES(%s)",
            (int(employee_id),),
        )
        self._cur.execute(
            "SELECT employee_id FROM disciplinary_employee_locks WHERE employee_id=%s FOR UPDATE",
            (int(employee_id),),
        )
        fetchall(self._cur)

    def list_active_tardiness_rules(self) -> Sequence[TardinessRule]:
        self._cur.execute(
            """
            SELECT rule_id, name, description, type, start_minutes_late, end_minutes_late,
                   accumulation_count, equivalent_formal_tardies, is_active
            FROM tardiness_rules
            WHERE is_active=1
            ORDER BY start_minutes_late ASC, rule_id ASC
            """
        )
        return [_to_tardiness_rule(r) for r in fetchall(self._cur)]

    def list_escalation_rules(
        self,
        *,
        trigger_type: TriggerType,
        max_trigger_count: Optional[int] = None,
    ) -> Sequence[DisciplinaryActionRule]:
        clauses = ["is_active=1", "trigger_type=%s"]
        params: list[object] = [trigger_type.value]
        if max_trigger_count is not None:
            clauses.append("trigger_count<=%s")
            params.append(int(max_trigger_count))

        self._cur.execute(
            f"""
            SELECT rule_id, name, description, trigger_type, trigger_count, period_days,
                   action_type, suspension_days, requires_approval, notification_enabled, is_active
            FROM disciplinary_action_rules
            WHERE {" AND ".join(clauses)}
            ORDER BY trigger_count DESC, rule_id ASC
            """,
            tuple(params),
        )
        return [_to_escalation_rule(r) for r in fetchall(self._cur)]

    def get_accumulation(self, *, employee_id: int, month: int, year: int) -> Optional[TardinessAccumulation]:
        self._cur.execute(
            f"""
            SELECT {_ACCUMULATION_COLUMNS}
            FROM tardiness_accumulations
            WHERE employee_id=%s AND month=%s AND year=%s
            """,
            (int(employee_id), int(month), int(year)),
        )
        r = fetchone(self._cur)
        return _to_accumulation(r) if r else None

    def lock_accumulation(self, *, employee_id: int, month: int, year: int) -> TardinessAccumulation:
        params = (int(employee_id), int(month), int(year))
        # Idempotent insert: the unique key turns a concurrent create into a no-op.
        self._cur.execute(
            """
            INSERT INTO tardiness_accumulations(employee_id, month, year)
            VALUES(%s,%s,%s)
            ON DUPLICATE KEY UPDATE accumulation_id=accumulation_id
            """,
            params,
        )
        self._cur.execute(
            f"""
            SELECT {_ACCUMULATION_COLUMNS}
            FROM tardiness_accumulations
            WHERE employee_id=%s AND month=%s AND year=%s
            FOR UPDATE
            """,
            params,
        )
        return _to_accumulation(fetchone(self._cur))

    def save_accumulation(self, accumulation: TardinessAccumulation) -> None:
        self._cur.execute(
            """
            UPDATE tardiness_accumulations
            SET late_arrivals_count=%s, direct_tardiness_count=%s,
                formal_tardies_count=%s, administrative_acts=%s
            WHERE accumulation_id=%s
            """,
            (
                accumulation.late_arrivals_count,
                accumulation.direct_tardiness_count,
                accumulation.formal_tardies_count,
                accumulation.administrative_acts,
                accumulation.accumulation_id,
            ),
        )

    def find_recent_record(self, *, employee_id: int, rule_id: str, since: datetime) -> Optional[EmployeeDisciplinaryRecord]:
        self._cur.execute(
            f"""
            SELECT {_RECORD_COLUMNS}
            FROM employee_disciplinary_records
            WHERE employee_id=%s AND rule_id=%s AND applied_date>=%s
            ORDER BY applied_date DESC
            LIMIT 1
            """,
            (int(employee_id), rule_id, since),
        )
        r = fetchone(self._cur)
        return _to_record(r) if r else None

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
        self._cur.execute(
            """
            INSERT INTO employee_disciplinary_records(
                employee_id, rule_id, action_type, trigger_type, trigger_count,
                applied_date, effective_date, expiration_date, suspension_days, reason, status
            )
            VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
            """,
            (
                int(employee_id),
                rule_id,
                action_type.value,
                trigger_type.value,
                int(trigger_count),
                applied_date,
                effective_date,
                expiration_date,
                suspension_days,
                reason,
                status.value,
            ),
        )
        return EmployeeDisciplinaryRecord(
            record_id=int(self._cur.lastrowid),
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

    def get_record(self, record_id: int) -> Optional[EmployeeDisciplinaryRecord]:
        self._cur.execute(
            f"SELECT {_RECORD_COLUMNS} FROM employee_disciplinary_records WHERE record_id=%s",
            (int(record_id),),
        )
        r = fetchone(self._cur)
        return _to_record(r) if r else None

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
        self._cur.execute(
            """
            UPDATE employee_disciplinary_records
            SET status=%s, approved_by_id=%s, approved_at=%s, notes=%s,
                effective_date=%s, expiration_date=%s
            WHERE record_id=%s AND status=%s
            """,
            (
                status.value,
                int(approved_by_id),
                approved_at,
                notes,
                effective_date,
                expiration_date,
                int(record_id),
                RecordStatus.PENDING.value,
            ),
        )
        return self._cur.rowcount > 0

    def update_record_status(self, *, record_id: int, expected: RecordStatus, status: RecordStatus) -> bool:
        self._cur.execute(
            "UPDATE employee_disciplinary_records SET status=%s WHERE record_id=%s AND status=%s",
            (status.value, int(record_id), expected.value),
        )
        return self._cur.rowcount > 0

    def list_records(
        self,
        *,
        employee_id: Optional[int] = None,
        status: Optional[RecordStatus] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> Sequence[EmployeeDisciplinaryRecord]:
        clauses = ["1=1"]
        params: list[object] = []

        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        if start_date is not None:
            clauses.append("applied_date>=%s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("applied_date<=%s")
            params.append(end_date)

        where = " AND ".join(clauses)
        sql = f"""
            SELECT {_RECORD_COLUMNS}
            FROM employee_disciplinary_records
            WHERE {where}
            ORDER BY applied_date DESC, record_id DESC
        """
        if limit is not None:
            sql += " LIMIT %s"
            params.append(int(limit))

        self._cur.execute(sql, tuple(params))
        return [_to_record(r) for r in fetchall(self._cur)]

    def count_records(
        self,
        *,
        employee_id: int,
        action_type: DisciplinaryActionType,
        statuses: Collection[RecordStatus],
        since: datetime,
    ) -> int:
        statuses = list(statuses)
        if not statuses:
            return 0
        self._cur.execute(
            f"""
            SELECT COUNT(*) AS total
            FROM employee_disciplinary_records
            WHERE employee_id=%s AND action_type=%s AND applied_date>=%s
              AND status IN ({_placeholders(statuses)})
            """,
            (int(employee_id), action_type.value, since, *[s.value for s in statuses]),
        )
        r = fetchone(self._cur)
        return int(r["total"]) if r else 0

    def count_records_by_employee(
        self,
        *,
        action_type: DisciplinaryActionType,
        statuses: Collection[RecordStatus],
        since: datetime,
        min_count: int = 1,
    ) -> Mapping[int, int]:
        statuses = list(statuses)
        if not statuses:
            return {}
        self._cur.execute(
            f"""
            SELECT employee_id, COUNT(*) AS total
            FROM employee_disciplinary_records
            WHERE action_type=%s AND applied_date>=%s
              AND status IN ({_placeholders(statuses)})
            GROUP BY employee_id
            HAVING COUNT(*)>=%s
            """,
            (action_type.value, since, *[s.value for s in statuses], int(min_count)),
        )
        return {int(r["employee_id"]): int(r["total"]) for r in fetchall(self._cur)}

    def list_expired_suspensions(self, *, now: datetime) -> Sequence[EmployeeDisciplinaryRecord]:
        self._cur.execute(
            f"""
            SELECT {_RECORD_COLUMNS}
            FROM employee_disciplinary_records
            WHERE status=%s AND action_type=%s AND expiration_date IS NOT NULL AND expiration_date<%s
            """,
            (RecordStatus.ACTIVE.value, DisciplinaryActionType.SUSPENSION.value, now),
        )
        return [_to_record(r) for r in fetchall(self._cur)]

    def count_absences(self, *, employee_id: int, since: date) -> int:
        self._cur.execute(
            """
            SELECT COUNT(*) AS total
            FROM attendance_records
            WHERE employee_id=%s AND status=%s AND work_date>=%s
            """,
            (int(employee_id), AttendanceStatus.ABSENT.value, since),
        )
        r = fetchone(self._cur)
        return int(r["total"]) if r else 0

    def list_incident_types(self) -> Sequence[IncidentType]:
        self._cur.execute("SELECT incident_type_id, name, calculation_method FROM incident_types")
        return [
            IncidentType(
                incident_type_id=int(r["incident_type_id"]),
                name=r["name"],
                calculation_method=CalculationMethod(r["calculation_method"]),
            )
            for r in fetchall(self._cur)
        ]

    def list_incident_configs(self) -> Sequence[IncidentConfig]:
        self._cur.execute(
            """
            SELECT config_id, incident_type_id, department_id, threshold_value,
                   threshold_operator, period_type, is_active
            FROM incident_configs
            WHERE is_active=1
            ORDER BY config_id ASC
            """
        )
        return [_to_incident_config(r) for r in fetchall(self._cur)]

    def list_incidents(self, *, start: date, end: date) -> Sequence[Incident]:
        self._cur.execute(
            """
            SELECT incident_id, incident_type_id, department_id, date, value
            FROM incidents
            WHERE date BETWEEN %s AND %s
            """,
            (start, end),
        )
        return [
            Incident(
                incident_id=int(r["incident_id"]),
                incident_type_id=int(r["incident_type_id"]),
                date=r["date"],
                value=float(r["value"]),
                department_id=_optional_int(r.get("department_id")),
            )
            for r in fetchall(self._cur)
        ]


class MySQLTardinessStore(TardinessStore):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @contextmanager
    def transaction(self) -> Iterator[TardinessUnitOfWork]:
        with db_cursor(self._conn_factory) as (_, cur):
            yield _MySQLUnitOfWork(cur)
