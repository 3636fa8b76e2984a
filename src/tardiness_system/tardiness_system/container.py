from __future__ import annotations

from dataclasses import dataclass

from .core.constants import (
    DEFAULT_ABSENCE_LOOKBACK_DAYS,
    DEFAULT_MAX_TRANSACTION_RETRIES,
    DEFAULT_TERMINATION_RISK_ACTS,
    DEFAULT_TERMINATION_RISK_DAYS,
)
from .database.connection import DBConfig, DatabaseConnection
from .discipline.notifications import LoggingNotifier, Notifier
from .incidents.service import IncidentThresholdService
from .processing.service import TardinessProcessingService
from .store.memory_store import InMemoryTardinessStore
from .store.mysql_store import MySQLTardinessStore
from .store.repository import TardinessStore


@dataclass(frozen=True)
class Container:
    store: TardinessStore
    notifier: Notifier

    processing_service: TardinessProcessingService
    incident_service: IncidentThresholdService


def build_store(*, backend: str, db_config: dict | None = None) -> TardinessStore:
    backend = (backend or "mysql").strip().lower()
    if backend == "memory":
        return InMemoryTardinessStore()
    if backend == "mysql":
        if not db_config:
            raise ValueError("DB_CONFIG is required for the mysql store backend")
        conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
        return MySQLTardinessStore(conn)
    raise ValueError(f"Unknown STORE_BACKEND: {backend!r}")


def build_container(settings, *, store: TardinessStore | None = None, notifier: Notifier | None = None) -> Container:
    store = store or build_store(
        backend=getattr(settings, "STORE_BACKEND", "mysql"),
        db_config=getattr(settings, "DB_CONFIG", None),
    )
    notifier = notifier or LoggingNotifier()

    processing_service = TardinessProcessingService(
        store,
        notifier=notifier,
        max_retries=int(getattr(settings, "MAX_TRANSACTION_RETRIES", DEFAULT_MAX_TRANSACTION_RETRIES)),
        absence_lookback_days=int(getattr(settings, "ABSENCE_LOOKBACK_DAYS", DEFAULT_ABSENCE_LOOKBACK_DAYS)),
        termination_risk_acts=int(getattr(settings, "TERMINATION_RISK_ACTS", DEFAULT_TERMINATION_RISK_ACTS)),
        termination_risk_days=int(getattr(settings, "TERMINATION_RISK_DAYS", DEFAULT_TERMINATION_RISK_DAYS)),
        strict_rule_ranges=bool(getattr(settings, "STRICT_RULE_RANGES", False)),
    )

    return Container(
        store=store,
        notifier=notifier,
        processing_service=processing_service,
        incident_service=IncidentThresholdService(store),
    )
