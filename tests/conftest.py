from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from src.tardiness_system.tardiness_system.core.enums import DisciplinaryActionType, TardinessType, TriggerType
from src.tardiness_system.tardiness_system.discipline.model import DisciplinaryActionRule
from src.tardiness_system.tardiness_system.processing.service import TardinessProcessingService
from src.tardiness_system.tardiness_system.store.memory_store import InMemoryTardinessStore
from src.tardiness_system.tardiness_system.tardiness.model import TardinessRule


class FixedClock:
    def __init__(self, now: datetime):
        self.current = now

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current = self.current + timedelta(**kwargs)


class RecordingNotifier:
    def __init__(self):
        self.sent = []

    def notify(self, employee_id, rule, record):
        self.sent.append((employee_id, rule.rule_id, record.record_id))


def _late_arrival_rule(**overrides) -> TardinessRule:
    data = dict(
        rule_id="tr_late_arrival",
        name="Late arrivals",
        type=TardinessType.LATE_ARRIVAL,
        start_minutes_late=1,
        end_minutes_late=15,
        accumulation_count=4,
        equivalent_formal_tardies=1,
    )
    data.update(overrides)
    return TardinessRule(**data)


def _direct_tardiness_rule(**overrides) -> TardinessRule:
    data = dict(
        rule_id="tr_direct",
        name="Direct tardiness",
        type=TardinessType.DIRECT_TARDINESS,
        start_minutes_late=20,
        end_minutes_late=None,
        accumulation_count=1,
        equivalent_formal_tardies=1,
    )
    data.update(overrides)
    return TardinessRule(**data)


def _escalation_rule(**overrides) -> DisciplinaryActionRule:
    data = dict(
        rule_id="dar_formal_5",
        name="Administrative act for 5 formal tardies",
        trigger_type=TriggerType.FORMAL_TARDIES,
        trigger_count=5,
        action_type=DisciplinaryActionType.ADMINISTRATIVE_ACT,
        period_days=30,
        requires_approval=False,
    )
    data.update(overrides)
    return DisciplinaryActionRule(**data)


@pytest.fixture
def late_rule():
    return _late_arrival_rule


@pytest.fixture
def direct_rule():
    return _direct_tardiness_rule


@pytest.fixture
def escalation_rule():
    return _escalation_rule


@pytest.fixture
def clock():
    return FixedClock(datetime(2026, 3, 10, 9, 0, 0))


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def make_service(clock, notifier):
    def _make(*, tardiness_rules=(), escalation_rules=(), **kwargs):
        store = InMemoryTardinessStore(tardiness_rules=tardiness_rules, escalation_rules=escalation_rules)
        service = TardinessProcessingService(store, clock=clock, notifier=notifier, **kwargs)
        return service, store

    return _make
