from __future__ import annotations

import pytest

from src.tardiness_system.tardiness_system.core.exceptions import ValidationError
from src.tardiness_system.tardiness_system.store.memory_store import InMemoryTardinessStore
from src.tardiness_system.tardiness_system.tardiness.accumulator import MonthlyAccumulator


@pytest.fixture
def store():
    return InMemoryTardinessStore()


def _counters(store, employee_id=7, month=3, year=2026):
    with store.transaction() as uow:
        acc = uow.get_accumulation(employee_id=employee_id, month=month, year=year)
    return acc.snapshot().as_dict() if acc else None


def test_late_arrivals_convert_on_the_nth_event(store, late_rule):
    accumulator = MonthlyAccumulator()
    rule = late_rule(accumulation_count=3, equivalent_formal_tardies=2)

    results = []
    for _ in range(3):
        with store.transaction() as uow:
            results.append(accumulator.apply_rule(uow, employee_id=7, month=3, year=2026, rule=rule))

    assert [r.conversion_occurred for r in results] == [False, False, True]
    assert results[-1].formal_tardies_added == 2
    assert _counters(store) == {
        "late_arrivals_count": 0,
        "direct_tardiness_count": 0,
        "formal_tardies_count": 2,
        "administrative_acts": 0,
    }


def test_direct_tardiness_converts_every_time(store, direct_rule):
    accumulator = MonthlyAccumulator()

    for _ in range(2):
        with store.transaction() as uow:
            result = accumulator.apply_rule(uow, employee_id=7, month=3, year=2026, rule=direct_rule())
        assert result.conversion_occurred

    counters = _counters(store)
    assert counters["direct_tardiness_count"] == 2
    assert counters["formal_tardies_count"] == 2


def test_months_are_counted_separately(store, direct_rule):
    accumulator = MonthlyAccumulator()
    with store.transaction() as uow:
        accumulator.apply_rule(uow, employee_id=7, month=3, year=2026, rule=direct_rule())
        accumulator.apply_rule(uow, employee_id=7, month=4, year=2026, rule=direct_rule())

    assert _counters(store, month=3)["formal_tardies_count"] == 1
    assert _counters(store, month=4)["formal_tardies_count"] == 1
    assert _counters(store, month=5) is None


def test_administrative_act_increments_only_its_counter(store):
    with store.transaction() as uow:
        updated = MonthlyAccumulator().add_administrative_act(uow, employee_id=7, month=3, year=2026)

    assert updated.administrative_acts == 1
    assert _counters(store)["formal_tardies_count"] == 0


def test_correct_overwrites_given_counters_only(store, direct_rule):
    accumulator = MonthlyAccumulator()
    with store.transaction() as uow:
        accumulator.apply_rule(uow, employee_id=7, month=3, year=2026, rule=direct_rule())
        accumulator.correct(uow, employee_id=7, month=3, year=2026, formal_tardies_count=0)

    counters = _counters(store)
    assert counters["formal_tardies_count"] == 0
    assert counters["direct_tardiness_count"] == 1


@pytest.mark.parametrize(
    "kwargs",
    [
        {"late_arrivals_count": -1},
        {"formal_tardies_count": 1.5},
        {"administrative_acts": True},
        {"direct_tardiness_count": "2"},
    ],
)
def test_correct_rejects_invalid_counters_without_writing(store, kwargs):
    with pytest.raises(ValidationError):
        with store.transaction() as uow:
            MonthlyAccumulator().correct(uow, employee_id=7, month=3, year=2026, **kwargs)

    assert _counters(store) is None


def test_correct_rejects_invalid_month(store):
    with pytest.raises(ValidationError):
        with store.transaction() as uow:
            MonthlyAccumulator().correct(uow, employee_id=7, month=13, year=2026, late_arrivals_count=0)
