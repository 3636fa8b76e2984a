from __future__ import annotations

from datetime import datetime, timedelta

from src.tardiness_system.tardiness_system.core.enums import DisciplinaryActionType, RecordStatus, TriggerType
from src.tardiness_system.tardiness_system.discipline.dedup import DeduplicationGuard
from src.tardiness_system.tardiness_system.discipline.resolver import DisciplinaryRuleResolver
from src.tardiness_system.tardiness_system.store.memory_store import InMemoryTardinessStore


def _absence_rules(escalation_rule):
    return [
        escalation_rule(
            rule_id=f"dar_absence_{n}",
            name=f"{n} absences",
            trigger_type=TriggerType.UNJUSTIFIED_ABSENCES,
            trigger_count=n,
            action_type=action,
        )
        for n, action in (
            (1, DisciplinaryActionType.WRITTEN_WARNING),
            (2, DisciplinaryActionType.ADMINISTRATIVE_ACT),
            (3, DisciplinaryActionType.SUSPENSION),
            (4, DisciplinaryActionType.TERMINATION),
        )
    ]


def test_highest_qualifying_threshold_wins(escalation_rule):
    store = InMemoryTardinessStore(escalation_rules=_absence_rules(escalation_rule))
    resolver = DisciplinaryRuleResolver()

    with store.transaction() as uow:
        assert resolver.resolve(uow, TriggerType.UNJUSTIFIED_ABSENCES, 1).rule_id == "dar_absence_1"
        assert resolver.resolve(uow, TriggerType.UNJUSTIFIED_ABSENCES, 3).rule_id == "dar_absence_3"
        assert resolver.resolve(uow, TriggerType.UNJUSTIFIED_ABSENCES, 9).rule_id == "dar_absence_4"


def test_no_rule_below_lowest_threshold_or_for_other_triggers(escalation_rule):
    store = InMemoryTardinessStore(escalation_rules=[escalation_rule()])
    resolver = DisciplinaryRuleResolver()

    with store.transaction() as uow:
        assert resolver.resolve(uow, TriggerType.FORMAL_TARDIES, 4) is None
        assert resolver.resolve(uow, TriggerType.FORMAL_TARDIES, 0) is None
        assert resolver.resolve(uow, TriggerType.UNJUSTIFIED_ABSENCES, 10) is None


def test_inactive_rules_never_match(escalation_rule):
    store = InMemoryTardinessStore(escalation_rules=[escalation_rule(is_active=False)])

    with store.transaction() as uow:
        assert DisciplinaryRuleResolver().resolve(uow, TriggerType.FORMAL_TARDIES, 5) is None


def test_equal_thresholds_break_ties_by_rule_id(escalation_rule):
    store = InMemoryTardinessStore(
        escalation_rules=[escalation_rule(rule_id="dar_z"), escalation_rule(rule_id="dar_a")]
    )

    with store.transaction() as uow:
        assert DisciplinaryRuleResolver().resolve(uow, TriggerType.FORMAL_TARDIES, 5).rule_id == "dar_a"


def test_dedup_window_is_rolling_and_counts_cancelled_records():
    store = InMemoryTardinessStore()
    applied = datetime(2026, 3, 1, 10, 0)
    guard = DeduplicationGuard()

    with store.transaction() as uow:
        uow.create_record(
            employee_id=7,
            rule_id="dar_formal_5",
            action_type=DisciplinaryActionType.ADMINISTRATIVE_ACT,
            trigger_type=TriggerType.FORMAL_TARDIES,
            trigger_count=5,
            applied_date=applied,
            reason="test",
            status=RecordStatus.CANCELLED,
        )

    with store.transaction() as uow:
        inside = applied + timedelta(days=30)
        outside = applied + timedelta(days=30, seconds=1)
        assert guard.has_recent_record(uow, employee_id=7, rule_id="dar_formal_5", period_days=30, now=inside)
        assert not guard.has_recent_record(uow, employee_id=7, rule_id="dar_formal_5", period_days=30, now=outside)
        assert not guard.has_recent_record(uow, employee_id=8, rule_id="dar_formal_5", period_days=30, now=inside)
        assert not guard.has_recent_record(uow, employee_id=7, rule_id="dar_other", period_days=30, now=inside)


def test_zero_threshold_rule_matches_a_zero_count(escalation_rule):
    store = InMemoryTardinessStore(escalation_rules=[escalation_rule(rule_id="dar_always", trigger_count=0)])

    with store.transaction() as uow:
        assert DisciplinaryRuleResolver().resolve(uow, TriggerType.FORMAL_TARDIES, 0).rule_id == "dar_always"


def test_windowed_rules_count_inside_their_own_period(escalation_rule):
    now = datetime(2026, 3, 10, 9, 0)
    act_dates = [now - timedelta(days=d) for d in (1, 20, 60)]
    rules = [
        escalation_rule(
            rule_id="dar_acts_2_in_30",
            trigger_type=TriggerType.ADMINISTRATIVE_ACTS,
            trigger_count=2,
            action_type=DisciplinaryActionType.SUSPENSION,
            period_days=30,
        ),
        escalation_rule(
            rule_id="dar_acts_3_in_90",
            trigger_type=TriggerType.ADMINISTRATIVE_ACTS,
            trigger_count=3,
            action_type=DisciplinaryActionType.TERMINATION,
            period_days=90,
        ),
    ]
    store = InMemoryTardinessStore(escalation_rules=rules)
    windows = []

    def count_since(since):
        windows.append(since)
        return sum(1 for d in act_dates if d >= since)

    with store.transaction() as uow:
        rule, count = DisciplinaryRuleResolver().resolve_windowed(
            uow, TriggerType.ADMINISTRATIVE_ACTS, now=now, count_since=count_since
        )
        assert (rule.rule_id, count) == ("dar_acts_3_in_90", 3)

        act_dates.pop()
        rule, count = DisciplinaryRuleResolver().resolve_windowed(
            uow, TriggerType.ADMINISTRATIVE_ACTS, now=now, count_since=count_since
        )
        assert (rule.rule_id, count) == ("dar_acts_2_in_30", 2)

        act_dates.clear()
        assert (
            DisciplinaryRuleResolver().resolve_windowed(
                uow, TriggerType.ADMINISTRATIVE_ACTS, now=now, count_since=count_since
            )
            is None
        )

    assert sorted(set(windows)) == [now - timedelta(days=90), now - timedelta(days=30)]
