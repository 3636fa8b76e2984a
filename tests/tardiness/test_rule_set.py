from __future__ import annotations

import logging

import pytest

from src.tardiness_system.tardiness_system.core.exceptions import RuleOverlapError
from src.tardiness_system.tardiness_system.tardiness.rules import TardinessRuleSet


def test_resolve_picks_the_rule_covering_the_value(late_rule, direct_rule):
    rules = TardinessRuleSet([direct_rule(), late_rule()])

    assert rules.resolve(1).rule_id == "tr_late_arrival"
    assert rules.resolve(15).rule_id == "tr_late_arrival"
    assert rules.resolve(20).rule_id == "tr_direct"
    assert rules.resolve(600).rule_id == "tr_direct"


def test_gap_between_ranges_resolves_to_none(late_rule, direct_rule):
    rules = TardinessRuleSet([late_rule(), direct_rule()])

    assert rules.resolve(0) is None
    assert rules.resolve(17) is None


def test_inactive_rules_are_ignored(late_rule):
    rules = TardinessRuleSet([late_rule(is_active=False)])

    assert rules.rules == ()
    assert rules.resolve(5) is None


def test_overlap_resolves_to_lowest_start_and_warns(late_rule, direct_rule, caplog):
    wide = direct_rule(rule_id="tr_wide", start_minutes_late=10)

    with caplog.at_level(logging.WARNING):
        rules = TardinessRuleSet([wide, late_rule()])

    assert [(a.rule_id, b.rule_id) for a, b in rules.overlaps()] == [("tr_late_arrival", "tr_wide")]
    assert "overlap" in caplog.text
    assert rules.resolve(12).rule_id == "tr_late_arrival"
    assert rules.resolve(16).rule_id == "tr_wide"


def test_equal_starts_break_ties_by_rule_id(late_rule):
    a = late_rule(rule_id="b_rule")
    b = late_rule(rule_id="a_rule")

    assert TardinessRuleSet([a, b]).resolve(3).rule_id == "a_rule"


def test_strict_mode_rejects_overlaps(late_rule, direct_rule):
    with pytest.raises(RuleOverlapError):
        TardinessRuleSet([late_rule(), direct_rule(start_minutes_late=15)], strict=True)


def test_disjoint_rules_pass_strict_validation(late_rule, direct_rule):
    rules = TardinessRuleSet([late_rule(), direct_rule()], strict=True)

    assert rules.overlaps() == []
