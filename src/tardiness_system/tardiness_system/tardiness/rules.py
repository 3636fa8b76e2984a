from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from ..core.exceptions import RuleOverlapError
from .model import TardinessRule

logger = logging.getLogger(__name__)


def _ranges_overlap(a: TardinessRule, b: TardinessRule) -> bool:
    # a starts first (sorted), so they overlap when a is unbounded or reaches b's start.
    return a.end_minutes_late is None or a.end_minutes_late >= b.start_minutes_late


class TardinessRuleSet:
    """Active lateness rules as a sorted interval list.

    Resolution is first match by ascending ``start_minutes_late`` (ties broken by
    ``rule_id``), so overlapping ranges resolve deterministically; overlaps are
    reported when the set is built.
    """

    def __init__(self, rules: Iterable[TardinessRule], *, strict: bool = False):
        active = [r for r in rules if r.is_active]
        self._rules: list[TardinessRule] = sorted(active, key=lambda r: (r.start_minutes_late, r.rule_id))
        self.validate(strict=strict)

    @property
    def rules(self) -> Sequence[TardinessRule]:
        return tuple(self._rules)

    def overlaps(self) -> list[tuple[TardinessRule, TardinessRule]]:
        found: list[tuple[TardinessRule, TardinessRule]] = []
        for i, first in enumerate(self._rules):
            for second in self._rules[i + 1:]:
                if not _ranges_overlap(first, second):
                    # sorted by start: later rules start even further right
                    break
                found.append((first, second))
        return found

    def validate(self, *, strict: bool = False) -> None:
        for first, second in self.overlaps():
            message = (
                f"Tardiness rules {first.rule_id!r} and {second.rule_id!r} overlap; "
                f"{first.rule_id!r} wins for shared values"
            )
            if strict:
                raise RuleOverlapError(message)
            logger.warning(message)

    def resolve(self, minutes_late: int) -> Optional[TardinessRule]:
        for rule in self._rules:
            if minutes_late < rule.start_minutes_late:
                # nothing further right can contain the value
                return None
            if rule.contains(minutes_late):
                return rule
        return None
