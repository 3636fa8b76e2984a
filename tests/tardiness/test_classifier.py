from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from src.tardiness_system.tardiness_system.core.exceptions import ValidationError
from src.tardiness_system.tardiness_system.tardiness.classifier import minutes_late


SCHEDULED = datetime(2026, 3, 10, 8, 0, 0)


def test_on_time_and_early_check_ins_are_zero():
    assert minutes_late(SCHEDULED, SCHEDULED) == 0
    assert minutes_late(datetime(2026, 3, 10, 7, 45), SCHEDULED) == 0


def test_partial_minutes_are_truncated():
    assert minutes_late(datetime(2026, 3, 10, 8, 0, 59), SCHEDULED) == 0
    assert minutes_late(datetime(2026, 3, 10, 8, 5, 30), SCHEDULED) == 5


def test_lateness_across_hours():
    assert minutes_late(datetime(2026, 3, 10, 9, 30), SCHEDULED) == 90


def test_offset_aware_pairs_compare_across_zones():
    check_in = datetime(2026, 3, 10, 8, 20, tzinfo=timezone(timedelta(hours=1)))
    scheduled = datetime(2026, 3, 10, 7, 0, tzinfo=timezone.utc)

    assert minutes_late(check_in, scheduled) == 20


@pytest.mark.parametrize(
    "check_in, scheduled",
    [
        (datetime(2026, 3, 10, 8, 35, tzinfo=timezone.utc), SCHEDULED),
        (datetime(2026, 3, 10, 8, 35), SCHEDULED.replace(tzinfo=timezone.utc)),
    ],
)
def test_mixing_aware_and_naive_timestamps_is_rejected(check_in, scheduled):
    with pytest.raises(ValidationError):
        minutes_late(check_in, scheduled)
