from __future__ import annotations

from datetime import datetime

from ..common.datetime_utils import is_aware
from ..core.exceptions import ValidationError


def minutes_late(check_in_time: datetime, scheduled_time: datetime) -> int:
    """Whole minutes between schedule and check-in, never negative.

    Partial minutes are truncated: 08:00:59 against 08:00 is 0 minutes late.
    Both timestamps must carry a UTC offset, or neither.
    """
    if is_aware(check_in_time) != is_aware(scheduled_time):
        raise ValidationError("check_in_time and scheduled_time must both include a UTC offset or both omit it")
    delta = check_in_time - scheduled_time
    minutes = int(delta.total_seconds() // 60)
    return max(0, minutes)
