from __future__ import annotations

from datetime import date, datetime
from typing import Protocol


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 timestamp (``2026-02-01T08:35:00``)."""
    return datetime.fromisoformat(value)


def is_aware(value: datetime) -> bool:
    return value.tzinfo is not None and value.utcoffset() is not None


def to_naive_local(value: datetime) -> datetime:
    """Convert an offset-aware timestamp to naive local time; naive values pass through."""
    if not is_aware(value):
        return value
    return value.astimezone().replace(tzinfo=None)


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def month_of(value: date) -> tuple[int, int]:
    """(month, year) of the accumulation row a timestamp belongs to."""
    return value.month, value.year


class Clock(Protocol):
    def now(self) -> datetime:
        raise NotImplementedError


class SystemClock:
    def now(self) -> datetime:
        return now_local()
