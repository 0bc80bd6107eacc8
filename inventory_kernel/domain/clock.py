"""
Injectable time source.

Every "now" in the engines (expiration tiers, usage windows, reorder
dates) comes from a ``Clock`` passed to the constructor.  Clock times are
always timezone-aware: calendar-day comparisons use the datetime's own
zone, so a naive datetime would silently change duplicate matching.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone

DEFAULT_START = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def _require_aware(when: datetime) -> datetime:
    if when.tzinfo is None or when.utcoffset() is None:
        raise ValueError(f"clock time must be timezone-aware, got {when!r}")
    return when


class Clock(ABC):
    @abstractmethod
    def now(self) -> datetime:
        """Current instant, timezone-aware."""


class SystemClock(Clock):
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Clock that only moves when told to.

    Repeated ``now()`` calls return the same instant until ``advance``,
    ``advance_days`` or ``set_time`` moves it.

    Raises:
        ValueError: If given a naive datetime.
    """

    def __init__(self, start: datetime | None = None):
        self._now = _require_aware(start) if start is not None else DEFAULT_START

    def now(self) -> datetime:
        return self._now

    def set_time(self, when: datetime) -> None:
        self._now = _require_aware(when)

    def advance(self, seconds: float = 1) -> None:
        self._now += timedelta(seconds=seconds)

    def advance_days(self, days: int) -> None:
        self._now += timedelta(days=days)
