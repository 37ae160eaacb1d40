"""
Time source for allocation snapshots.

The calculation service receives a ``Clock`` and stamps each
``AllocationSnapshot`` with ``clock.now()``.  Engines take no clock at
all: a calculation depends only on its inputs.
"""

from abc import ABC, abstractmethod
from datetime import UTC, datetime, timedelta

DEFAULT_FIXED_TIME = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


class Clock(ABC):
    """Source of timezone-aware UTC timestamps."""

    @abstractmethod
    def now(self) -> datetime: ...


class SystemClock(Clock):

    def now(self) -> datetime:
        return datetime.now(UTC)


class DeterministicClock(Clock):
    """Clock frozen at a chosen instant; moves only when told to."""

    def __init__(self, fixed_time: datetime | None = None):
        self._current = fixed_time or DEFAULT_FIXED_TIME

    def now(self) -> datetime:
        return self._current

    def set_time(self, time: datetime) -> None:
        self._current = time

    def advance(self, seconds: int = 1) -> None:
        self._current += timedelta(seconds=seconds)
