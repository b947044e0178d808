"""Time source used by the quota tracker.

The tracker compares calendar dates in UTC. Taking the clock as a
dependency lets tests move across a day boundary without waiting for one.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timezone


class Clock(ABC):
    """Source of the current UTC time and date."""

    @abstractmethod
    def now(self) -> datetime:
        """Current time, timezone-aware in UTC."""

    def today(self) -> date:
        """Current calendar date in UTC."""
        return self.now().date()


class SystemClock(Clock):
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


def utc_now() -> datetime:
    """Timezone-aware current time, for response timestamps."""
    return datetime.now(timezone.utc)
