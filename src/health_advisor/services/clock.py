"""Injectable time source."""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol
from zoneinfo import ZoneInfo


class Clock(Protocol):
    """Interface for reading the current time."""

    def now(self) -> datetime:
        """Return the current timezone-aware time."""


@dataclass
class SystemClock(Clock):
    """Wall-clock time in a fixed timezone."""

    timezone: ZoneInfo

    @classmethod
    def create(cls, timezone_name: str) -> "SystemClock":
        """Create a clock for an IANA timezone name."""
        return cls(timezone=ZoneInfo(timezone_name))

    def now(self) -> datetime:
        """Return the current time in the configured timezone."""
        return datetime.now(tz=self.timezone)
