"""Clock abstraction so lifecycle and stats code can be driven deterministically."""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone


class Clock(ABC):
    """Source of the current instant."""

    @abstractmethod
    def now(self) -> datetime:
        """Return the current timezone-aware UTC instant."""
        pass


class SystemClock(Clock):
    """Wall clock in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock(Clock):
    """Clock frozen at a given instant, moved only explicitly."""

    def __init__(self, instant: datetime):
        self._instant = _as_utc(instant)

    def now(self) -> datetime:
        return self._instant

    def set(self, instant: datetime) -> None:
        self._instant = _as_utc(instant)

    def advance(self, **delta) -> datetime:
        """Move forward by ``timedelta(**delta)`` and return the new instant."""
        self._instant = self._instant + timedelta(**delta)
        return self._instant


def _as_utc(instant: datetime) -> datetime:
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)
