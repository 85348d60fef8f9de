"""
Clock -- Deterministic time abstraction.

Responsibility:
    Provides an injectable clock interface so that domain, service and batch
    code never call ``datetime.now()`` or ``date.today()`` directly.  Lease
    status thresholds, overdue detection and due-day validation all depend on
    "today"; tests pin it with DeterministicClock.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O (except SystemClock,
    which is the one sanctioned I/O boundary for time).
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta, timezone


class Clock(ABC):
    """
    Abstract clock interface.

    Contract:
        Services that need the current time receive a Clock via constructor
        injection.

    Guarantees:
        - ``now()`` returns a timezone-aware ``datetime``.
        - ``today()`` is the calendar date of ``now()``.
    """

    @abstractmethod
    def now(self) -> datetime:
        """Get the current time."""
        ...

    def now_utc(self) -> datetime:
        return self.now().astimezone(timezone.utc)

    def today(self) -> date:
        return self.now().date()


class SystemClock(Clock):
    """Production clock that returns actual system time (UTC)."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Test clock with controlled time.

    Guarantees:
        - ``now()`` returns the same value on repeated calls until
          ``advance()``, ``advance_days()`` or ``set_time()`` is called.
    """

    def __init__(self, fixed_time: datetime | None = None):
        """
        Args:
            fixed_time: Starting time.  Defaults to 2025-01-01 12:00 UTC.
        """
        self._fixed_time = fixed_time or datetime(
            2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc
        )
        self._advance_seconds = 0

    @classmethod
    def on(cls, day: date) -> "DeterministicClock":
        """Clock fixed at noon UTC on ``day``."""
        return cls(datetime(day.year, day.month, day.day, 12, 0, 0, tzinfo=timezone.utc))

    def now(self) -> datetime:
        return self._fixed_time + timedelta(seconds=self._advance_seconds)

    def set_time(self, time: datetime) -> None:
        self._fixed_time = time
        self._advance_seconds = 0

    def set_date(self, day: date) -> None:
        self.set_time(
            datetime(day.year, day.month, day.day, 12, 0, 0, tzinfo=timezone.utc)
        )

    def advance(self, seconds: int = 1) -> None:
        self._advance_seconds += seconds

    def advance_days(self, days: int) -> None:
        self.advance(days * 86400)

    def tick(self) -> datetime:
        """Advance by 1 second and return new time."""
        self.advance(1)
        return self.now()
