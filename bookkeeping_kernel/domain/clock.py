"""
Clock -- injectable source of "now" and "today".

Responsibility:
    Services never read the system time themselves.  The core needs it for
    creation and generation stamps, the personal account's
    ``last_updated``, default reimbursement and completion dates, and the
    as-of date of an employee's balance.

Architecture position:
    Kernel > Domain.  ``SystemClock`` is the one place that touches the
    real clock.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta, timezone


class Clock(ABC):
    """``now()`` is timezone-aware; ``today()`` is the bookkeeping date."""

    @abstractmethod
    def now(self) -> datetime: ...

    def today(self) -> date:
        return self.now().date()


class SystemClock(Clock):
    """Real time.  Timestamps in UTC, dates in the machine's local calendar."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def today(self) -> date:
        return date.today()


class DeterministicClock(Clock):
    """
    Frozen clock for tests.

    Starts at 2024-01-01 12:00 UTC unless told otherwise and moves only
    when ``advance``, ``advance_days`` or ``set_time`` is called.
    """

    DEFAULT_START = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __init__(self, start: datetime | None = None):
        self._now = start or self.DEFAULT_START

    def now(self) -> datetime:
        return self._now

    def set_time(self, moment: datetime) -> None:
        self._now = moment

    def advance(self, seconds: int = 1) -> None:
        self._now += timedelta(seconds=seconds)

    def advance_days(self, days: int) -> None:
        self._now += timedelta(days=days)
