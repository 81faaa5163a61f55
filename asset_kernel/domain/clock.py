"""
Clock -- the report date source.

Responsibility:
    Supplies "today" to the registry service so that "current book value"
    and as-of summaries are computed against an injected date rather than
    the machine clock.  Engines never see a clock; they take the as-of
    date as a parameter.

Architecture position:
    Kernel > Domain.  ``SystemClock`` is the only place that reads the
    wall clock.
"""

import calendar
from abc import ABC, abstractmethod
from datetime import date, datetime, time, timedelta, timezone


class Clock(ABC):
    """Source of the current reporting date."""

    @abstractmethod
    def now(self) -> datetime:
        """Timezone-aware current instant."""

    def today(self) -> date:
        return self.now().date()


class SystemClock(Clock):
    """Wall clock, in UTC unless told otherwise."""

    def __init__(self, tz: timezone = timezone.utc):
        self._tz = tz

    def now(self) -> datetime:
        return datetime.now(self._tz)


class DeterministicClock(Clock):
    """
    Clock pinned to a chosen date for tests and report re-runs.

    Accepts a ``date`` (read as midday UTC) or an aware ``datetime``.
    Stays put until moved with ``set_date``, ``advance`` or
    ``advance_to_month_end``.
    """

    def __init__(self, fixed: date | datetime | None = None):
        self._now = self._as_datetime(fixed or date(2024, 1, 1))

    @staticmethod
    def _as_datetime(value: date | datetime) -> datetime:
        if isinstance(value, datetime):
            return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
        return datetime.combine(value, time(12, 0), tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._now

    def set_date(self, value: date | datetime) -> None:
        self._now = self._as_datetime(value)

    def advance(self, days: int = 1) -> None:
        self._now += timedelta(days=days)

    def advance_to_month_end(self) -> date:
        """Move to the last day of the current month; returns the new date."""
        today = self.today()
        last_day = calendar.monthrange(today.year, today.month)[1]
        self._now = self._now.replace(day=last_day)
        return self.today()
