"""Clock and calendar arithmetic.

Everything crossing the domain boundary is a calendar date. The clock is
injected so "today" is deterministic in tests and overridable from the CLI.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta, timezone
from typing import Protocol

from rms.domain.model.value_objects import DateRange

# Occupancy window around an event: the dress leaves two days before the
# event and comes back the day after.
EVENT_LEAD_DAYS = 2
EVENT_TRAIL_DAYS = 1


class Clock(Protocol):

    def today(self) -> date: ...

    def now(self) -> datetime: ...


class SystemClock:

    def today(self) -> date:
        return self.now().date()

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """A clock frozen on one day (noon UTC)."""

    def __init__(self, day: date) -> None:
        self._day = day

    def today(self) -> date:
        return self._day

    def now(self) -> datetime:
        return datetime(self._day.year, self._day.month, self._day.day, 12, tzinfo=timezone.utc)

    def advance(self, days: int = 1) -> None:
        self._day = add_days(self._day, days)


def day_bucket(value: date | datetime) -> date:
    """Drop the time of day, keeping the calendar day the value falls on."""
    if isinstance(value, datetime):
        return value.date()
    return value


def ranges_overlap(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    """Inclusive-bounds interval overlap."""
    return a_start <= b_end and a_end >= b_start


def add_days(day: date, n: int) -> date:
    return day + timedelta(days=n)


def days_between(start: date, end: date) -> int:
    """Inclusive day count between two dates (0 when end < start)."""
    return max((end - start).days + 1, 0)


def month_days(year: int, month: int) -> list[date]:
    _, last = calendar.monthrange(year, month)
    return [date(year, month, d) for d in range(1, last + 1)]


def event_window(event_date: date) -> DateRange:
    return DateRange(
        start=add_days(event_date, -EVENT_LEAD_DAYS),
        end=add_days(event_date, EVENT_TRAIL_DAYS),
    )
