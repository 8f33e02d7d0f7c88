"""Unit tests for calendar arithmetic."""

from datetime import date, datetime, timezone

from rms.domain.clock import (
    FixedClock,
    add_days,
    day_bucket,
    days_between,
    event_window,
    month_days,
    ranges_overlap,
)


class TestDayArithmetic:

    def test_add_days_crosses_month_boundary(self):
        assert add_days(date(2025, 1, 30), 3) == date(2025, 2, 2)

    def test_add_days_leap_year(self):
        assert add_days(date(2024, 2, 28), 1) == date(2024, 2, 29)
        assert add_days(date(2025, 2, 28), 1) == date(2025, 3, 1)

    def test_add_days_crosses_year(self):
        assert add_days(date(2025, 12, 31), 1) == date(2026, 1, 1)

    def test_days_between_is_inclusive(self):
        assert days_between(date(2025, 6, 10), date(2025, 6, 12)) == 3
        assert days_between(date(2025, 6, 12), date(2025, 6, 10)) == 0

    def test_month_days_handles_february(self):
        assert len(month_days(2024, 2)) == 29
        assert len(month_days(2025, 2)) == 28
        assert month_days(2025, 4)[-1] == date(2025, 4, 30)

    def test_day_bucket_drops_time(self):
        assert day_bucket(datetime(2025, 6, 10, 23, 59, tzinfo=timezone.utc)) == date(2025, 6, 10)
        assert day_bucket(date(2025, 6, 10)) == date(2025, 6, 10)

    def test_ranges_overlap_inclusive(self):
        d = date
        assert ranges_overlap(d(2025, 6, 10), d(2025, 6, 12), d(2025, 6, 12), d(2025, 6, 14))
        assert not ranges_overlap(d(2025, 6, 10), d(2025, 6, 12), d(2025, 6, 13), d(2025, 6, 14))


class TestEventWindow:

    def test_window_spans_two_days_before_to_one_after(self):
        window = event_window(date(2025, 3, 1))
        assert window.start == date(2025, 2, 27)
        assert window.end == date(2025, 3, 2)


class TestFixedClock:

    def test_today_and_advance(self):
        clock = FixedClock(date(2025, 6, 30))
        assert clock.today() == date(2025, 6, 30)
        clock.advance()
        assert clock.today() == date(2025, 7, 1)
        assert clock.now().date() == date(2025, 7, 1)
