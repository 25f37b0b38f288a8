"""Calendar helper tests."""

from datetime import date, datetime, timedelta, timezone

import pytest

from guardian.clock import (
    days_ago,
    is_same_day,
    is_yesterday,
    period_start,
    today_utc,
    yesterday,
)

TODAY = date(2026, 3, 10)


class TestDates:

    def test_today_utc_converts_offset_timestamps(self):
        # 23:30 at UTC-5 is already the next day in UTC
        now = datetime(2026, 3, 9, 23, 30, tzinfo=timezone(timedelta(hours=-5)))
        assert today_utc(now) == date(2026, 3, 10)

    def test_yesterday_and_days_ago(self):
        assert yesterday(TODAY) == date(2026, 3, 9)
        assert days_ago(TODAY, 7) == date(2026, 3, 3)

    def test_is_yesterday(self):
        assert is_yesterday(date(2026, 3, 9), TODAY)
        assert not is_yesterday(TODAY, TODAY)
        assert not is_yesterday(None, TODAY)

    def test_is_same_day(self):
        assert is_same_day(TODAY, TODAY)
        assert not is_same_day(None, TODAY)


class TestPeriodStart:

    @pytest.mark.parametrize(("period", "days"), [("week", 7), ("month", 30), ("year", 365)])
    def test_trailing_windows(self, period, days):
        assert period_start(period, TODAY) == TODAY - timedelta(days=days)

    def test_all_time_has_no_start(self):
        assert period_start("all", TODAY) is None

    def test_unknown_period_rejected(self):
        with pytest.raises(ValueError, match="Unknown period"):
            period_start("fortnight", TODAY)
