"""Tests for dt_utils - pure date helpers, no HA fixtures needed."""

from __future__ import annotations

from datetime import UTC, date, datetime, time
from zoneinfo import ZoneInfo

import pytest
from freezegun import freeze_time

from custom_components.parentime.utils import dt_utils
from custom_components.parentime.utils.dt_utils import (
    dt_add_months,
    dt_at_local_time,
    dt_days_between,
    dt_months_between,
    dt_parse_date,
    dt_parse_time,
    dt_to_date,
    dt_years_between,
)


@pytest.fixture
def paris_timezone():
    """Temporarily use Europe/Paris as the default timezone."""
    previous = dt_utils.get_default_timezone()
    dt_utils.set_default_timezone(ZoneInfo("Europe/Paris"))
    yield
    dt_utils.set_default_timezone(previous)


class TestParsing:
    """Date and time parsing."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("2026-01-15", date(2026, 1, 15)),
            ("2026/01/15", date(2026, 1, 15)),
            ("15/01/2026", date(2026, 1, 15)),
            ("2026-01-15T10:30:00", date(2026, 1, 15)),
            (" 2026-01-15 ", date(2026, 1, 15)),
        ],
    )
    def test_parse_date_accepted_formats(self, raw: str, expected: date) -> None:
        """ISO, slash and day-first formats all parse."""
        assert dt_parse_date(raw) == expected

    @pytest.mark.parametrize("raw", ["", None, "not a date", "2026-13-01", 20260115])
    def test_parse_date_rejects_garbage(self, raw) -> None:
        """Unparsable input yields None instead of raising."""
        assert dt_parse_date(raw) is None

    def test_parse_time(self) -> None:
        """HH:MM parses; out-of-range hours do not."""
        assert dt_parse_time("09:00") == time(9, 0)
        assert dt_parse_time("25:00") is None
        assert dt_parse_time(None) is None

    def test_to_date_converts_aware_datetime_to_local_day(
        self, paris_timezone
    ) -> None:
        """23:30 UTC on Feb 28 is already Mar 1 in Paris."""
        moment = datetime(2026, 2, 28, 23, 30, tzinfo=UTC)
        assert dt_to_date(moment) == date(2026, 3, 1)

    def test_to_date_passes_dates_through(self) -> None:
        """Plain dates are returned unchanged."""
        assert dt_to_date(date(2026, 5, 4)) == date(2026, 5, 4)
        assert dt_to_date(None) is None


class TestCalendarArithmetic:
    """Month, year and day arithmetic."""

    def test_add_months_clamps_to_month_end(self) -> None:
        """Jan 31 + 1 month is the last day of February."""
        assert dt_add_months(date(2026, 1, 31), 1) == date(2026, 2, 28)
        assert dt_add_months(date(2028, 1, 31), 1) == date(2028, 2, 29)

    def test_add_months_crosses_years(self) -> None:
        """Adding 11 months rolls into the next year."""
        assert dt_add_months(date(2026, 1, 1), 11) == date(2026, 12, 1)
        assert dt_add_months(date(2026, 1, 1), 18) == date(2027, 7, 1)

    def test_months_between_counts_whole_months(self) -> None:
        """Only completed months count."""
        assert dt_months_between(date(2026, 1, 1), date(2026, 6, 1)) == 5
        assert dt_months_between(date(2026, 1, 1), date(2026, 5, 31)) == 4
        assert dt_months_between(date(2026, 1, 31), date(2026, 2, 28)) == 0

    def test_months_between_never_negative(self) -> None:
        """An end before the start yields zero."""
        assert dt_months_between(date(2026, 6, 1), date(2026, 1, 1)) == 0

    def test_years_between(self) -> None:
        """The day before a birthday does not complete the year."""
        assert dt_years_between(date(2020, 6, 15), date(2026, 6, 14)) == 5
        assert dt_years_between(date(2020, 6, 15), date(2026, 6, 15)) == 6

    def test_days_between_is_signed(self) -> None:
        """Days are counted with sign."""
        assert dt_days_between(date(2026, 1, 1), date(2026, 1, 8)) == 7
        assert dt_days_between(date(2026, 1, 8), date(2026, 1, 1)) == -7


class TestLocalTime:
    """Combining a day with a wall-clock time."""

    def test_at_local_time_returns_utc_instant(self) -> None:
        """09:00 in Paris during winter is 08:00 UTC."""
        instant = dt_at_local_time(
            date(2026, 3, 1), time(9, 0), ZoneInfo("Europe/Paris")
        )
        assert instant == datetime(2026, 3, 1, 8, 0, tzinfo=UTC)

    def test_at_local_time_handles_summer_offset(self) -> None:
        """09:00 in Paris during summer is 07:00 UTC."""
        instant = dt_at_local_time(
            date(2026, 7, 1), time(9, 0), ZoneInfo("Europe/Paris")
        )
        assert instant == datetime(2026, 7, 1, 7, 0, tzinfo=UTC)


class TestNow:
    """Current date helpers under a frozen clock."""

    @freeze_time("2026-06-01 23:30:00", tz_offset=0)
    def test_today_local_follows_default_timezone(self, paris_timezone) -> None:
        """Late evening UTC is already the next day in Paris."""
        assert dt_utils.dt_today_local() == date(2026, 6, 2)
        assert dt_utils.dt_today_local(ZoneInfo("UTC")) == date(2026, 6, 1)

    @freeze_time("2026-06-01 23:30:00", tz_offset=0)
    def test_now_utc_is_aware(self) -> None:
        """dt_now_utc carries the UTC offset."""
        assert dt_utils.dt_now_utc() == datetime(2026, 6, 1, 23, 30, tzinfo=UTC)
