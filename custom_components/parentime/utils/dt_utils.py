# File: utils/dt_utils.py
"""Date and time utilities for ParenTime.

Pure Python date/time functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

⚠️ UTILS PURITY: NO `homeassistant.*` imports allowed.
   Uses standard library: datetime, zoneinfo, dateutil.

Functions:
    - dt_today_local: Get today's date in local timezone
    - dt_now_utc: Get current datetime in UTC
    - as_utc / as_local: Timezone conversion
    - dt_parse_date: Parse calendar date strings
    - dt_parse_time: Parse "HH:MM" time-of-day strings
    - dt_to_date: Reduce date/datetime/string input to a calendar date
    - dt_add_months: Calendar month arithmetic (clamps to month end)
    - dt_months_between / dt_years_between / dt_days_between: Whole-unit ages
    - dt_at_local_time: Combine a calendar date and time-of-day into a UTC instant
"""

from __future__ import annotations

from datetime import UTC, date, datetime, time
import logging
from zoneinfo import ZoneInfo

# Third-party date utilities (no HA dependency)
from dateutil.relativedelta import relativedelta

# Module-level logger (no HA dependency)
_LOGGER = logging.getLogger(__name__)

# Default timezone - can be overridden by caller
DEFAULT_TIME_ZONE: ZoneInfo = ZoneInfo("UTC")

# Accepted non-ISO date formats
_DATE_FORMATS = ("%Y/%m/%d", "%d/%m/%Y")


# ==============================================================================
# Timezone Configuration
# ==============================================================================


def set_default_timezone(tz: ZoneInfo) -> None:
    """Set the default timezone for all dt_utils functions.

    Call this during integration setup to configure the user's timezone.
    """
    global DEFAULT_TIME_ZONE  # noqa: PLW0603
    DEFAULT_TIME_ZONE = tz


def get_default_timezone() -> ZoneInfo:
    """Get the current default timezone."""
    return DEFAULT_TIME_ZONE


# ==============================================================================
# Current Date/Time Functions
# ==============================================================================


def dt_today_local(tz: ZoneInfo | None = None) -> date:
    """Return today's date in local timezone as a `datetime.date`.

    This is the calendar convention every engine call uses: "today" is the
    wall-clock date in the configured Home Assistant time zone.
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    return datetime.now(tz_info).date()


def dt_now_utc() -> datetime:
    """Return the current datetime in UTC (timezone-aware)."""
    return datetime.now(UTC)


# ==============================================================================
# Timezone Conversion
# ==============================================================================


def as_utc(dt_obj: datetime) -> datetime:
    """Convert a datetime to UTC. Naive input is treated as local time."""
    if dt_obj.tzinfo is None:
        dt_obj = dt_obj.replace(tzinfo=DEFAULT_TIME_ZONE)
    return dt_obj.astimezone(UTC)


def as_local(dt_obj: datetime, tz: ZoneInfo | None = None) -> datetime:
    """Convert a datetime to local timezone. Naive input is treated as UTC."""
    tz_info = tz or DEFAULT_TIME_ZONE
    if dt_obj.tzinfo is None:
        dt_obj = dt_obj.replace(tzinfo=UTC)
    return dt_obj.astimezone(tz_info)


# ==============================================================================
# Parsing
# ==============================================================================


def dt_parse_date(date_str: str | None) -> date | None:
    """Safely parse a date string into a `datetime.date`.

    Accepts formats:
    - "2026-01-01" (ISO format)
    - "2026/01/01"
    - "01/01/2026" (day first)

    A full ISO datetime string is accepted too and reduced to its date part.

    Returns:
        datetime.date or None if parsing fails.
    """
    if not date_str or not isinstance(date_str, str):
        return None

    date_str = date_str.strip()
    try:
        return date.fromisoformat(date_str)
    except ValueError:
        pass

    try:
        return datetime.fromisoformat(date_str).date()
    except ValueError:
        pass

    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(date_str, fmt).date()
        except ValueError:
            continue

    _LOGGER.debug("DEBUG: Unable to parse date string '%s'", date_str)
    return None


def dt_parse_time(time_str: str | None) -> time | None:
    """Parse an "HH:MM" (or "HH:MM:SS") time-of-day string.

    Returns:
        datetime.time or None if parsing fails.
    """
    if not time_str or not isinstance(time_str, str):
        return None
    try:
        return time.fromisoformat(time_str.strip())
    except ValueError:
        _LOGGER.debug("DEBUG: Unable to parse time string '%s'", time_str)
        return None


def dt_to_date(value: date | datetime | str | None) -> date | None:
    """Reduce a date, datetime or string to its calendar date.

    Aware datetimes are converted to the local timezone first so the
    calendar day matches what the user sees.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = as_local(value)
        return value.date()
    if isinstance(value, date):
        return value
    return dt_parse_date(value)


# ==============================================================================
# Calendar Arithmetic
# ==============================================================================


def dt_add_months(base: date, months: int) -> date:
    """Add whole calendar months to a date.

    Day-of-month is clamped to the last day of the target month, so
    2026-01-31 + 1 month is 2026-02-28.
    """
    return base + relativedelta(months=months)


def dt_months_between(start: date, end: date) -> int:
    """Return the number of whole completed months from start to end.

    Never negative: an end before start yields 0.
    """
    if end <= start:
        return 0
    delta = relativedelta(end, start)
    return delta.years * 12 + delta.months


def dt_years_between(start: date, end: date) -> int:
    """Return the number of whole completed years from start to end (>= 0)."""
    if end <= start:
        return 0
    return relativedelta(end, start).years


def dt_days_between(start: date, end: date) -> int:
    """Return the signed number of days from start to end."""
    return (end - start).days


def dt_at_local_time(
    day: date, time_of_day: time, tz: ZoneInfo | None = None
) -> datetime:
    """Return the UTC instant for a local wall-clock time on a calendar day."""
    tz_info = tz or DEFAULT_TIME_ZONE
    return datetime.combine(day, time_of_day, tzinfo=tz_info).astimezone(UTC)
