# File: utils/dt_utils.py
"""Date and time utilities for HomeChores.

Pure Python date/time functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

Scheduling works at day granularity: due dates are stored as ISO date strings
("2026-01-18") and optional due times as "HH:MM". Weekday numbers follow the
Sunday-first convention used by stored templates (0 = Sunday ... 6 = Saturday).

Functions:
    - set_default_timezone / get_default_timezone: Configure local timezone
    - dt_today_local: Get today's date in local timezone
    - dt_now_local / dt_now_utc: Current aware datetimes
    - as_local: Convert a datetime to local timezone
    - start_of_local_day: Midnight of a datetime's local day
    - dt_parse_date: Normalize str/date/datetime input to a date
    - dt_parse_time: Parse "HH:MM" strings
    - dt_add_interval: Add days/weeks/months to a date (month-end clamping)
    - dt_weekday_sunday_first: Sunday-first weekday number
    - dt_start_of_week: Sunday that starts a date's week
"""

from __future__ import annotations

from datetime import UTC, date, datetime, time, timedelta
import logging
from zoneinfo import ZoneInfo

from dateutil.relativedelta import relativedelta

_LOGGER = logging.getLogger(__name__)

# Default timezone - replaced during integration setup
DEFAULT_TIME_ZONE: ZoneInfo = ZoneInfo("UTC")

TIME_UNIT_DAYS = "days"
TIME_UNIT_WEEKS = "weeks"
TIME_UNIT_MONTHS = "months"


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
    """Return today's date in local timezone as a `datetime.date`."""
    tz_info = tz or DEFAULT_TIME_ZONE
    return datetime.now(tz_info).date()


def dt_now_local(tz: ZoneInfo | None = None) -> datetime:
    """Return the current datetime in local timezone (timezone-aware)."""
    tz_info = tz or DEFAULT_TIME_ZONE
    return datetime.now(tz_info)


def dt_now_utc() -> datetime:
    """Return the current datetime in UTC (timezone-aware)."""
    return datetime.now(UTC)


# ==============================================================================
# Timezone Conversion
# ==============================================================================


def as_local(dt_obj: datetime, tz: ZoneInfo | None = None) -> datetime:
    """Convert a datetime to local timezone.

    Naive datetimes are assumed to already be local wall-clock time.
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    if dt_obj.tzinfo is None:
        return dt_obj.replace(tzinfo=tz_info)
    return dt_obj.astimezone(tz_info)


# ==============================================================================
# Parsing
# ==============================================================================


def dt_parse_date(
    value: str | date | datetime | None, tz: ZoneInfo | None = None
) -> date | None:
    """Safely normalize a date-like value into a `datetime.date`.

    Accepts:
    - date objects (returned as-is)
    - datetime objects (converted to the local day when timezone-aware)
    - "2025-04-07" ISO dates and full ISO datetimes ("2025-04-07T18:00:00+02:00")
    - "04/07/2025" / "07/04/2025" / "2025/04/07" fallbacks

    Returns:
        datetime.date or None if the value cannot be interpreted.
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.date()
        return as_local(value, tz).date()

    if isinstance(value, date):
        return value

    if not isinstance(value, str):
        return None

    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass

    try:
        return dt_parse_date(datetime.fromisoformat(text), tz)
    except ValueError:
        pass

    for fmt in ("%m/%d/%Y", "%d/%m/%Y", "%Y/%m/%d"):
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    _LOGGER.debug("dt_parse_date: Could not parse '%s'", value)
    return None


def dt_parse_time(value: str | time | None) -> time | None:
    """Parse a "HH:MM" (or "HH:MM:SS") time-of-day string.

    Returns:
        datetime.time or None for empty/invalid input.
    """
    if value is None or value == "":
        return None
    if isinstance(value, time):
        return value
    if not isinstance(value, str):
        return None

    try:
        return time.fromisoformat(value.strip())
    except ValueError:
        pass

    parts = value.strip().split(":")
    try:
        hours = int(parts[0])
        minutes = int(parts[1]) if len(parts) > 1 else 0
        return time(hours, minutes)
    except (ValueError, IndexError):
        _LOGGER.debug("dt_parse_time: Could not parse '%s'", value)
        return None


# ==============================================================================
# Interval Arithmetic
# ==============================================================================


def dt_add_interval(base_date: date, interval_unit: str, delta: int) -> date:
    """Add a number of days, weeks or months to a date.

    Months use relativedelta so that Jan 31 + 1 month clamps to Feb 28/29
    instead of overflowing into March.

    Raises:
        ValueError: Unknown interval unit.
    """
    if interval_unit == TIME_UNIT_DAYS:
        return base_date + timedelta(days=delta)
    if interval_unit == TIME_UNIT_WEEKS:
        return base_date + timedelta(weeks=delta)
    if interval_unit == TIME_UNIT_MONTHS:
        return base_date + relativedelta(months=delta)
    raise ValueError(f"Unknown interval_unit: {interval_unit}")


def dt_weekday_sunday_first(day: date) -> int:
    """Return the weekday number with Sunday as 0 and Saturday as 6."""
    return (day.weekday() + 1) % 7


def dt_start_of_week(day: date) -> date:
    """Return the Sunday that starts the week containing `day`."""
    return day - timedelta(days=dt_weekday_sunday_first(day))
