"""Date and time utilities.

Times of day are local wall-clock ``HH:MM`` strings; dates are ``YYYY-MM-DD``.
Nothing here reads the system clock.
"""

import calendar
import re
from datetime import date, datetime, timedelta
from typing import Union

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")

DateLike = Union[str, date]

MINUTES_PER_DAY = 24 * 60


def to_minutes(value: str) -> int:
    """Convert an ``HH:MM`` string to minutes from midnight."""
    match = _TIME_RE.match(str(value).strip()) if value is not None else None
    if not match:
        raise ValueError(f"Invalid time string: {value!r} (expected HH:MM)")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 24 or minutes > 59 or (hours == 24 and minutes != 0):
        raise ValueError(f"Invalid time string: {value!r} (out of range)")
    return hours * 60 + minutes


def from_minutes(minutes: int) -> str:
    """Format minutes from midnight as ``HH:MM``.

    Values are kept within the day: anything past midnight reads ``24:00``.
    """
    hours, mins = divmod(max(0, min(int(minutes), MINUTES_PER_DAY)), 60)
    return f"{hours:02d}:{mins:02d}"


def parse_date(value: DateLike) -> date:
    """Parse ``YYYY-MM-DD`` (or pass a date through, dropping any time part)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValueError(f"Invalid date string: {value!r} (expected YYYY-MM-DD)") from None


def format_date(value: date) -> str:
    return value.strftime("%Y-%m-%d")


def sunday_weekday(value: date) -> int:
    """Weekday number with Sunday = 0 ... Saturday = 6."""
    return value.isoweekday() % 7


def week_start(value: date) -> date:
    """The Sunday that starts the week containing ``value``."""
    return value - timedelta(days=sunday_weekday(value))


def last_day_of_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def months_between(start: date, end: date) -> int:
    return (end.year - start.year) * 12 + (end.month - start.month)
