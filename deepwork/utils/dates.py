"""Date and time-of-day helpers.

Sessions store their date and times as plain strings (``YYYY-MM-DD`` and
``HH:MM:SS``, local time). These helpers parse and canonicalize those strings
and compute the calendar boundaries used by the statistics code.
"""

from __future__ import annotations

import calendar
import re
from datetime import date, datetime, time, timedelta
from typing import Optional

from deepwork.exceptions import ValidationError

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")

SECONDS_PER_DAY = 24 * 60 * 60


def parse_date(value: Optional[str]) -> Optional[date]:
    """Parse a YYYY-MM-DD string, returning None if it is not a real date."""
    if not value:
        return None
    value = value.strip()
    if not _DATE_RE.match(value):
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        return None


def canonical_date(value: str) -> str:
    """Validate a date string and return it as YYYY-MM-DD."""
    parsed = parse_date(value)
    if parsed is None:
        raise ValidationError(f"Invalid date '{value}'. Expected YYYY-MM-DD.")
    return parsed.isoformat()


def parse_time(value: Optional[str]) -> Optional[time]:
    """Parse HH:MM or HH:MM:SS, returning None on failure."""
    if not value:
        return None
    match = _TIME_RE.match(value.strip())
    if not match:
        return None
    hours, minutes, seconds = match.group(1), match.group(2), match.group(3) or "0"
    try:
        return time(int(hours), int(minutes), int(seconds))
    except ValueError:
        return None


def canonical_time(value: str) -> str:
    """Validate a time-of-day string and return it as HH:MM:SS."""
    parsed = parse_time(value)
    if parsed is None:
        raise ValidationError(f"Invalid time '{value}'. Expected HH:MM or HH:MM:SS.")
    return parsed.strftime("%H:%M:%S")


def ms_to_minutes(ms: float) -> int:
    """Convert milliseconds to whole minutes, rounding half up."""
    if ms <= 0:
        return 0
    return int(ms / 60000 + 0.5)


def duration_between(start_time: str, end_time: str) -> Optional[int]:
    """Return minutes from start_time to end_time, wrapping past midnight.

    Returns None if either value cannot be parsed.
    """
    start = parse_time(start_time)
    end = parse_time(end_time)
    if start is None or end is None:
        return None
    start_s = start.hour * 3600 + start.minute * 60 + start.second
    end_s = end.hour * 3600 + end.minute * 60 + end.second
    delta = end_s - start_s
    if delta < 0:
        delta += SECONDS_PER_DAY
    return ms_to_minutes(delta * 1000)


def start_of_week(day: date) -> date:
    """Return the Monday of the week containing day."""
    return day - timedelta(days=day.weekday())


def start_of_month(day: date) -> date:
    return day.replace(day=1)


def shift_months(day: date, months: int) -> date:
    """Move day by a number of months, clamping to the target month's last day."""
    index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))
