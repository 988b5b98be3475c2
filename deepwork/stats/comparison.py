"""Day / week / month comparisons against the same point in earlier periods.

For each granularity the current window runs from its natural start (today,
Monday, the 1st) through today. Three earlier windows are built by walking
back one, two and three units and stopping at the same relative point, so a
Wednesday is compared with earlier Mondays-through-Wednesdays rather than
with whole weeks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Callable, Iterable, List, Optional, Tuple

from deepwork.data.models import Session
from deepwork.utils.dates import parse_date, shift_months, start_of_month, start_of_week
from deepwork.utils.formatting import format_range

PAST_WINDOWS = 3


@dataclass
class WindowTotal:
    """Tracked hours in one inclusive date window."""

    label: str
    range: str
    hours: float
    start: date
    end: date


@dataclass
class Comparison:
    current: WindowTotal
    past: List[WindowTotal] = field(default_factory=list)


@dataclass
class ComparisonStats:
    day: Comparison
    week: Comparison
    month: Comparison


def _dated_minutes(sessions: Iterable[Session]) -> List[Tuple[date, int]]:
    """Pair each session's parsed date with its minutes, skipping unparseable dates."""
    dated = []
    for session in sessions:
        day = parse_date(session.date)
        if day is not None:
            dated.append((day, session.duration_minutes or 0))
    return dated


def total_hours(dated: List[Tuple[date, int]], start: date, end: date) -> float:
    """Sum hours for sessions dated within [start, end]."""
    return sum(minutes for day, minutes in dated if start <= day <= end) / 60


def _window(dated: List[Tuple[date, int]], label: str, start: date, end: date) -> WindowTotal:
    return WindowTotal(label=label, range=format_range(start, end), hours=total_hours(dated, start, end),
                       start=start, end=end)


def _past_label(n: int, unit: str, plural: str) -> str:
    if n == 1:
        return f"Last {unit}"
    return f"{n} {plural} Ago"


def _compare(dated: List[Tuple[date, int]], current_label: str, current_start: date, today: date,
             past_bounds: Callable[[int], Tuple[date, date]], label_for: Callable[[int], str]) -> Comparison:
    comparison = Comparison(current=_window(dated, current_label, current_start, today))
    for n in range(1, PAST_WINDOWS + 1):
        start, end = past_bounds(n)
        comparison.past.append(_window(dated, label_for(n), start, end))
    return comparison


def compute(sessions: Iterable[Session], now: Optional[datetime] = None) -> ComparisonStats:
    """Build day, week and month comparisons for the given sessions.

    ``past`` lists are ordered most recent first. Hours are fractional and
    unrounded.
    """
    today = (now if now is not None else datetime.now()).date()
    dated = _dated_minutes(sessions)
    day_name = today.strftime("%A")

    def same_weekday(n: int) -> Tuple[date, date]:
        past = today - timedelta(weeks=n)
        return past, past

    def same_point_in_week(n: int) -> Tuple[date, date]:
        end = today - timedelta(weeks=n)
        return start_of_week(end), end

    def same_point_in_month(n: int) -> Tuple[date, date]:
        end = shift_months(today, -n)
        return start_of_month(end), end

    return ComparisonStats(
        day=_compare(dated, "Today", today, today, same_weekday,
                     lambda n: _past_label(n, day_name, f"{day_name}s")),
        week=_compare(dated, "This Week", start_of_week(today), today, same_point_in_week,
                      lambda n: _past_label(n, "Week", "Weeks")),
        month=_compare(dated, "This Month", start_of_month(today), today, same_point_in_month,
                       lambda n: _past_label(n, "Month", "Months")),
    )
