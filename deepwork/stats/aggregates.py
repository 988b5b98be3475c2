"""Per-project and per-period breakdowns for the dashboard."""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Tuple

from deepwork.data.models import Session
from deepwork.utils.dates import parse_date, parse_time

UNASSIGNED = "Unassigned"


def _project(session: Session) -> str:
    return session.project.strip() or UNASSIGNED


def project_totals(sessions: Iterable[Session]) -> Dict[str, float]:
    """Total hours per project, keyed in name order."""
    minutes: Dict[str, int] = defaultdict(int)
    for session in sessions:
        minutes[_project(session)] += session.duration_minutes or 0
    return {name: minutes[name] / 60 for name in sorted(minutes)}


def hourly_distribution(sessions: Iterable[Session]) -> List[float]:
    """Hours tracked per hour of day (0-23), bucketed by start time."""
    buckets = [0.0] * 24
    for session in sessions:
        start = parse_time(session.start_time)
        if start is not None and parse_date(session.date) is not None:
            buckets[start.hour] += (session.duration_minutes or 0) / 60
    return buckets


def daily_project_hours(sessions: Iterable[Session], year: int) -> Dict[str, Dict[str, float]]:
    """Hours per project per day (YYYY-MM-DD) within year."""
    result: Dict[str, Dict[str, float]] = {}
    for session in sessions:
        day = parse_date(session.date)
        if day is None or day.year != year:
            continue
        per_project = result.setdefault(day.isoformat(), {})
        project = _project(session)
        per_project[project] = per_project.get(project, 0.0) + (session.duration_minutes or 0) / 60
    return result


def weekly_project_hours(sessions: Iterable[Session], year: int) -> Dict[int, Dict[str, float]]:
    """Hours per project per ISO week number for sessions dated in year."""
    result: Dict[int, Dict[str, float]] = {}
    for session in sessions:
        day = parse_date(session.date)
        if day is None or day.year != year:
            continue
        week = day.isocalendar()[1]
        per_project = result.setdefault(week, {})
        project = _project(session)
        per_project[project] = per_project.get(project, 0.0) + (session.duration_minutes or 0) / 60
    return result


def weekday_average(sessions: Iterable[Session], today: date) -> Tuple[float, float]:
    """Compare today with earlier days that fall on the same weekday.

    Returns (average hours over earlier same-weekday dates that have
    sessions, hours tracked today). The average is 0.0 when there is no
    history.
    """
    today_minutes = 0
    earlier: Dict[date, int] = defaultdict(int)
    for session in sessions:
        day = parse_date(session.date)
        if day is None:
            continue
        if day == today:
            today_minutes += session.duration_minutes or 0
        elif day < today and day.weekday() == today.weekday():
            earlier[day] += session.duration_minutes or 0

    average = sum(earlier.values()) / 60 / len(earlier) if earlier else 0.0
    return average, today_minutes / 60


def _sort_key(session: Session) -> Tuple[str, str]:
    day = parse_date(session.date)
    start = parse_time(session.start_time)
    return (day.isoformat() if day else "", start.isoformat() if start else "")


def recent_sessions(sessions: Iterable[Session], limit: int = 20) -> List[Session]:
    """Most recent sessions first, by date then start time."""
    ordered = sorted(sessions, key=_sort_key, reverse=True)
    return ordered[:limit] if limit else ordered
