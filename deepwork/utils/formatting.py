"""Formatting helpers for durations, dates and text display."""

from __future__ import annotations

from datetime import date, datetime


def format_duration(ms: float) -> str:
    """Format milliseconds as 'Xh Ym'. Negative durations show as 0h 0m."""
    if ms < 0:
        ms = 0
    total_seconds = int(ms // 1000)
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    return f"{hours}h {minutes}m"


def format_minutes(minutes: int) -> str:
    """Format a minute count as 'Xh Ym'."""
    return format_duration(minutes * 60 * 1000)


def format_hours(hours: float) -> str:
    """Format fractional hours for display, e.g. '1.5h'."""
    return f"{hours:.1f}h"


def format_short_date(day: date) -> str:
    """Format a date as 'Jan 5'."""
    return f"{day.strftime('%b')} {day.day}"


def format_range(start: date, end: date) -> str:
    """Format an inclusive date range, collapsing single days."""
    if start == end:
        return format_short_date(start)
    return f"{format_short_date(start)} - {format_short_date(end)}"


def format_datetime(dt: datetime) -> str:
    """Format datetime as 'YYYY-MM-DD HH:MM'."""
    return dt.strftime("%Y-%m-%d %H:%M")


def truncate(text: str, max_length: int) -> str:
    """Truncate text to max_length, appending '…' if truncated."""
    if len(text) <= max_length:
        return text
    return text[: max_length - 1] + "…"
