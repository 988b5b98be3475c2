"""Right pane renderer for the TUI.

Shows what is being tracked right now, the day/week/month comparisons, hours
per project and the highlighted session's notes.
"""

from __future__ import annotations

import curses
from typing import Dict, Optional

from deepwork.data.models import Session
from deepwork.stats.comparison import Comparison, ComparisonStats
from deepwork.tracker import TrackingState
from deepwork.utils.formatting import format_duration, format_hours, truncate


def _draw_line(stdscr: curses.window, row: int, col: int, text: str,
               width: int, attr: int) -> int:
    """Draw a single line, truncating to fit. Returns next row."""
    text = text[:width]
    try:
        stdscr.addstr(row, col, text.ljust(width), attr)
    except curses.error:
        pass
    return row + 1


def draw(stdscr: curses.window, tracking: TrackingState, elapsed_ms: int,
         stats: Optional[ComparisonStats], totals: Dict[str, float],
         session: Optional[Session], pair: int, active_pair: int,
         x: int, y: int, width: int, height: int) -> None:
    """Render tracker status and statistics.

    Args:
        stdscr: The curses window to draw on.
        tracking: Snapshot of the tracker state.
        elapsed_ms: Time since the running session started.
        stats: Comparison stats, or None if they could not be computed.
        totals: Hours per project.
        session: The highlighted session, if any.
        pair: Color pair for normal text.
        active_pair: Color pair for the "tracking" banner.
        x: Starting column of the pane.
        y: Starting row of the pane.
        width: Width of the pane in columns.
        height: Height of the pane in rows.
    """
    attr = curses.color_pair(pair)
    content_width = width - 2  # 1-char padding on each side
    col = x + 1
    row = y
    max_row = y + height

    def _line(text: str = "", line_attr: int = attr) -> None:
        """Draw one line and advance the row counter."""
        nonlocal row
        if row >= max_row:
            return
        row = _draw_line(stdscr, row, col, text, content_width, line_attr)

    def _comparison(title: str, block: Comparison) -> None:
        _line(f"{title}:")
        for window in [block.current] + block.past:
            label = truncate(window.label, 16)
            _line(f"  {label:<16} {format_hours(window.hours):>7}  {window.range}")
        _line()

    # Section: Tracking
    if tracking.is_active:
        seconds = (elapsed_ms // 1000) % 60
        _line(f"● Tracking: {tracking.project_name}", curses.color_pair(active_pair) | curses.A_BOLD)
        _line(f"  {format_duration(elapsed_ms)} {seconds:02d}s since {tracking.started_at:%H:%M}")
    else:
        _line("○ Idle")
    _line()

    if stats is not None:
        _comparison("Day", stats.day)
        _comparison("Week", stats.week)
        _comparison("Month", stats.month)

    # Section: Projects, busiest first
    _line("Projects:")
    if totals:
        for name, hours in sorted(totals.items(), key=lambda item: item[1], reverse=True)[:5]:
            _line(f"  {truncate(name, 20):<20} {format_hours(hours):>7}")
    else:
        _line("  (none)")
    _line()

    if session is not None and session.notes:
        _line("Notes:")
        for note_line in session.notes.splitlines():
            _line(f"  {note_line}")

    # Clear any unused rows in the pane
    while row < max_row:
        _line()
