"""Left pane renderer for the TUI.

Draws either the scrollable session table or, while choosing what to track,
the project list. The highlighted row uses the mode accent color. In DELETE
mode, rows are prefixed with [x] / [ ] selection markers.
"""

from __future__ import annotations

import curses
from typing import List, Set

from deepwork.data.models import Project, Session
from deepwork.utils.formatting import format_minutes, truncate

_HEADERS = ["Date", "Start", "End", "Duration", "Project", "Notes"]


def _session_cells(session: Session) -> List[str]:
    return [
        session.date,
        session.start_time[:5],
        session.end_time[:5],
        format_minutes(session.duration_minutes),
        session.project,
        session.notes.replace("\n", " ").strip(),
    ]


def _put(stdscr: curses.window, y: int, x: int, text: str, attr: int) -> None:
    try:
        stdscr.addstr(y, x, text, attr)
    except curses.error:
        pass


def draw(stdscr: curses.window, sessions: List[Session], cursor: int,
         scroll_offset: int, mode: str, selected: Set[str],
         accent_pair: int, normal_pair: int,
         x: int, y: int, width: int, height: int) -> None:
    """Render the session table in the left pane area.

    Args:
        stdscr: The curses window to draw on.
        sessions: Sessions in display order.
        cursor: Index of the currently highlighted session.
        scroll_offset: First visible row index.
        mode: Current mode ("SELECT" or "DELETE").
        selected: Set of session IDs selected for deletion.
        accent_pair: Color pair for the header and highlighted row.
        normal_pair: Color pair for normal rows.
        x: Starting column of the pane.
        y: Starting row of the pane.
        width: Width of the pane in columns.
        height: Height of the pane in rows.
    """
    is_delete = mode == "DELETE"
    # Reserve space for selection marker in delete mode
    marker_width = 4 if is_delete else 0
    content_width = width - marker_width

    # Header takes 1 row; data rows fill the rest
    data_height = height - 1
    visible = sessions[scroll_offset:scroll_offset + data_height]
    cells = [_session_cells(s) for s in visible]

    # Notes (last column) gets whatever space remains
    gap = 2
    col_widths = [len(h) for h in _HEADERS[:-1]]
    for row in cells:
        for i in range(len(col_widths)):
            col_widths[i] = max(col_widths[i], len(row[i]))
    col_widths[4] = min(col_widths[4], 20)
    notes_max = max(10, content_width - sum(col_widths) - gap * len(col_widths))

    def _format(values: List[str]) -> str:
        parts = [f"{truncate(v, w):<{w}}" for v, w in zip(values, col_widths)]
        parts.append(truncate(values[-1], notes_max))
        return (" " * gap).join(parts)[:content_width].ljust(content_width)

    header_attr = curses.color_pair(accent_pair) | curses.A_BOLD
    if is_delete:
        _put(stdscr, y, x, " " * marker_width, header_attr)
    _put(stdscr, y, x + marker_width, _format(_HEADERS), header_attr)

    for row_idx in range(data_height):
        screen_y = y + 1 + row_idx
        if row_idx >= len(visible):
            # Clear remaining rows
            _put(stdscr, screen_y, x, " " * width, curses.color_pair(normal_pair))
            continue

        session_idx = scroll_offset + row_idx
        is_cursor = session_idx == cursor
        attr = curses.color_pair(accent_pair) if is_cursor else curses.color_pair(normal_pair)
        if is_delete:
            marker = "[x] " if visible[row_idx].id in selected else "[ ] "
            _put(stdscr, screen_y, x, marker, attr)
        _put(stdscr, screen_y, x + marker_width, _format(cells[row_idx]), attr)


def draw_projects(stdscr: curses.window, projects: List[Project], cursor: int,
                  accent_pair: int, normal_pair: int,
                  x: int, y: int, width: int, height: int) -> None:
    """Render the project picker used to start a session."""
    header_attr = curses.color_pair(accent_pair) | curses.A_BOLD
    _put(stdscr, y, x, " Start tracking:".ljust(width)[:width], header_attr)

    # Keep the cursor on screen without tracking a separate offset
    data_height = height - 1
    offset = max(0, cursor - data_height + 1)
    for row_idx in range(data_height):
        screen_y = y + 1 + row_idx
        project_idx = offset + row_idx
        if project_idx >= len(projects):
            _put(stdscr, screen_y, x, " " * width, curses.color_pair(normal_pair))
            continue
        project = projects[project_idx]
        attr = curses.color_pair(accent_pair) if project_idx == cursor else curses.color_pair(normal_pair)
        line = f"  {project.name}"
        if project.color:
            line = f"{line}  ({project.color})"
        _put(stdscr, screen_y, x, truncate(line, width).ljust(width), attr)
