"""Main TUI application loop.

Manages curses setup/teardown, state (mode, cursor, selection), input
dispatch, and the render loop. Owns the process's single SessionTracker and
coordinates the left pane, right pane, and status bar renderers.

The loop redraws every 100 ms so the elapsed time stays current. Redraws only
read the tracker and the cached session list; the stores are touched only in
response to a key press. When the date changes the cached comparisons are
rebuilt from the in-memory session list.
"""

from __future__ import annotations

import curses
import logging
from datetime import date, datetime
from typing import Dict, List, Optional, Set, Union

from deepwork.data import Project, ProjectStore, Session, SessionStore, ensure_data_files
from deepwork.data.models import EditableField
from deepwork.exceptions import DeepworkError
from deepwork.stats import comparison
from deepwork.stats.aggregates import project_totals, recent_sessions
from deepwork.tracker import NotesContext, SessionTracker
from deepwork.tui import left_pane, right_pane, status_bar
from deepwork.utils.formatting import format_duration

logger = logging.getLogger(__name__)

# Mode constants
MODE_SELECT = "SELECT"
MODE_DELETE = "DELETE"
MODE_PROJECT = "PROJECT"

# Accent colors (R, G, B)
_SELECT_COLOR = (78, 121, 167)
_DELETE_COLOR = (120, 20, 16)
_ACTIVE_COLOR = (89, 161, 79)

# Color pair IDs
_PAIR_SELECT_ACCENT = 1
_PAIR_DELETE_ACCENT = 2
_PAIR_NORMAL = 3
_PAIR_DIVIDER = 4
_PAIR_ACTIVE = 5


class _State:
    """Mutable state container for the TUI."""

    def __init__(self, tracker: SessionTracker, sessions: SessionStore, projects: ProjectStore) -> None:
        self.tracker = tracker
        self.session_store = sessions
        self.project_store = projects
        self.sessions: List[Session] = []
        self.projects: List[Project] = []
        self.stats: Optional[comparison.ComparisonStats] = None
        # Day the cached stats were computed for
        self.stats_day: Optional[date] = None
        self.totals: Dict[str, float] = {}
        self.mode = MODE_SELECT
        self.cursor = 0
        self.scroll_offset = 0
        self.project_cursor = 0
        self.selected: Set[str] = set()
        self.message: Optional[str] = None
        # Pending yes/no question: "delete" or "quit"
        self.confirming: Optional[str] = None


def _reload(state: _State) -> None:
    """Re-read both files and recompute the cached statistics."""
    try:
        state.sessions = recent_sessions(state.session_store.load(), limit=0)
        state.projects = state.project_store.load()
    except DeepworkError as exc:
        logger.error("Reload failed: %s", exc)
        state.message = f"Error: {exc}"
        return
    _recompute_stats(state, datetime.now())
    state.totals = project_totals(state.sessions)
    if state.cursor >= len(state.sessions):
        state.cursor = max(0, len(state.sessions) - 1)


def _recompute_stats(state: _State, now: datetime) -> None:
    state.stats = comparison.compute(state.sessions, now=now)
    state.stats_day = now.date()


def _roll_over_day(state: _State, now: datetime) -> None:
    """Recompute the cached comparisons from memory once the calendar day changes."""
    if state.stats_day is not None and now.date() != state.stats_day:
        logger.info("Day changed to %s; recomputing comparisons", now.date())
        _recompute_stats(state, now)


def _init_colors() -> None:
    """Initialize curses color pairs using true-color if available."""
    curses.start_color()
    curses.use_default_colors()

    if curses.can_change_color():
        # curses uses 0-1000 scale
        def _set(color_id: int, r: int, g: int, b: int) -> None:
            curses.init_color(color_id, r * 1000 // 255, g * 1000 // 255, b * 1000 // 255)

        _set(20, *_SELECT_COLOR)
        _set(21, *_DELETE_COLOR)
        _set(22, 255, 255, 255)  # white
        _set(23, *_ACTIVE_COLOR)

        curses.init_pair(_PAIR_SELECT_ACCENT, 22, 20)
        curses.init_pair(_PAIR_DELETE_ACCENT, 22, 21)
        curses.init_pair(_PAIR_NORMAL, -1, -1)
        curses.init_pair(_PAIR_DIVIDER, 20, -1)
        curses.init_pair(_PAIR_ACTIVE, 23, -1)
    else:
        curses.init_pair(_PAIR_SELECT_ACCENT, curses.COLOR_WHITE, curses.COLOR_BLUE)
        curses.init_pair(_PAIR_DELETE_ACCENT, curses.COLOR_WHITE, curses.COLOR_RED)
        curses.init_pair(_PAIR_NORMAL, -1, -1)
        curses.init_pair(_PAIR_DIVIDER, curses.COLOR_BLUE, -1)
        curses.init_pair(_PAIR_ACTIVE, curses.COLOR_GREEN, -1)


def _accent_pair(mode: str) -> int:
    """Return the color pair ID for the current mode's accent."""
    return _PAIR_DELETE_ACCENT if mode == MODE_DELETE else _PAIR_SELECT_ACCENT


def _ensure_cursor_visible(state: _State, pane_height: int) -> None:
    """Adjust scroll_offset so the cursor is visible in the pane."""
    # Header row takes 1 line, so data rows = pane_height - 1
    data_height = pane_height - 1
    if state.cursor < state.scroll_offset:
        state.scroll_offset = state.cursor
    elif state.cursor >= state.scroll_offset + data_height:
        state.scroll_offset = state.cursor - data_height + 1


def _draw_divider(stdscr: curses.window, col: int, y: int, height: int) -> None:
    """Draw a vertical divider line between the two panes."""
    for row in range(height):
        try:
            stdscr.addstr(y + row, col, "│", curses.color_pair(_PAIR_DIVIDER))
        except curses.error:
            pass


def _render(stdscr: curses.window, state: _State) -> None:
    """Perform a full render of the TUI."""
    stdscr.erase()
    max_y, max_x = stdscr.getmaxyx()

    if max_y < 3 or max_x < 20:
        try:
            stdscr.addstr(0, 0, "Terminal too small")
        except curses.error:
            pass
        stdscr.noutrefresh()
        curses.doupdate()
        return

    status_y = max_y - 1
    pane_height = max_y - 1

    # Pane widths: left ~60%, divider 1 col, right ~40%
    left_width = max(20, int(max_x * 0.6))
    right_x = left_width + 1
    right_width = max_x - right_x

    # Hide right pane on narrow terminals
    show_right = max_x >= 60
    if not show_right:
        left_width = max_x

    _ensure_cursor_visible(state, pane_height)
    current = state.sessions[state.cursor] if state.sessions else None

    if state.mode == MODE_PROJECT:
        left_pane.draw_projects(
            stdscr, state.projects, state.project_cursor,
            accent_pair=_PAIR_SELECT_ACCENT, normal_pair=_PAIR_NORMAL,
            x=0, y=0, width=left_width, height=pane_height,
        )
    elif state.sessions:
        left_pane.draw(
            stdscr, state.sessions, state.cursor, state.scroll_offset,
            state.mode, state.selected,
            accent_pair=_accent_pair(state.mode),
            normal_pair=_PAIR_NORMAL,
            x=0, y=0, width=left_width, height=pane_height,
        )
    else:
        try:
            msg = "No sessions recorded yet. Press S to start tracking."
            stdscr.addstr(pane_height // 2, max(0, (left_width - len(msg)) // 2), msg[:left_width])
        except curses.error:
            pass

    if show_right:
        _draw_divider(stdscr, left_width, 0, pane_height)
        right_pane.draw(
            stdscr, state.tracker.state, state.tracker.elapsed_ms(),
            state.stats, state.totals, current,
            _PAIR_NORMAL, _PAIR_ACTIVE,
            x=right_x, y=0, width=right_width, height=pane_height,
        )

    tracking = None
    if state.tracker.is_active:
        tracking = f"{state.tracker.project_name} {format_duration(state.tracker.elapsed_ms())}"
    status_bar.draw(stdscr, state.mode, _accent_pair(state.mode),
                    max_x, status_y, message=state.message, tracking=tracking)

    stdscr.noutrefresh()
    curses.doupdate()


def _read_key(stdscr: curses.window) -> Union[int, str, None]:
    """Read one key as an int (special keys) or str (characters); None on timeout."""
    try:
        return stdscr.get_wch()
    except curses.error:
        return None


def _prompt_text(stdscr: curses.window, state: _State, label: str, initial: str = "") -> Optional[str]:
    """Read a line of text in the status bar. Enter submits, Esc abandons (returns None)."""
    buffer = list(initial)
    try:
        curses.curs_set(1)
    except curses.error:
        pass
    try:
        while True:
            state.message = f"{label} {''.join(buffer)}"
            _render(stdscr, state)
            key = _read_key(stdscr)
            if key is None:
                continue
            if key in ("\n", "\r", curses.KEY_ENTER):
                return "".join(buffer)
            if key == "\x1b":
                return None
            if key in (curses.KEY_BACKSPACE, "\x7f", "\b"):
                if buffer:
                    buffer.pop()
            elif isinstance(key, str) and key.isprintable():
                buffer.append(key)
    finally:
        state.message = None
        try:
            curses.curs_set(0)
        except curses.error:
            pass


def _stop_session(stdscr: curses.window, state: _State) -> None:
    """Stop tracking, asking for notes in the status bar."""
    def prompt(context: NotesContext) -> Optional[str]:
        label = f"Notes for {context.project_name} ({format_duration(context.duration_ms)}), Esc to skip:"
        return _prompt_text(stdscr, state, label)

    try:
        saved = state.tracker.stop_with_prompt(prompt)
    except DeepworkError as exc:
        _reload(state)
        state.message = f"Error: session not saved: {exc}"
        return

    _reload(state)
    if saved is not None:
        state.message = f"Saved {saved.duration_minutes} min on {saved.project}."


def _start_session(state: _State) -> None:
    if not state.projects:
        state.mode = MODE_SELECT
        state.message = "No projects found. Add one with: deepwork projects add NAME"
        return
    project = state.projects[state.project_cursor]
    try:
        state.tracker.start(project.name)
    except DeepworkError as exc:
        state.message = f"Error: {exc}"
    state.mode = MODE_SELECT


def _edit_session(stdscr: curses.window, state: _State) -> None:
    """Prompt for a field and a new value for the highlighted session."""
    if not state.sessions:
        return
    session = state.sessions[state.cursor]
    fields = ", ".join(f.value for f in EditableField)
    field = _prompt_text(stdscr, state, f"Edit field ({fields}):")
    if not field:
        return
    try:
        current = getattr(session, EditableField(field.strip()).value)
    except ValueError:
        current = ""
    value = _prompt_text(stdscr, state, f"New {field.strip()}:", current)
    if value is None:
        return
    try:
        state.session_store.update(session.id, field, value)
    except DeepworkError as exc:
        state.message = f"Error: {exc}"
        return
    _reload(state)
    state.message = "Session updated."


def _request_quit(state: _State) -> Optional[str]:
    """Quit at once when idle; otherwise ask first, since the running session would be lost."""
    if not state.tracker.is_active:
        return "quit"
    state.confirming = "quit"
    state.message = f"Tracking {state.tracker.project_name}; quitting loses it. Quit anyway? [y/N]"
    return None


def _handle_select_key(key: Union[int, str], state: _State, stdscr: curses.window) -> Optional[str]:
    """Handle keypress in SELECT mode. Returns 'quit' or None."""
    if key in (curses.KEY_UP, "k"):
        if state.cursor > 0:
            state.cursor -= 1
    elif key in (curses.KEY_DOWN, "j"):
        if state.cursor < len(state.sessions) - 1:
            state.cursor += 1
    elif key in ("S", "s"):
        if state.tracker.is_active:
            _stop_session(stdscr, state)
        else:
            state.mode = MODE_PROJECT
            state.project_cursor = 0
    elif key in ("E", "e"):
        _edit_session(stdscr, state)
    elif key in ("D", "d"):
        if state.sessions:
            state.mode = MODE_DELETE
    elif key in ("R", "r"):
        _reload(state)
    elif key in ("Q", "q"):
        return _request_quit(state)
    return None


def _handle_project_key(key: Union[int, str], state: _State) -> None:
    if key in (curses.KEY_UP, "k"):
        if state.project_cursor > 0:
            state.project_cursor -= 1
    elif key in (curses.KEY_DOWN, "j"):
        if state.project_cursor < len(state.projects) - 1:
            state.project_cursor += 1
    elif key in ("\n", "\r", curses.KEY_ENTER):
        _start_session(state)
    elif key in ("\x1b", "S", "s", "Q", "q"):
        state.mode = MODE_SELECT


def _handle_delete_key(key: Union[int, str], state: _State) -> Optional[str]:
    """Handle keypress in DELETE mode. Returns 'quit' or None."""
    if key in (curses.KEY_UP, "k"):
        if state.cursor > 0:
            state.cursor -= 1
    elif key in (curses.KEY_DOWN, "j"):
        if state.cursor < len(state.sessions) - 1:
            state.cursor += 1
    elif key == "\t":
        # Toggle selection on current session
        sid = state.sessions[state.cursor].id
        if sid in state.selected:
            state.selected.discard(sid)
        else:
            state.selected.add(sid)
    elif key == "\x1b":
        state.mode = MODE_SELECT
        state.selected.clear()
    elif key in ("Q", "q"):
        return _request_quit(state)
    elif key in ("\n", "\r", curses.KEY_ENTER):
        if not state.selected:
            state.message = "No sessions selected."
        else:
            state.confirming = "delete"
            state.message = f"Delete {len(state.selected)} session(s)? [y/N]"
    return None


def _do_delete(state: _State) -> None:
    """Delete all selected sessions and refresh the list."""
    deleted = 0
    error: Optional[str] = None
    for session_id in sorted(state.selected):
        try:
            state.session_store.delete(session_id)
            deleted += 1
        except DeepworkError as exc:
            error = str(exc)
            break

    state.selected.clear()
    state.mode = MODE_SELECT
    state.scroll_offset = 0
    _reload(state)
    state.message = f"Error: {error}" if error else f"Deleted {deleted} session(s)."


def _main(stdscr: curses.window, state: _State) -> None:
    """Event loop, run inside curses.wrapper."""
    curses.curs_set(0)  # hide cursor
    stdscr.keypad(True)
    stdscr.timeout(100)  # redraw often enough for the elapsed clock
    _init_colors()

    _reload(state)

    while True:
        _roll_over_day(state, datetime.now())
        _render(stdscr, state)

        key = _read_key(stdscr)
        if key is None:
            continue

        if key == curses.KEY_RESIZE:
            stdscr.clear()
            continue

        # Handle confirmation prompt
        if state.confirming:
            action, state.confirming, state.message = state.confirming, None, None
            if key in ("y", "Y"):
                if action == "quit":
                    logger.warning("Quit while tracking %r; session discarded", state.tracker.project_name)
                    break
                _do_delete(state)
            continue

        # Clear transient messages on any keypress
        state.message = None

        if state.mode == MODE_SELECT:
            if _handle_select_key(key, state, stdscr) == "quit":
                break
        elif state.mode == MODE_PROJECT:
            _handle_project_key(key, state)
        elif state.mode == MODE_DELETE:
            if _handle_delete_key(key, state) == "quit":
                break


def run(tracker: Optional[SessionTracker] = None) -> None:
    """Entry point for the TUI. Sets up data files, the tracker and curses."""
    ensure_data_files()
    session_store = tracker.store if tracker is not None else SessionStore()
    tracker = tracker if tracker is not None else SessionTracker(session_store)
    state = _State(tracker, session_store, ProjectStore())
    curses.wrapper(_main, state)


if __name__ == "__main__":
    run()
