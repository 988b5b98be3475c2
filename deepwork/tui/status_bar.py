"""Bottom line of the dashboard: mode badge, tracking indicator and key hints.

A pending message (confirmation question, notes prompt, error) replaces the
hints until the next key press.
"""

from __future__ import annotations

import curses
from typing import Optional

_BADGES = {
    "SELECT": "BROWSE",
    "DELETE": "DELETE",
    "PROJECT": "START",
}

_KEYS = {
    "SELECT": "↑/↓ move  S start/stop  E edit  D delete  R reload  Q quit",
    "DELETE": "↑/↓ move  Tab mark  Enter delete marked  Esc back  Q quit",
    "PROJECT": "↑/↓ choose project  Enter start  Esc back",
}


def compose(mode: str, tracking: Optional[str] = None, message: Optional[str] = None) -> str:
    """Build the status text for mode; tracking is a short 'Project 0h 5m' label."""
    if message is not None:
        return f" {message}"
    parts = [f" {_BADGES.get(mode, mode)} "]
    if tracking:
        parts.append(f"● {tracking}")
    parts.append(_KEYS.get(mode, _KEYS["SELECT"]))
    return " | ".join(parts)


def draw(stdscr: curses.window, mode: str, accent_pair: int, width: int, y: int,
         message: Optional[str] = None, tracking: Optional[str] = None) -> None:
    text = compose(mode, tracking, message)[:width].ljust(width)
    try:
        stdscr.addstr(y, 0, text, curses.color_pair(accent_pair) | curses.A_BOLD)
    except curses.error:
        # The bottom-right cell cannot be written on some terminals
        pass
