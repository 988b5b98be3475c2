"""Handler for the 'ls' subcommand.

Prints an aligned table of sessions to stdout, most recent first.
"""

from __future__ import annotations

import sys
from typing import Optional

from deepwork.data import SessionStore
from deepwork.exceptions import DeepworkError
from deepwork.stats.aggregates import recent_sessions
from deepwork.utils.formatting import format_minutes, truncate


def run(limit: int = 20, store: Optional[SessionStore] = None) -> None:
    """Print sessions as an aligned table to stdout."""
    store = store if store is not None else SessionStore()
    try:
        sessions = recent_sessions(store.load(), limit=limit)
    except DeepworkError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    if not sessions:
        print("No sessions recorded yet.", file=sys.stderr)
        return

    headers = ["ID", "Date", "Start", "End", "Duration", "Project", "Notes"]

    rows = []
    for session in sessions:
        rows.append([
            session.id,
            session.date,
            session.start_time[:5],
            session.end_time[:5],
            format_minutes(session.duration_minutes),
            truncate(session.project, 24),
            truncate(session.notes.replace("\n", " ").strip(), 40),
        ])

    # Compute column widths from headers and data
    col_widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            col_widths[i] = max(col_widths[i], len(cell))

    fmt = "\t".join(f"{{:<{w}}}" for w in col_widths)
    print(fmt.format(*headers))
    for row in rows:
        print(fmt.format(*row))


if __name__ == "__main__":
    run()
