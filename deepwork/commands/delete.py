"""Handler for the 'delete' subcommand.

Looks up a session by ID, asks for confirmation, then removes it from the
sessions file.
"""

from __future__ import annotations

import sys
from typing import Optional

from deepwork.data import SessionStore
from deepwork.exceptions import DeepworkError
from deepwork.utils.formatting import format_minutes


def run(session_id: str, store: Optional[SessionStore] = None, assume_yes: bool = False) -> None:
    """Delete a recorded session.

    Args:
        session_id: Full or unambiguous prefix of the session ID.
        store: Session store to use, defaults to the user's data file.
        assume_yes: Skip the confirmation prompt.
    """
    store = store if store is not None else SessionStore()
    try:
        sessions = store.load()
    except DeepworkError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    # Find matching session (exact or prefix match)
    match = None
    for session in sessions:
        if session.id == session_id:
            match = session
            break
    if match is None:
        candidates = [s for s in sessions if s.id.startswith(session_id)]
        if len(candidates) == 1:
            match = candidates[0]
        elif len(candidates) > 1:
            print(f"Error: Session ID '{session_id}' is ambiguous.", file=sys.stderr)
            sys.exit(1)

    if match is None:
        print(f"Error: Session '{session_id}' not found.", file=sys.stderr)
        sys.exit(1)

    print(f"  Session ID: {match.id}")
    print(f"  Project:    {match.project}")
    print(f"  Date:       {match.date} {match.start_time}-{match.end_time}")
    print(f"  Duration:   {format_minutes(match.duration_minutes)}")
    if match.notes:
        print(f"  Notes:      {match.notes}")
    print()

    if not assume_yes:
        try:
            answer = input("Delete this session? [y/N] ").strip().lower()
        except (EOFError, KeyboardInterrupt):
            print()
            print("Aborted.")
            sys.exit(0)

        if answer != "y":
            print("Aborted.")
            sys.exit(0)

    try:
        store.delete(match.id)
    except DeepworkError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    print(f"Session '{match.id}' deleted.")


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Error: 'delete' requires a session ID argument.", file=sys.stderr)
        sys.exit(1)
    run(sys.argv[1])
