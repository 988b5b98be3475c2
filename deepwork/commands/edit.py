"""Handler for the 'edit' subcommand: change one field of a recorded session."""

from __future__ import annotations

import sys
from typing import Optional

from deepwork.data import SessionStore
from deepwork.exceptions import DeepworkError
from deepwork.utils.formatting import format_minutes


def run(session_id: str, field: str, value: str, store: Optional[SessionStore] = None) -> None:
    store = store if store is not None else SessionStore()
    try:
        session = store.update(session_id, field, value)
    except DeepworkError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    print(f"Session '{session.id}' updated: {session.date} {session.start_time}-{session.end_time} "
          f"({format_minutes(session.duration_minutes)}) {session.project}")
