"""Handler for the 'export' subcommand: write sessions to a plain CSV file."""

from __future__ import annotations

import sys
from typing import Optional

from deepwork.data import SessionStore
from deepwork.exceptions import DeepworkError


def run(path: str, store: Optional[SessionStore] = None) -> None:
    store = store if store is not None else SessionStore()
    try:
        count = store.export(path)
    except DeepworkError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    print(f"Exported {count} session(s) to {path}.")
