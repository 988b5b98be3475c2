"""Handler for the 'compare' subcommand.

Prints today, this week and this month next to the same point in the three
previous periods.
"""

from __future__ import annotations

import sys
from datetime import datetime
from typing import Optional

from deepwork.data import SessionStore
from deepwork.exceptions import DeepworkError
from deepwork.stats import comparison
from deepwork.utils.formatting import format_hours


def run(store: Optional[SessionStore] = None, now: Optional[datetime] = None) -> None:
    store = store if store is not None else SessionStore()
    try:
        stats = comparison.compute(store.load(), now=now)
    except DeepworkError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    for title, block in (("Day", stats.day), ("Week", stats.week), ("Month", stats.month)):
        print(title)
        windows = [block.current] + block.past
        label_width = max(len(w.label) for w in windows)
        range_width = max(len(w.range) for w in windows)
        for window in windows:
            print(f"  {window.label:<{label_width}}  {window.range:<{range_width}}  {format_hours(window.hours):>7}")
        print()
