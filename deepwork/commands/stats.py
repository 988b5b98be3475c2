"""Handler for the 'stats' subcommand: per-project totals and busiest hours."""

from __future__ import annotations

import sys
from typing import Optional

from deepwork.data import SessionStore
from deepwork.exceptions import DeepworkError
from deepwork.stats.aggregates import hourly_distribution, project_totals
from deepwork.utils.formatting import format_hours


def run(store: Optional[SessionStore] = None, top_hours: int = 3) -> None:
    store = store if store is not None else SessionStore()
    try:
        sessions = store.load()
    except DeepworkError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    if not sessions:
        print("No sessions recorded yet.", file=sys.stderr)
        return

    totals = project_totals(sessions)
    grand_total = sum(totals.values())
    name_width = max(len(name) for name in totals)
    print("Projects")
    for name, hours in sorted(totals.items(), key=lambda item: item[1], reverse=True):
        share = hours / grand_total * 100 if grand_total else 0.0
        print(f"  {name:<{name_width}}  {format_hours(hours):>7}  {share:5.1f}%")
    print()

    hours_by_start = hourly_distribution(sessions)
    busiest = sorted(range(24), key=lambda h: hours_by_start[h], reverse=True)[:top_hours]
    print("Busiest start hours")
    for hour in busiest:
        if hours_by_start[hour] > 0:
            print(f"  {hour:02d}:00  {format_hours(hours_by_start[hour]):>7}")
