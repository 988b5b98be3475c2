"""Logging setup.

The terminal belongs to curses while the dashboard runs, so log records go to
a file in the data directory rather than to stderr.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from deepwork.utils.paths import get_log_path

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def setup_logging(log_path: Optional[Path] = None) -> None:
    """Configure the root logger once. Level comes from DEEPWORK_LOG_LEVEL (default INFO)."""
    path = log_path if log_path is not None else get_log_path()
    level_name = os.environ.get("DEEPWORK_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(path, encoding="utf-8")
    except OSError:
        # Data dir not writable; keep records out of the curses screen.
        handler = logging.NullHandler()

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=[handler])
