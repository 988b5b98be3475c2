"""First-run creation of the data directory and its files."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from deepwork.data.files import atomic_write
from deepwork.data.sessions import COLUMNS
from deepwork.exceptions import StorageError
from deepwork.utils.paths import PROJECTS_FILE, SESSIONS_FILE, get_data_dir

logger = logging.getLogger(__name__)


def ensure_data_files(data_dir: Optional[Path] = None) -> Path:
    """Create the data dir, an empty sessions CSV and an empty projects array if missing.

    Existing files are never touched. Returns the data directory.
    """
    root = data_dir if data_dir is not None else get_data_dir()
    try:
        root.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise StorageError(root, f"cannot create data directory: {exc}") from exc

    sessions_path = root / SESSIONS_FILE
    if not sessions_path.exists():
        logger.info("Creating empty sessions file at %s", sessions_path)
        atomic_write(sessions_path, ",".join(COLUMNS) + "\n")

    projects_path = root / PROJECTS_FILE
    if not projects_path.exists():
        logger.info("Creating empty projects file at %s", projects_path)
        atomic_write(projects_path, json.dumps([], indent=2))

    return root
