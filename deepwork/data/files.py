"""Whole-file writes shared by the session and project stores."""

from __future__ import annotations

import logging
from pathlib import Path

from deepwork.exceptions import StorageError

logger = logging.getLogger(__name__)


def atomic_write(path: Path, content: str) -> None:
    """Replace path with content using a temp-file-then-rename approach.

    Writes to a .tmp file in the same directory, then renames it over the
    original, so a crash mid-write never truncates the existing file.

    Raises:
        StorageError: If the temp file cannot be written or renamed.
    """
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(tmp_path, "w", encoding="utf-8", newline="") as tmp_file:
            tmp_file.write(content)
        tmp_path.replace(path)
    except OSError as exc:
        # Clean up temp file on failure; original remains untouched
        try:
            tmp_path.unlink(missing_ok=True)
        except OSError:
            pass
        logger.error("Failed to write %s: %s", path, exc)
        raise StorageError(path, f"cannot write file: {exc}") from exc
