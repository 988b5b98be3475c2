"""Path utilities for locating deepwork data files."""

from __future__ import annotations

import os
from pathlib import Path

import appdirs

APP_NAME = "deepwork"
SESSIONS_FILE = "data.csv"
PROJECTS_FILE = "projects.json"
LOG_FILE = "deepwork.log"


def get_data_dir() -> Path:
    """Return the data dir. Honors DEEPWORK_DATA_DIR env var, defaults to the per-user app data dir."""
    env = os.environ.get("DEEPWORK_DATA_DIR")
    if env:
        return Path(env)
    return Path(appdirs.user_data_dir(APP_NAME, APP_NAME))


def get_sessions_path() -> Path:
    """Return full path to the sessions CSV."""
    return get_data_dir() / SESSIONS_FILE


def get_projects_path() -> Path:
    """Return full path to projects.json."""
    return get_data_dir() / PROJECTS_FILE


def get_log_path() -> Path:
    return get_data_dir() / LOG_FILE
