"""Shared fixtures: every test gets its own data directory."""

from pathlib import Path

import pytest

from deepwork.data import ProjectStore, Session, SessionStore


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    """Point DEEPWORK_DATA_DIR at a fresh temp directory."""
    monkeypatch.setenv("DEEPWORK_DATA_DIR", str(tmp_path))
    return tmp_path


@pytest.fixture
def sessions_path(data_dir) -> Path:
    return data_dir / "data.csv"


@pytest.fixture
def projects_path(data_dir) -> Path:
    return data_dir / "projects.json"


@pytest.fixture
def session_store(sessions_path):
    return SessionStore(sessions_path)


@pytest.fixture
def project_store(projects_path):
    return ProjectStore(projects_path)


@pytest.fixture
def make_session():
    """Build a Session with sensible defaults."""
    def _make(**overrides):
        values = dict(
            date="2024-01-01",
            start_time="09:00:00",
            end_time="10:30:00",
            duration_minutes=90,
            project="Writing",
            notes="",
        )
        values.update(overrides)
        return Session(**values)
    return _make
