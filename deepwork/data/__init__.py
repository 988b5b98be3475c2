"""Data layer for deepwork: session and project stores."""

from deepwork.data.bootstrap import ensure_data_files
from deepwork.data.models import DEFAULT_PROJECT_COLOR, EditableField, Project, Session
from deepwork.data.projects import ProjectStore
from deepwork.data.sessions import SessionStore

__all__ = [
    "DEFAULT_PROJECT_COLOR",
    "EditableField",
    "Project",
    "ProjectStore",
    "Session",
    "SessionStore",
    "ensure_data_files",
]
