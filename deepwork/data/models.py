"""Data models for tracked sessions and projects."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

DEFAULT_PROJECT_COLOR = "#4E79A7"


@dataclass
class Session:
    """A completed, persisted unit of tracked work.

    ``date`` and the two times are local-time strings (YYYY-MM-DD, HH:MM:SS).
    ``end_time`` may be earlier than ``start_time`` for sessions that ran past
    midnight.
    """

    date: str
    start_time: str
    end_time: str
    duration_minutes: int
    project: str
    notes: str = ""
    id: str = ""


@dataclass
class Project:
    """A named, colored tracking bucket."""

    id: str
    name: str
    color: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"id": self.id, "name": self.name}
        if self.color is not None:
            data["color"] = self.color
        return data


class EditableField(str, Enum):
    """Session fields that can be edited after the fact."""

    DATE = "date"
    PROJECT = "project"
    START_TIME = "start_time"
    END_TIME = "end_time"
    NOTES = "notes"

    @property
    def is_time_boundary(self) -> bool:
        return self in (EditableField.START_TIME, EditableField.END_TIME)
