"""Exceptions raised by the deepwork core."""

from __future__ import annotations

from pathlib import Path
from typing import Union


class DeepworkError(Exception):
    """Base exception for deepwork errors."""
    pass


class NotFoundError(DeepworkError):
    """Raised when a session or project id does not exist."""

    def __init__(self, kind: str, item_id: str):
        self.kind = kind
        self.item_id = item_id
        super().__init__(f"{kind.capitalize()} with ID '{item_id}' not found")


class ValidationError(DeepworkError):
    """Raised for malformed input, before anything is written."""
    pass


class DuplicateError(DeepworkError):
    """Raised when a project name collides with an existing one."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Project named '{name}' already exists")


class StorageError(DeepworkError):
    """Raised when a data file cannot be read or written."""

    def __init__(self, path: Union[str, Path], reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{path}: {reason}")
