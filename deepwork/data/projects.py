"""JSON-backed store of projects.

projects.json holds a pretty-printed array of ``{id, name, color?}`` objects.
Older files may contain entries without ids or names; these are repaired the
first time the file is loaded.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, List, Optional, Tuple

from deepwork.data.files import atomic_write
from deepwork.data.models import DEFAULT_PROJECT_COLOR, Project
from deepwork.exceptions import DuplicateError, NotFoundError, StorageError, ValidationError
from deepwork.utils.ids import generate_id
from deepwork.utils.paths import get_projects_path

logger = logging.getLogger(__name__)

COLOR_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")
UNNAMED = "Unnamed"


def validate_color(color: Any) -> str:
    if not isinstance(color, str) or not COLOR_RE.match(color):
        raise ValidationError(f"Invalid color '{color}'. Must be a hex color (e.g. #FF0000).")
    return color


class ProjectStore:
    """Load and mutate the projects file. Every mutation rewrites the whole array."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path) if path is not None else get_projects_path()

    def _migrate(self, raw: Any) -> Tuple[List[Project], bool]:
        """Turn decoded JSON into clean Project objects. Returns (projects, changed)."""
        if not isinstance(raw, list):
            logger.error("%s does not contain a JSON array; resetting", self.path)
            return [], True

        changed = False
        projects: List[Project] = []
        for entry in raw:
            if not isinstance(entry, dict):
                logger.warning("Dropping non-object entry from %s: %r", self.path, entry)
                changed = True
                continue

            project_id = entry.get("id")
            if project_id is None or project_id == "":
                project_id = generate_id()
                logger.info("Assigned id %s to project %r", project_id, entry.get("name"))
                changed = True
            elif not isinstance(project_id, str):
                project_id = str(project_id)
                changed = True

            name = entry.get("name")
            if not isinstance(name, str) or not name.strip():
                logger.warning("Project %s has a missing or invalid name; using %r", project_id, UNNAMED)
                name = UNNAMED
                changed = True

            color = entry.get("color")
            if "color" in entry and not (isinstance(color, str) and COLOR_RE.match(color)):
                logger.warning("Project %s has an invalid color %r; dropping it", project_id, color)
                color = None
                changed = True
            projects.append(Project(id=project_id, name=name, color=color))

        return projects, changed

    def load(self) -> List[Project]:
        """Read all projects, repairing and rewriting the file if needed.

        A missing file yields an empty list and is not created. Content that is
        not valid JSON is treated as an empty list and overwritten.
        """
        try:
            with open(self.path, encoding="utf-8") as file:
                text = file.read()
        except FileNotFoundError:
            return []
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageError(self.path, f"cannot read projects file: {exc}") from exc

        try:
            raw = json.loads(text)
        except json.JSONDecodeError as exc:
            logger.error("Corrupt projects file %s (%s); resetting to empty", self.path, exc)
            raw = None

        projects, changed = self._migrate(raw)
        if changed:
            logger.info("Rewriting %s after migration", self.path)
            self._write(projects)
        return projects

    def _write(self, projects: List[Project]) -> None:
        content = json.dumps([p.to_dict() for p in projects], indent=2, ensure_ascii=False)
        atomic_write(self.path, content)

    def names(self) -> List[str]:
        return [p.name for p in self.load()]

    def find_by_name(self, name: str) -> Optional[Project]:
        """Case-insensitive lookup by project name."""
        wanted = name.strip().casefold()
        for project in self.load():
            if project.name.casefold() == wanted:
                return project
        return None

    def add(self, name: str, color: Optional[str] = None) -> Project:
        """Create a project.

        Raises:
            ValidationError: Blank name or malformed color.
            DuplicateError: A project with this name exists (ignoring case).
        """
        trimmed = (name or "").strip()
        if not trimmed:
            raise ValidationError("Project name cannot be empty.")
        if color is not None:
            validate_color(color)

        projects = self.load()
        if any(p.name.casefold() == trimmed.casefold() for p in projects):
            raise DuplicateError(trimmed)

        project = Project(id=generate_id(), name=trimmed, color=color or DEFAULT_PROJECT_COLOR)
        projects.append(project)
        self._write(projects)
        logger.info("Added project %r (%s)", project.name, project.id)
        return project

    def update_color(self, project_id: str, color: str) -> Project:
        """Set a project's color.

        Raises:
            ValidationError: Color is not #RRGGBB.
            NotFoundError: No project has this id.
        """
        validate_color(color)
        projects = self.load()
        project = self._find(projects, project_id)
        project.color = color
        self._write(projects)
        logger.info("Project %s color set to %s", project_id, color)
        return project

    def delete(self, project_id: str) -> Project:
        """Remove a project. Sessions recorded under its name are left as they are.

        Raises:
            NotFoundError: No project has this id.
        """
        projects = self.load()
        project = self._find(projects, project_id)
        self._write([p for p in projects if p.id != project.id])
        logger.info("Deleted project %r (%s)", project.name, project_id)
        return project

    @staticmethod
    def _find(projects: List[Project], project_id: str) -> Project:
        for project in projects:
            if project.id == project_id:
                return project
        raise NotFoundError("project", project_id)
