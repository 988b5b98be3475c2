"""Handler for the 'projects' subcommand: list, add, recolor and delete projects."""

from __future__ import annotations

import sys
from typing import Optional

from deepwork.data import ProjectStore
from deepwork.exceptions import DeepworkError


def list_projects(store: Optional[ProjectStore] = None) -> None:
    store = store if store is not None else ProjectStore()
    try:
        projects = store.load()
    except DeepworkError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    if not projects:
        print("No projects created yet.", file=sys.stderr)
        return

    id_width = max(len(p.id) for p in projects)
    for project in projects:
        print(f"{project.id:<{id_width}}\t{project.color or '-':<7}\t{project.name}")


def add(name: str, color: Optional[str] = None, store: Optional[ProjectStore] = None) -> None:
    store = store if store is not None else ProjectStore()
    try:
        project = store.add(name, color)
    except DeepworkError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    print(f"Project '{project.name}' added ({project.id}).")


def set_color(project_id: str, color: str, store: Optional[ProjectStore] = None) -> None:
    store = store if store is not None else ProjectStore()
    try:
        project = store.update_color(project_id, color)
    except DeepworkError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    print(f"Project '{project.name}' color set to {project.color}.")


def delete(project_id: str, store: Optional[ProjectStore] = None) -> None:
    store = store if store is not None else ProjectStore()
    try:
        project = store.delete(project_id)
    except DeepworkError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    print(f"Project '{project.name}' deleted. Its sessions are kept.")
