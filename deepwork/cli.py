"""Command-line entry point.

``deepwork`` with no arguments opens the dashboard; the subcommands give
scriptable access to the same data.
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from deepwork.commands import compare, delete, edit, export, ls, projects, stats
from deepwork.data.models import EditableField
from deepwork.exceptions import DeepworkError
from deepwork.utils.log import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="deepwork", description="Track deep-work sessions per project.")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("ui", help="open the dashboard (default)")

    ls_parser = sub.add_parser("ls", help="list recorded sessions")
    ls_parser.add_argument("--limit", type=int, default=20, help="rows to show, 0 for all (default: 20)")

    sub.add_parser("compare", help="compare today, this week and this month with earlier periods")
    sub.add_parser("stats", help="hours per project and busiest hours")

    edit_parser = sub.add_parser("edit", help="change one field of a session")
    edit_parser.add_argument("session_id")
    edit_parser.add_argument("field", choices=[f.value for f in EditableField])
    edit_parser.add_argument("value")

    delete_parser = sub.add_parser("delete", help="delete a session")
    delete_parser.add_argument("session_id")
    delete_parser.add_argument("-y", "--yes", action="store_true", help="do not ask for confirmation")

    export_parser = sub.add_parser("export", help="write sessions to a plain CSV file")
    export_parser.add_argument("path")

    projects_parser = sub.add_parser("projects", help="manage projects")
    projects_sub = projects_parser.add_subparsers(dest="action")
    projects_sub.add_parser("list", help="list projects (default)")
    add_parser = projects_sub.add_parser("add", help="create a project")
    add_parser.add_argument("name")
    add_parser.add_argument("--color", help="hex color such as #4E79A7")
    color_parser = projects_sub.add_parser("color", help="change a project's color")
    color_parser.add_argument("project_id")
    color_parser.add_argument("color")
    remove_parser = projects_sub.add_parser("delete", help="delete a project")
    remove_parser.add_argument("project_id")

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    setup_logging()

    if args.command in (None, "ui"):
        from deepwork.tui import app

        try:
            app.run()
        except DeepworkError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            sys.exit(1)
    elif args.command == "ls":
        ls.run(limit=args.limit)
    elif args.command == "compare":
        compare.run()
    elif args.command == "stats":
        stats.run()
    elif args.command == "edit":
        edit.run(args.session_id, args.field, args.value)
    elif args.command == "delete":
        delete.run(args.session_id, assume_yes=args.yes)
    elif args.command == "export":
        export.run(args.path)
    elif args.command == "projects":
        if args.action in (None, "list"):
            projects.list_projects()
        elif args.action == "add":
            projects.add(args.name, args.color)
        elif args.action == "color":
            projects.set_color(args.project_id, args.color)
        elif args.action == "delete":
            projects.delete(args.project_id)


if __name__ == "__main__":
    main()
