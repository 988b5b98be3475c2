"""CSV-backed store of completed sessions.

The file has one header row followed by one row per session. New sessions are
appended in place; edits and deletions rewrite the whole file through a temp
file that is renamed over the original.
"""

from __future__ import annotations

import csv
import io
import logging
import re
from pathlib import Path
from typing import Callable, Dict, List, Optional, Set, Tuple, Union

from deepwork.data.files import atomic_write
from deepwork.data.models import EditableField, Session
from deepwork.exceptions import NotFoundError, StorageError, ValidationError
from deepwork.utils.dates import canonical_date, canonical_time, duration_between
from deepwork.utils.ids import generate_id
from deepwork.utils.paths import get_sessions_path

logger = logging.getLogger(__name__)

# Human-readable layout shared with exports and older files.
EXPORT_COLUMNS = ["date", "start_time", "end_time", "duration_minutes", "project", "notes"]
COLUMNS = EXPORT_COLUMNS + ["id"]

_LEADING_INT_RE = re.compile(r"^\s*(\d+)")


def _coerce_minutes(value: str) -> int:
    """Read the leading digits of a duration cell, 0 if there are none."""
    match = _LEADING_INT_RE.match(value or "")
    return int(match.group(1)) if match else 0


def _normalize_project(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValidationError("Project name cannot be empty.")
    return value


def _normalize_notes(value: str) -> str:
    return value if value is not None else ""


# field -> (attribute name, value normalizer)
_FIELD_HANDLERS: Dict[EditableField, Tuple[str, Callable[[str], str]]] = {
    EditableField.DATE: ("date", canonical_date),
    EditableField.PROJECT: ("project", _normalize_project),
    EditableField.START_TIME: ("start_time", canonical_time),
    EditableField.END_TIME: ("end_time", canonical_time),
    EditableField.NOTES: ("notes", _normalize_notes),
}


def _resolve_field(field: Union[EditableField, str]) -> EditableField:
    if isinstance(field, EditableField):
        return field
    try:
        return EditableField(str(field).strip())
    except ValueError:
        allowed = ", ".join(f.value for f in EditableField)
        raise ValidationError(f"Unknown session field '{field}'. Editable fields: {allowed}.") from None


def _row(session: Session, columns: List[str]) -> List[str]:
    values = {
        "date": session.date,
        "start_time": session.start_time,
        "end_time": session.end_time,
        "duration_minutes": str(session.duration_minutes),
        "project": session.project,
        "notes": session.notes,
        "id": session.id,
    }
    return [values[c] for c in columns]


def _render(sessions: List[Session], columns: List[str]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(columns)
    for session in sessions:
        writer.writerow(_row(session, columns))
    return buffer.getvalue()


class SessionStore:
    """Load, append, edit and delete sessions in a single CSV file.

    There is no locking: callers must not start a second mutation before the
    first has returned. Two stores writing the same file race, and the last
    write wins.
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path) if path is not None else get_sessions_path()

    def _read_text(self) -> Optional[str]:
        try:
            with open(self.path, encoding="utf-8", newline="") as file:
                return file.read()
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageError(self.path, f"cannot read sessions file: {exc}") from exc

    def _parse(self, text: str) -> Tuple[List[Session], bool]:
        """Parse CSV text into sessions. Returns (sessions, needs_rewrite)."""
        reader = csv.reader(io.StringIO(text))
        header: Optional[List[str]] = None
        sessions: List[Session] = []
        seen_ids: Set[str] = set()
        needs_rewrite = False

        for row in reader:
            if not row or all(not cell.strip() for cell in row):
                continue
            if header is None:
                header = [cell.strip() for cell in row]
                if "id" not in header:
                    logger.info("Sessions file %s has no id column; migrating", self.path)
                    needs_rewrite = True
                elif header != COLUMNS:
                    logger.info("Sessions file %s has columns %s; rewriting in standard order", self.path, header)
                    needs_rewrite = True
                continue

            # Short rows are padded; values past the header are ignored.
            values = dict(zip(header, row + [""] * (len(header) - len(row))))
            session = Session(
                date=values.get("date", "").strip(),
                start_time=values.get("start_time", "").strip(),
                end_time=values.get("end_time", "").strip(),
                duration_minutes=_coerce_minutes(values.get("duration_minutes", "")),
                project=values.get("project", ""),
                notes=values.get("notes", ""),
                id=values.get("id", "").strip(),
            )
            if not session.id or session.id in seen_ids:
                session.id = self._fresh_id(seen_ids)
                needs_rewrite = True
            seen_ids.add(session.id)
            sessions.append(session)

        if header is None and text:
            # Blank lines only: appended rows would be read as the header.
            logger.info("Sessions file %s has no header; rewriting", self.path)
            needs_rewrite = True

        return sessions, needs_rewrite

    @staticmethod
    def _fresh_id(taken: Set[str]) -> str:
        new_id = generate_id()
        while new_id in taken:
            new_id = generate_id()
        return new_id

    def load(self) -> List[Session]:
        """Read every session from disk.

        A missing file yields an empty list. Rows without a usable id are given
        one, and a file whose header is missing or not in the standard column
        order is normalized. Either way the file is rewritten once.
        """
        text = self._read_text()
        if text is None:
            return []

        sessions, needs_rewrite = self._parse(text)
        if needs_rewrite:
            logger.info("Rewriting %s in the standard layout", self.path)
            self._write(sessions)
        return sessions

    def _write(self, sessions: List[Session]) -> None:
        """Atomically replace the sessions file with the given rows."""
        atomic_write(self.path, _render(sessions, COLUMNS))

    def append(self, session: Session) -> Session:
        """Add one session to the end of the file and return it with its new id."""
        if isinstance(session.duration_minutes, bool) or not isinstance(session.duration_minutes, int):
            raise ValidationError(f"duration_minutes must be an integer, got {session.duration_minutes!r}")
        if session.duration_minutes < 0:
            raise ValidationError("duration_minutes cannot be negative")

        existing = self.load()
        session.id = self._fresh_id({s.id for s in existing})
        session.notes = session.notes or ""

        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        try:
            size = self.path.stat().st_size
        except FileNotFoundError:
            size = 0
        except OSError as exc:
            raise StorageError(self.path, f"cannot stat sessions file: {exc}") from exc

        if size == 0:
            writer.writerow(COLUMNS)
            mode = "w"
        else:
            mode = "a"
            if not self._ends_with_newline(size):
                logger.info("Sessions file does not end with a newline, adding one")
                buffer.write("\n")
        writer.writerow(_row(session, COLUMNS))

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, mode, encoding="utf-8", newline="") as file:
                file.write(buffer.getvalue())
        except OSError as exc:
            logger.error("Failed to append session to %s: %s", self.path, exc)
            raise StorageError(self.path, f"cannot append session: {exc}") from exc

        logger.info("Saved %d min session for '%s' (%s)", session.duration_minutes, session.project, session.id)
        return session

    def _ends_with_newline(self, size: int) -> bool:
        try:
            with open(self.path, "rb") as file:
                file.seek(size - 1)
                return file.read(1) == b"\n"
        except OSError as exc:
            raise StorageError(self.path, f"cannot read sessions file: {exc}") from exc

    def update(self, session_id: str, field: Union[EditableField, str], value: str) -> Session:
        """Change one field of a session and rewrite the file.

        Editing either time boundary recalculates ``duration_minutes`` when
        both times parse, treating an end before the start as the next day.

        Raises:
            ValidationError: Unknown field or malformed value.
            NotFoundError: No session has this id.
        """
        editable = _resolve_field(field)
        attribute, normalize = _FIELD_HANDLERS[editable]
        normalized = normalize(value)

        sessions = self.load()
        session = self._find(sessions, session_id)
        setattr(session, attribute, normalized)

        if editable.is_time_boundary and session.start_time and session.end_time:
            minutes = duration_between(session.start_time, session.end_time)
            if minutes is None:
                logger.warning("Could not recalculate duration for session %s", session_id)
            else:
                session.duration_minutes = minutes

        self._write(sessions)
        logger.info("Updated session %s: %s=%r", session_id, editable.value, normalized)
        return session

    def delete(self, session_id: str) -> Session:
        """Remove a session and rewrite the remaining rows.

        Raises:
            NotFoundError: No session has this id.
        """
        sessions = self.load()
        session = self._find(sessions, session_id)
        remaining = [s for s in sessions if s.id != session.id]
        self._write(remaining)
        logger.info("Deleted session %s", session_id)
        return session

    def export(self, path: Union[str, Path]) -> int:
        """Write all sessions to path in the id-less six column layout. Returns the row count."""
        sessions = self.load()
        atomic_write(Path(path), _render(sessions, EXPORT_COLUMNS))
        return len(sessions)

    @staticmethod
    def _find(sessions: List[Session], session_id: str) -> Session:
        target = str(session_id).strip()
        for session in sessions:
            if session.id == target:
                return session
        raise NotFoundError("session", target)
