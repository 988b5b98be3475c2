"""Live session tracking.

A single SessionTracker is created at process start and handed to the
presentation layer. It moves between two states:

- Idle -> Active on start(project_name)
- Active -> Idle on stop(notes), which hands the finished session to the
  SessionStore

Starting while active and stopping while idle are no-ops. The in-progress
session lives only in memory; if the process dies while active it is lost.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from deepwork.data.models import Session
from deepwork.data.sessions import SessionStore
from deepwork.exceptions import ValidationError
from deepwork.utils.dates import ms_to_minutes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrackingState:
    """Snapshot of the tracker. project_name and started_at are set iff is_active."""

    is_active: bool = False
    project_name: Optional[str] = None
    started_at: Optional[datetime] = None


@dataclass(frozen=True)
class NotesContext:
    """What the notes prompt is shown when a session stops."""

    project_name: str
    duration_ms: int


NotesPrompt = Callable[[NotesContext], Optional[str]]


def _elapsed_ms(start: datetime, end: datetime) -> int:
    return max(0, int((end - start).total_seconds() * 1000))


class SessionTracker:
    """Owns the idle/active state and writes completed sessions to the store."""

    def __init__(self, store: SessionStore, clock: Optional[Callable[[], datetime]] = None) -> None:
        self.store = store
        self._clock = clock or datetime.now
        self._state = TrackingState()

    @property
    def state(self) -> TrackingState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state.is_active

    @property
    def project_name(self) -> Optional[str]:
        return self._state.project_name

    @property
    def started_at(self) -> Optional[datetime]:
        return self._state.started_at

    def start(self, project_name: str) -> bool:
        """Begin tracking project_name.

        Returns True if a session was started, False if one was already
        running (the running session is left untouched).

        Raises:
            ValidationError: If project_name is blank.
        """
        name = (project_name or "").strip()
        if not name:
            raise ValidationError("A project name is required to start a session.")
        if self._state.is_active:
            logger.debug("start(%r) ignored; already tracking %r", name, self._state.project_name)
            return False

        self._state = TrackingState(is_active=True, project_name=name, started_at=self._clock())
        logger.info("Started session for project %r", name)
        return True

    def elapsed_ms(self) -> int:
        """Milliseconds since the current session started, 0 when idle."""
        if not self._state.is_active or self._state.started_at is None:
            return 0
        return _elapsed_ms(self._state.started_at, self._clock())

    def notes_context(self) -> Optional[NotesContext]:
        if not self._state.is_active:
            return None
        return NotesContext(project_name=self._state.project_name, duration_ms=self.elapsed_ms())

    def stop(self, notes: Optional[str] = None, ended_at: Optional[datetime] = None) -> Optional[Session]:
        """End the running session and save it.

        The tracker is back to idle before the store is called, so a failed
        save never leaves it stuck in the active state. The failure is logged
        and re-raised for the caller to report.

        Args:
            notes: Free-text notes; None is stored as an empty string.
            ended_at: End instant, defaults to now.

        Returns:
            The saved Session, or None if nothing was being tracked.
        """
        if not self._state.is_active:
            return None

        started_at = self._state.started_at
        project_name = self._state.project_name
        end = ended_at if ended_at is not None else self._clock()

        session = Session(
            date=started_at.date().isoformat(),
            start_time=started_at.strftime("%H:%M:%S"),
            end_time=end.strftime("%H:%M:%S"),
            duration_minutes=ms_to_minutes(_elapsed_ms(started_at, end)),
            project=project_name,
            notes=notes or "",
        )

        self._state = TrackingState()

        try:
            saved = self.store.append(session)
        except Exception:
            logger.exception("Failed to save session for %r", project_name)
            raise

        logger.info("Stopped session for %r after %d min", project_name, saved.duration_minutes)
        return saved

    def stop_with_prompt(self, prompt_for_notes: NotesPrompt) -> Optional[Session]:
        """Stop the running session, asking prompt_for_notes for notes first.

        The end time is taken before the prompt is shown. A prompt that is
        closed without an answer returns None, which is saved as no notes;
        the session is stopped either way.
        """
        context = self.notes_context()
        if context is None:
            return None

        ended_at = self._clock()
        try:
            notes = prompt_for_notes(context)
        except Exception:
            logger.exception("Notes prompt failed; stopping without notes")
            notes = None
        return self.stop(notes, ended_at=ended_at)
