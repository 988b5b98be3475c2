"""Tests for the start/stop session tracker."""

from datetime import datetime, timedelta
from unittest import mock

import pytest
from freezegun import freeze_time

from deepwork.exceptions import StorageError, ValidationError
from deepwork.tracker import NotesContext, SessionTracker, TrackingState


class FakeClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 1, 1, 9, 0, 0))


@pytest.fixture
def tracker(session_store, clock):
    return SessionTracker(session_store, clock=clock)


class TestStart:
    """Tests for SessionTracker.start."""

    def test_start_from_idle(self, tracker, clock):
        assert tracker.start("Writing") is True

        assert tracker.state == TrackingState(True, "Writing", clock.now)
        assert tracker.is_active

    def test_start_trims_name(self, tracker):
        tracker.start("  Writing  ")
        assert tracker.project_name == "Writing"

    def test_start_while_active_is_noop(self, tracker, clock):
        tracker.start("Writing")
        started = tracker.started_at
        clock.advance(minutes=5)

        assert tracker.start("Reading") is False

        assert tracker.project_name == "Writing"
        assert tracker.started_at == started

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_blank_name_rejected(self, tracker, name):
        with pytest.raises(ValidationError):
            tracker.start(name)
        assert not tracker.is_active


class TestStop:
    """Tests for SessionTracker.stop."""

    def test_stop_while_idle_does_nothing(self, tracker, session_store, sessions_path):
        assert tracker.stop("notes") is None
        assert not sessions_path.exists()

    def test_start_stop_records_session(self, tracker, session_store, clock):
        tracker.start("Writing")
        clock.advance(minutes=90)

        saved = tracker.stop("draft")

        assert tracker.state == TrackingState()
        [session] = session_store.load()
        assert session == saved
        assert (session.date, session.start_time, session.end_time) == ("2024-01-01", "09:00:00", "10:30:00")
        assert session.duration_minutes == 90
        assert session.project == "Writing"
        assert session.notes == "draft"
        assert session.id

    def test_none_notes_stored_as_empty(self, tracker, session_store, clock):
        tracker.start("Writing")
        clock.advance(minutes=1)
        tracker.stop(None)
        assert session_store.load()[0].notes == ""

    @pytest.mark.parametrize("seconds,minutes", [(29, 0), (30, 1), (89, 1), (90, 2)])
    def test_duration_rounds_half_up(self, tracker, session_store, clock, seconds, minutes):
        tracker.start("Writing")
        clock.advance(seconds=seconds)
        assert tracker.stop().duration_minutes == minutes

    def test_session_crossing_midnight_keeps_start_date(self, session_store):
        clock = FakeClock(datetime(2024, 1, 1, 23, 0, 0))
        tracker = SessionTracker(session_store, clock=clock)
        tracker.start("Late")
        clock.advance(hours=2)

        session = tracker.stop()

        assert session.date == "2024-01-01"
        assert session.end_time == "01:00:00"
        assert session.duration_minutes == 120

    def test_explicit_end_instant(self, tracker, clock):
        tracker.start("Writing")
        clock.advance(hours=3)

        session = tracker.stop(ended_at=datetime(2024, 1, 1, 9, 45))

        assert session.end_time == "09:45:00"
        assert session.duration_minutes == 45

    def test_failed_save_leaves_tracker_idle(self, tracker, session_store, clock):
        tracker.start("Writing")
        clock.advance(minutes=10)

        with mock.patch.object(session_store, "append", side_effect=StorageError("x", "disk full")):
            with pytest.raises(StorageError):
                tracker.stop("lost")

        assert not tracker.is_active
        assert tracker.stop() is None


class TestStopWithPrompt:
    """Tests for SessionTracker.stop_with_prompt."""

    def test_prompt_sees_project_and_elapsed(self, tracker, clock):
        tracker.start("Writing")
        clock.advance(minutes=25)
        prompt = mock.Mock(return_value="done")

        session = tracker.stop_with_prompt(prompt)

        prompt.assert_called_once_with(NotesContext("Writing", 25 * 60 * 1000))
        assert session.notes == "done"

    def test_end_time_taken_before_prompt(self, tracker, clock):
        tracker.start("Writing")
        clock.advance(minutes=30)

        def slow_prompt(context):
            clock.advance(minutes=10)
            return "typed slowly"

        session = tracker.stop_with_prompt(slow_prompt)

        assert session.end_time == "09:30:00"
        assert session.duration_minutes == 30

    def test_dismissed_prompt_saves_without_notes(self, tracker, clock):
        tracker.start("Writing")
        clock.advance(minutes=5)

        session = tracker.stop_with_prompt(lambda context: None)

        assert session.notes == ""
        assert not tracker.is_active

    def test_failing_prompt_still_stops(self, tracker, session_store, clock):
        tracker.start("Writing")
        clock.advance(minutes=5)

        def broken(context):
            raise RuntimeError("window closed")

        session = tracker.stop_with_prompt(broken)

        assert session.notes == ""
        assert len(session_store.load()) == 1

    def test_idle_does_not_prompt(self, tracker):
        prompt = mock.Mock()
        assert tracker.stop_with_prompt(prompt) is None
        prompt.assert_not_called()


class TestElapsed:
    def test_idle_is_zero(self, tracker):
        assert tracker.elapsed_ms() == 0
        assert tracker.notes_context() is None

    def test_elapsed_follows_clock(self, tracker, clock):
        tracker.start("Writing")
        clock.advance(seconds=61)
        assert tracker.elapsed_ms() == 61000


def test_default_clock_is_wall_time(session_store):
    """Without an injected clock the tracker reads the current time."""
    with freeze_time("2024-03-05 14:00:00") as frozen:
        tracker = SessionTracker(session_store)
        tracker.start("Writing")
        frozen.tick(timedelta(minutes=42))
        session = tracker.stop()

    assert session.date == "2024-03-05"
    assert session.start_time == "14:00:00"
    assert session.duration_minutes == 42
