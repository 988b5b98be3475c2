"""Tests for the CSV session store."""

import csv
from unittest import mock

import pytest

from deepwork.data import EditableField, SessionStore
from deepwork.data.files import atomic_write
from deepwork.data.sessions import COLUMNS, EXPORT_COLUMNS
from deepwork.exceptions import NotFoundError, StorageError, ValidationError

LEGACY_HEADER = "date,start_time,end_time,duration_minutes,project,notes\n"


def _rows(path):
    with open(path, encoding="utf-8", newline="") as file:
        return list(csv.reader(file))


class TestLoad:
    """Tests for SessionStore.load."""

    def test_missing_file_returns_empty_list(self, session_store, sessions_path):
        """A file that does not exist yet is not an error."""
        assert session_store.load() == []
        assert not sessions_path.exists()

    def test_unreadable_file_raises_storage_error(self, session_store, sessions_path):
        """Read failures other than 'not found' propagate."""
        sessions_path.write_text(LEGACY_HEADER)
        with mock.patch("builtins.open", side_effect=PermissionError("denied")):
            with pytest.raises(StorageError):
                session_store.load()

    def test_directory_in_place_of_file_raises_storage_error(self, tmp_path):
        store = SessionStore(tmp_path)
        with pytest.raises(StorageError):
            store.load()

    def test_parses_rows_and_coerces_duration(self, session_store, sessions_path):
        sessions_path.write_text(
            ",".join(COLUMNS) + "\n"
            "2024-01-01,09:00:00,10:30:00,90,Writing,draft,a1\n"
            "2024-01-02,09:00:00,09:10:00,abc,Reading,,a2\n"
            "2024-01-03,09:00:00,09:10:00,12.7,Reading,,a3\n"
        )

        sessions = session_store.load()

        assert [s.id for s in sessions] == ["a1", "a2", "a3"]
        assert sessions[0].duration_minutes == 90
        assert sessions[0].notes == "draft"
        assert sessions[1].duration_minutes == 0
        assert sessions[2].duration_minutes == 12

    def test_tolerates_short_and_long_rows(self, session_store, sessions_path):
        """Short rows are padded; values past the header are ignored."""
        sessions_path.write_text(
            ",".join(COLUMNS) + "\n"
            "2024-01-01,09:00:00,10:00:00,60,Writing,notes,a1,overflow,more\n"
            "2024-01-02,09:00:00\n"
        )

        sessions = session_store.load()

        assert sessions[0].id == "a1"
        assert sessions[0].notes == "notes"
        assert sessions[1].end_time == ""
        assert sessions[1].duration_minutes == 0
        assert sessions[1].id  # generated

    def test_skips_blank_lines(self, session_store, sessions_path):
        sessions_path.write_text(
            ",".join(COLUMNS) + "\n\n"
            "2024-01-01,09:00:00,10:00:00,60,Writing,,a1\n\n"
        )
        assert len(session_store.load()) == 1

    def test_unescapes_quoted_fields(self, session_store, sessions_path):
        sessions_path.write_text(
            ",".join(COLUMNS) + "\n"
            '2024-01-01,09:00:00,10:00:00,60,"Client, Inc.","said ""hi""\nthen left",a1\n'
        )

        session = session_store.load()[0]

        assert session.project == "Client, Inc."
        assert session.notes == 'said "hi"\nthen left'

    def test_legacy_file_gains_ids_and_is_rewritten_once(self, session_store, sessions_path):
        """A file without an id column is migrated on first load."""
        sessions_path.write_text(
            LEGACY_HEADER
            + "2024-01-01,09:00:00,10:00:00,60,Writing,,\n"
            + "2024-01-02,09:00:00,10:00:00,60,Reading,x\n"
        )

        with mock.patch("deepwork.data.sessions.atomic_write", wraps=atomic_write) as write:
            first = session_store.load()
            second = session_store.load()

        assert write.call_count == 1
        assert [s.id for s in first] == [s.id for s in second]
        assert len({s.id for s in first}) == 2
        assert _rows(sessions_path)[0] == COLUMNS

    def test_duplicate_ids_are_replaced(self, session_store, sessions_path):
        sessions_path.write_text(
            ",".join(COLUMNS) + "\n"
            "2024-01-01,09:00:00,10:00:00,60,Writing,,dup\n"
            "2024-01-02,09:00:00,10:00:00,60,Writing,,dup\n"
        )

        sessions = session_store.load()

        assert sessions[0].id == "dup"
        assert sessions[1].id != "dup"


class TestAppend:
    """Tests for SessionStore.append."""

    def test_append_to_missing_file_writes_header(self, session_store, sessions_path, make_session):
        session_store.append(make_session())

        rows = _rows(sessions_path)
        assert rows[0] == COLUMNS
        assert rows[1][:6] == ["2024-01-01", "09:00:00", "10:30:00", "90", "Writing", ""]

    def test_append_to_empty_file_writes_header(self, session_store, sessions_path, make_session):
        sessions_path.write_text("")
        session_store.append(make_session())
        assert _rows(sessions_path)[0] == COLUMNS

    def test_append_adds_newline_when_missing(self, session_store, sessions_path, make_session):
        """A last row without a trailing newline is not corrupted."""
        sessions_path.write_text(",".join(COLUMNS) + "\n2024-01-01,09:00:00,10:00:00,60,Old,,a1")

        session_store.append(make_session(project="New"))

        sessions = session_store.load()
        assert [s.project for s in sessions] == ["Old", "New"]
        assert sessions[0].id == "a1"

    def test_load_append_load_keeps_existing_and_adds_fresh_id(self, session_store, make_session):
        for day in ("2024-01-01", "2024-01-02"):
            session_store.append(make_session(date=day))
        before = session_store.load()

        added = session_store.append(make_session(date="2024-01-03", notes="new"))
        after = session_store.load()

        assert after[:2] == before
        assert after[2] == added
        assert added.id not in {s.id for s in before}

    def test_append_does_not_rewrite_existing_rows(self, session_store, make_session):
        session_store.append(make_session())
        with mock.patch("deepwork.data.sessions.atomic_write") as write:
            session_store.append(make_session())
        write.assert_not_called()

    def test_append_quotes_special_characters(self, session_store, sessions_path, make_session):
        session_store.append(make_session(project="A, B", notes='a "quote"'))

        text = sessions_path.read_text()

        assert '"A, B"' in text
        assert '"a ""quote"""' in text
        assert session_store.load()[0].notes == 'a "quote"'

    def test_append_to_blank_lines_file_writes_header(self, session_store, sessions_path, make_session):
        """A file holding only blank lines gets a header before the new row."""
        sessions_path.write_text("\n\n")

        added = session_store.append(make_session(notes="draft"))

        assert _rows(sessions_path)[0] == COLUMNS
        assert session_store.load() == [added]

    def test_append_follows_reordered_header(self, session_store, sessions_path, make_session):
        """Rows land under the right columns whatever order the header uses."""
        sessions_path.write_text(
            "id,date,start_time,end_time,duration_minutes,project,notes\n"
            "a1,2024-01-01,09:00:00,10:00:00,60,Reading,old\n"
        )

        session_store.append(make_session(date="2024-01-02", notes="draft"))

        sessions = session_store.load()
        assert _rows(sessions_path)[0] == COLUMNS
        assert [(s.id, s.project, s.notes) for s in sessions][0] == ("a1", "Reading", "old")
        assert (sessions[1].project, sessions[1].notes, sessions[1].duration_minutes) == ("Writing", "draft", 90)

    @pytest.mark.parametrize("duration", [-1, "90", 1.5])
    def test_append_rejects_bad_duration(self, session_store, sessions_path, make_session, duration):
        with pytest.raises(ValidationError):
            session_store.append(make_session(duration_minutes=duration))
        assert not sessions_path.exists()


class TestUpdate:
    """Tests for SessionStore.update."""

    @pytest.fixture
    def stored(self, session_store, make_session):
        return session_store.append(make_session())

    def test_update_notes(self, session_store, stored):
        updated = session_store.update(stored.id, "notes", "edited")

        assert updated.notes == "edited"
        assert session_store.load()[0].notes == "edited"
        assert session_store.load()[0].id == stored.id

    def test_update_accepts_enum_field(self, session_store, stored):
        session_store.update(stored.id, EditableField.PROJECT, "  Reading ")
        assert session_store.load()[0].project == "Reading"

    def test_editing_time_recomputes_duration(self, session_store, stored):
        updated = session_store.update(stored.id, "end_time", "11:00")

        assert updated.end_time == "11:00:00"
        assert updated.duration_minutes == 120

    def test_overnight_duration(self, session_store, stored):
        """End before start is treated as the next day."""
        session_store.update(stored.id, "start_time", "23:00:00")
        updated = session_store.update(stored.id, "end_time", "01:00:00")

        assert updated.duration_minutes == 120

    def test_editing_date_keeps_duration(self, session_store, stored):
        updated = session_store.update(stored.id, "date", "2024-02-29")

        assert updated.date == "2024-02-29"
        assert updated.duration_minutes == 90

    def test_unknown_field_rejected(self, session_store, stored):
        with pytest.raises(ValidationError):
            session_store.update(stored.id, "duration_minutes", "5")

    @pytest.mark.parametrize("field,value", [
        ("date", "2024-13-01"),
        ("date", "yesterday"),
        ("start_time", "25:00"),
        ("end_time", "noon"),
        ("project", "   "),
    ])
    def test_malformed_values_rejected_before_write(self, session_store, sessions_path, stored, field, value):
        before = sessions_path.read_text()
        with pytest.raises(ValidationError):
            session_store.update(stored.id, field, value)
        assert sessions_path.read_text() == before

    def test_missing_id_raises_not_found(self, session_store, stored):
        with pytest.raises(NotFoundError):
            session_store.update("nope", "notes", "x")

    def test_unparseable_other_time_keeps_duration(self, session_store, sessions_path):
        sessions_path.write_text(",".join(COLUMNS) + "\n2024-01-01,garbage,10:00:00,42,Writing,,a1\n")

        updated = session_store.update("a1", "end_time", "11:00")

        assert updated.duration_minutes == 42


class TestDelete:
    """Tests for SessionStore.delete."""

    def test_delete_keeps_other_ids_stable(self, session_store, make_session):
        first = session_store.append(make_session(date="2024-01-01"))
        second = session_store.append(make_session(date="2024-01-02"))
        third = session_store.append(make_session(date="2024-01-03"))

        session_store.delete(second.id)

        remaining = session_store.load()
        assert [s.id for s in remaining] == [first.id, third.id]
        # The third row keeps its id, so it can still be edited by id.
        session_store.update(third.id, "notes", "still here")

    def test_delete_missing_id_raises_not_found(self, session_store, make_session):
        session_store.append(make_session())
        with pytest.raises(NotFoundError):
            session_store.delete("nope")

    def test_failed_rewrite_leaves_original(self, session_store, sessions_path, make_session):
        stored = session_store.append(make_session())
        before = sessions_path.read_text()

        with mock.patch("pathlib.Path.replace", side_effect=OSError("disk full")):
            with pytest.raises(StorageError):
                session_store.delete(stored.id)

        assert sessions_path.read_text() == before
        assert not sessions_path.with_suffix(".csv.tmp").exists()


class TestRoundTrip:
    """Writing through update/delete and reloading preserves every field."""

    def test_rewrite_round_trip(self, session_store, make_session):
        originals = [
            session_store.append(make_session(date="2024-01-01", notes="plain")),
            session_store.append(make_session(date="2024-01-02", project="x,y", notes='q"uote')),
            session_store.append(make_session(date="2024-01-03", notes="multi\nline")),
        ]
        doomed = session_store.append(make_session(date="2024-01-04"))

        session_store.delete(doomed.id)

        assert session_store.load() == originals


class TestLastWriteWins:
    """There is no locking; a stale read-modify-write overwrites a newer one."""

    def test_racing_writers_lose_an_update(self, session_store, sessions_path, make_session):
        stored = session_store.append(make_session())
        other = SessionStore(sessions_path)

        stale = other.load()
        session_store.update(stored.id, "notes", "first writer")
        stale[0].notes = "second writer"
        other._write(stale)

        assert session_store.load()[0].notes == "second writer"


class TestExport:
    def test_export_writes_legacy_layout(self, session_store, tmp_path, make_session):
        session_store.append(make_session(notes="a, b"))
        target = tmp_path / "out" / "export.csv"

        count = session_store.export(target)

        rows = _rows(target)
        assert count == 1
        assert rows[0] == EXPORT_COLUMNS
        assert rows[1] == ["2024-01-01", "09:00:00", "10:30:00", "90", "Writing", "a, b"]
