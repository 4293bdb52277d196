# tests/test_notes.py
import json

import pytest
from marshmallow import ValidationError

from kvnotes.common.errors import StoreUnavailable
from kvnotes.common.ids import is_valid_note_id
from kvnotes.notes.models import Note
from kvnotes.notes.render import render_note_body
from kvnotes.notes.schemas import NoteMetaSchema, NoteRecordSchema
from kvnotes.notes.service import NoteStore, note_key


def _seed(store, note_id, created_at, title=None):
    """Écrit directement une note avec un created_at imposé."""
    note = Note(
        id=note_id,
        title=title or f"Note {note_id}",
        content="body",
        rendered_body=render_note_body("body"),
        created_at=created_at,
        updated_at=created_at,
    )
    store.put(
        note_key(note_id),
        json.dumps(NoteRecordSchema().dump(note)).encode("utf-8"),
        metadata=NoteMetaSchema().dump(note.meta()),
    )
    return note


def test_create_then_get(notes, clock):
    note = notes.create("Hello", "# Hi\n<script>x</script>")
    assert is_valid_note_id(note.id)
    assert len(note.id) == 8
    assert note.created_at == note.updated_at == clock.now

    got = notes.get(note.id)
    assert got == note
    assert "<h1>Hi</h1>" in got.rendered_body
    assert "script" not in got.rendered_body


def test_create_generates_distinct_ids(notes):
    ids = {notes.create("t", "c").id for _ in range(20)}
    assert len(ids) == 20


@pytest.mark.parametrize("title,content", [("", "c"), ("t", ""), (None, "c"), ("t", None)])
def test_create_rejects_missing_fields_before_store_access(store, clock, monkeypatch, title, content):
    def boom(*a, **kw):
        raise AssertionError("store must not be touched")

    monkeypatch.setattr(store, "put", boom)
    monkeypatch.setattr(store, "get", boom)
    with pytest.raises(ValidationError):
        NoteStore(store, clock=clock).create(title, content)


def test_get_unknown_or_malformed_id(notes):
    assert notes.get("nope1234") is None
    assert notes.get("../etc/passwd") is None
    assert notes.get("") is None


def test_update_preserves_created_at(notes, clock):
    note = notes.create("v1", "first")
    clock.advance(5_000)
    updated = notes.update(note.id, "v2", "**second**")

    got = notes.get(note.id)
    assert got.title == "v2"
    assert got.content == "**second**"
    assert "<strong>second</strong>" in got.rendered_body
    assert got.created_at == note.created_at
    assert got.updated_at == updated.updated_at >= note.updated_at
    assert got.updated_at == note.created_at + 5_000


def test_update_never_moves_updated_at_backwards(notes, clock):
    note = notes.create("v1", "first")
    clock.advance(-10_000)
    updated = notes.update(note.id, "v2", "second")
    assert updated.updated_at == note.updated_at


def test_update_missing_id_upserts(notes, clock):
    note = notes.update("0001", "Legacy", "old numeric id")
    assert note.id == "0001"
    assert note.created_at == clock.now
    assert notes.get("0001").title == "Legacy"


def test_update_rejects_malformed_id(notes):
    with pytest.raises(ValidationError):
        notes.update("bad id!", "t", "c")


def test_delete(notes):
    note = notes.create("t", "c")
    assert notes.delete(note.id) is True
    assert notes.get(note.id) is None
    assert notes.delete(note.id) is False
    assert notes.list_all() == []


def test_list_all_sorted_newest_first(notes, clock):
    for _ in range(5):
        notes.create("t", "c")
        clock.advance(1_000)

    metas = notes.list_all()
    assert len(metas) == 5
    for newer, older in zip(metas, metas[1:]):
        assert newer.created_at >= older.created_at


def test_list_all_ties_broken_by_id(store, notes):
    for note_id in ("b", "c", "a"):
        _seed(store, note_id, 100)
    assert [m.id for m in notes.list_all()] == ["a", "b", "c"]


def test_list_all_ignores_sessions(notes, sessions):
    sessions.issue()
    notes.create("t", "c")
    assert len(notes.list_all()) == 1


def test_latest(notes, clock):
    assert notes.latest() is None
    notes.create("old", "c")
    clock.advance(1_000)
    newest = notes.create("new", "c")
    assert notes.latest() == newest


def test_navigation_scenario(store, notes):
    _seed(store, "A", 100)
    _seed(store, "B", 200)
    _seed(store, "C", 300)

    assert [m.id for m in notes.list_all()] == ["C", "B", "A"]
    assert notes.previous_of("C") == "B"
    assert notes.next_of("A") == "B"
    assert notes.previous_of("A") is None
    assert notes.next_of("C") is None


def test_previous_and_next_are_inverse(notes, clock):
    ids = []
    for _ in range(4):
        ids.append(notes.create("t", "c").id)
        clock.advance(10)

    for note_id in ids:
        prev_id = notes.previous_of(note_id)
        if prev_id is not None:
            assert notes.next_of(prev_id) == note_id


def test_navigation_requires_existing_note(notes):
    notes.create("t", "c")
    assert notes.previous_of("missing") is None
    assert notes.next_of("missing") is None


def test_store_failure_propagates(store, notes, monkeypatch):
    def down(*a, **kw):
        raise StoreUnavailable()

    monkeypatch.setattr(store, "list", down)
    with pytest.raises(StoreUnavailable):
        notes.list_all()
