import json
import time
from typing import Callable, Optional

from marshmallow import ValidationError

from kvnotes.common.ids import generate_note_id, is_valid_note_id
from kvnotes.notes.models import Note, NoteMeta
from kvnotes.notes.render import render_note_body
from kvnotes.notes.schemas import NoteIn, NoteMetaSchema, NoteRecordSchema
from kvnotes.store.base import KeyValueStore

NOTE_PREFIX = "note:"

note_in = NoteIn()
note_record = NoteRecordSchema()
note_meta = NoteMetaSchema()


def _now_ms() -> int:
    return int(time.time() * 1000)


def note_key(note_id: str) -> str:
    return f"{NOTE_PREFIX}{note_id}"


class NoteStore:
    """CRUD des notes et ordre "plus récente d'abord" au-dessus du store clé-valeur.

    Chaque note est écrite sous ``note:<id>`` avec sa projection NoteMeta en
    métadonnées, ce qui permet de lister sans relire les corps. L'ordre est
    recalculé à chaque requête de navigation (pas d'index en cache).
    """

    def __init__(self, store: KeyValueStore, clock: Optional[Callable[[], int]] = None):
        self.store = store
        self._clock = clock or _now_ms

    # --- écriture ---

    def create(self, title: str, content: str) -> Note:
        self._validate(title, content)
        return self._save(generate_note_id(), title, content, existing=None)

    def update(self, note_id: str, title: str, content: str) -> Note:
        """Réécrit la note; crée l'enregistrement s'il n'existe pas (upsert)."""
        self._validate(title, content)
        if not is_valid_note_id(note_id):
            raise ValidationError({"id": ["Invalid note id."]})
        return self._save(note_id, title, content, existing=self.get(note_id))

    def delete(self, note_id: str) -> bool:
        if self.get(note_id) is None:
            return False
        self.store.delete(note_key(note_id))
        return True

    # --- lecture ---

    def get(self, note_id: str) -> Optional[Note]:
        if not is_valid_note_id(note_id):
            return None
        raw = self.store.get(note_key(note_id))
        if raw is None:
            return None
        return note_record.load(json.loads(raw))

    def list_all(self) -> list[NoteMeta]:
        metas = []
        for listed in self.store.list(NOTE_PREFIX):
            try:
                metas.append(note_meta.load(listed.metadata))
            except ValidationError:
                # entrée sans projection exploitable: non listable
                continue
        # plus récente d'abord; égalité départagée par id croissant
        metas.sort(key=lambda m: m.id)
        metas.sort(key=lambda m: m.created_at, reverse=True)
        return metas

    def latest(self) -> Optional[Note]:
        metas = self.list_all()
        if not metas:
            return None
        return self.get(metas[0].id)

    def previous_of(self, note_id: str) -> Optional[str]:
        """Id de la note immédiatement plus ancienne."""
        return self._neighbour(note_id, +1)

    def next_of(self, note_id: str) -> Optional[str]:
        """Id de la note immédiatement plus récente."""
        return self._neighbour(note_id, -1)

    # --- interne ---

    @staticmethod
    def _validate(title, content):
        errors = note_in.validate({"title": title, "content": content})
        if errors:
            raise ValidationError(errors)

    def _save(self, note_id: str, title: str, content: str, existing: Optional[Note]) -> Note:
        now = self._clock()
        created_at = existing.created_at if existing else now
        updated_at = max(now, existing.updated_at) if existing else now

        note = Note(
            id=note_id,
            title=title,
            content=content,
            rendered_body=render_note_body(content),
            created_at=created_at,
            updated_at=updated_at,
        )
        self.store.put(
            note_key(note_id),
            json.dumps(note_record.dump(note)).encode("utf-8"),
            metadata=note_meta.dump(note.meta()),
        )
        return note

    def _neighbour(self, note_id: str, step: int) -> Optional[str]:
        if self.get(note_id) is None:
            return None
        ids = [m.id for m in self.list_all()]
        try:
            idx = ids.index(note_id)
        except ValueError:
            # métadonnées pas encore visibles (store éventuellement cohérent)
            return None
        target = idx + step
        if 0 <= target < len(ids):
            return ids[target]
        return None
