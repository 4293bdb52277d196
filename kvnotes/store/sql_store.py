import time
from typing import Callable, Optional

from sqlalchemy import or_, text
from sqlalchemy.exc import SQLAlchemyError

from kvnotes.common.errors import StoreUnavailable
from kvnotes.extensions import db
from kvnotes.store.base import KeyValueStore, ListedKey


class KVEntry(db.Model):
    __tablename__ = "kv_entries"

    key = db.Column(db.String(512), primary_key=True)
    value = db.Column(db.LargeBinary, nullable=False)
    meta = db.Column(db.JSON, nullable=True)
    # epoch secondes; NULL = pas d'expiration
    expires_at = db.Column(db.Float, nullable=True, index=True)


class SqlStore(KeyValueStore):
    """Backend clé-valeur sur la base SQLAlchemy de l'application.

    L'expiration est appliquée à la lecture: une entrée périmée est
    invisible et supprimée au passage.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self._clock = clock or time.time

    def _alive(self):
        return or_(KVEntry.expires_at.is_(None), KVEntry.expires_at > self._clock())

    def _fail(self, exc: SQLAlchemyError):
        db.session.rollback()
        raise StoreUnavailable() from exc

    def get(self, key):
        try:
            entry = db.session.get(KVEntry, key)
            if entry is None:
                return None
            if entry.expires_at is not None and entry.expires_at <= self._clock():
                db.session.delete(entry)
                db.session.commit()
                return None
            return entry.value
        except SQLAlchemyError as e:
            self._fail(e)

    def put(self, key, value, metadata=None, ttl=None):
        expires_at = self._clock() + ttl if ttl else None
        try:
            db.session.merge(KVEntry(key=key, value=value, meta=metadata, expires_at=expires_at))
            db.session.commit()
        except SQLAlchemyError as e:
            self._fail(e)

    def delete(self, key):
        try:
            db.session.query(KVEntry).filter(KVEntry.key == key).delete(synchronize_session=False)
            db.session.commit()
        except SQLAlchemyError as e:
            self._fail(e)

    def list(self, prefix):
        try:
            rows = (
                db.session.query(KVEntry.key, KVEntry.meta)
                .filter(KVEntry.key.startswith(prefix, autoescape=True))
                .filter(self._alive())
                .all()
            )
        except SQLAlchemyError as e:
            self._fail(e)
        return [ListedKey(key=k, metadata=m or {}) for k, m in rows]

    def ping(self):
        try:
            db.session.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            db.session.rollback()
            return False
