# tests/conftest.py
import os
import pytest

os.environ.setdefault("APP_ENV", "test")

from kvnotes import create_app
from kvnotes.auth.service import SessionManager
from kvnotes.extensions import db
from kvnotes.notes.service import NoteStore
from kvnotes.store import get_store

ADMIN_PASSWORD = "test-admin-password"


class FakeClock:
    """Horloge pilotable (ms pour NoteStore, s pour SqlStore)."""

    def __init__(self, now=1_000_000):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, delta):
        self.now += delta


@pytest.fixture(scope="session")
def app():
    return create_app({"ADMIN_PASSWORD": ADMIN_PASSWORD})


@pytest.fixture(autouse=True)
def app_ctx(app):
    # tables propres pour chaque test
    with app.app_context():
        db.drop_all()
        db.create_all()
        yield
        db.session.remove()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def store(app_ctx):
    return get_store()


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def notes(store, clock):
    return NoteStore(store, clock=clock)


@pytest.fixture()
def sessions(store):
    return SessionManager(store)


@pytest.fixture()
def admin_client(app, client, sessions):
    client.set_cookie(app.config["ADMIN_COOKIE_NAME"], sessions.issue())
    return client
