import queue
from unittest.mock import MagicMock

import mongomock
import pytest
from flask_jwt_extended import create_access_token

from tasktracker.app import create_app
from tasktracker.config import Config
from tasktracker.services.auth_gateway import AuthGateway


class ConfigForTests(Config):
    TESTING = True
    SECRET_KEY = "test-secret-key"
    JWT_SECRET_KEY = "test-jwt-secret-key-long-enough-for-hs256-signing"
    FIREBASE_API_KEY = "test-api-key"
    GOOGLE_CLIENT_ID = "test-client-id"
    GOOGLE_CLIENT_SECRET = "test-client-secret"
    GOOGLE_REDIRECT_URI = "http://localhost/auth/google/callback"
    LOG_LEVEL = "DEBUG"


_CLOSED = object()


class FakeChangeStream:
    """Stands in for a pymongo ChangeStream: iteration blocks until an event
    is pushed or the stream is closed."""

    def __init__(self):
        self._events = queue.Queue()
        self.closed = False

    def push(self, change=None):
        self._events.put(change or {"operationType": "insert"})

    def close(self):
        self.closed = True
        self._events.put(_CLOSED)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def __iter__(self):
        return self

    def __next__(self):
        item = self._events.get(timeout=5)
        if item is _CLOSED:
            raise StopIteration
        return item


class WatchableCollection:
    """Wraps a mongomock collection and answers ``watch()`` with a fake stream."""

    def __init__(self, collection, stream):
        self._collection = collection
        self.stream = stream
        self.watch_calls = []

    def watch(self, pipeline=None, **kwargs):
        self.watch_calls.append((pipeline, kwargs))
        return self.stream

    def __getattr__(self, name):
        return getattr(self._collection, name)


@pytest.fixture
def db():
    """In-memory database, fresh for every test."""
    return mongomock.MongoClient()["tasktracker_test"]


@pytest.fixture
def change_stream():
    return FakeChangeStream()


@pytest.fixture
def gateway():
    """Identity provider stub shared by every request of a test."""
    gw = MagicMock(spec=AuthGateway)
    gw.google_configured = True
    return gw


@pytest.fixture
def app(db, gateway):
    return create_app(ConfigForTests, db=db, auth_gateway_factory=lambda: gateway)


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture
def auth_header(app):
    """Build an Authorization header for a given user id."""

    def make(user_id="user-1"):
        with app.app_context():
            token = create_access_token(
                identity=user_id,
                additional_claims={"email": f"{user_id}@example.com", "name": "Test User"},
            )
        return {"Authorization": f"Bearer {token}"}

    return make
