import atexit
from contextlib import contextmanager

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import MongoClient
from pymongo.errors import PyMongoError

from tasktracker.errors import NotFoundError, TransportError


def init_app(app, db=None):
    """Attach a MongoDB database to ``app``.

    A caller-supplied ``db`` (tests pass a mongomock database) is used as-is
    and stays owned by the caller; otherwise a client is built from MONGO_URI
    and closed when the process exits.
    """
    if db is None:
        client = MongoClient(
            app.config["MONGO_URI"],
            serverSelectionTimeoutMS=app.config["MONGO_TIMEOUT_MS"],
            tz_aware=False,
        )
        atexit.register(client.close)
        db = client[app.config["MONGO_DB_NAME"]]
    app.extensions["mongo_db"] = db
    return db


def to_object_id(value):
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise NotFoundError(f"No document with id {value!r}") from None


@contextmanager
def mongo_errors(operation):
    """Re-raise driver failures as TransportError, keeping the cause."""
    try:
        yield
    except PyMongoError as exc:
        raise TransportError(f"{operation} failed: {exc}") from exc
