"""Live query subscriptions over MongoDB change streams.

A :class:`Watch` re-runs its query after every matching change and hands the
full result list to a callback. Deliveries are snapshots, never diffs, so a
consumer can simply replace whatever it held before.
"""
import logging
import threading

from pymongo.errors import PyMongoError

from tasktracker.errors import TransportError

logger = logging.getLogger(__name__)

JOIN_TIMEOUT = 5.0


def owner_pipeline(owner_id):
    """Change-stream filter for one owner's documents.

    Delete events carry no document body and cannot be matched on owner, so
    every delete triggers a refresh.
    """
    return [
        {
            "$match": {
                "$or": [
                    {
                        "operationType": {"$in": ["insert", "update", "replace"]},
                        "fullDocument.user_id": owner_id,
                    },
                    {"operationType": "delete"},
                ]
            }
        }
    ]


class Watch:
    """Cancellable subscription returned by the stores' ``subscribe*`` calls.

    ``snapshot`` runs the query and returns the current list; ``on_change``
    receives that list once on :meth:`start` and again after every change
    event until :meth:`cancel` is called.
    """

    def __init__(self, collection, pipeline, snapshot, on_change, name="watch"):
        self.name = name
        self._collection = collection
        self._pipeline = pipeline
        self._snapshot = snapshot
        self._on_change = on_change
        self._cancelled = threading.Event()
        self._lock = threading.Lock()
        self._stream = None
        self._thread = None

    @property
    def active(self):
        return self._thread is not None and not self._cancelled.is_set()

    def start(self):
        """Open the change stream, deliver the current snapshot, then follow changes.

        The stream is opened before the snapshot is taken, so a write landing
        between the two still reaches the consumer. When no stream can be
        opened the snapshot is still delivered and the watch stays inactive.
        """
        try:
            self._stream = self._collection.watch(self._pipeline, full_document="updateLookup")
        except PyMongoError as exc:
            logger.warning("%s could not open a change stream: %s", self.name, exc)
            self._cancelled.set()
        try:
            self._on_change(self._snapshot())
        except Exception:
            if self._stream is not None:
                self._close_stream(self._stream)
                self._stream = None
            raise
        if self._stream is None:
            return self
        self._thread = threading.Thread(
            target=self._run, args=(self._stream,), name=self.name, daemon=True
        )
        self._thread.start()
        logger.info("Started %s", self.name)
        return self

    def cancel(self):
        """Stop delivery and release the change stream. Safe to call twice."""
        with self._lock:
            if self._cancelled.is_set():
                return
            self._cancelled.set()
            stream = self._stream
        if stream is not None:
            self._close_stream(stream)
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(JOIN_TIMEOUT)
        logger.info("Cancelled %s", self.name)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.cancel()

    def _close_stream(self, stream):
        try:
            stream.close()
        except PyMongoError as exc:
            logger.warning("Closing %s failed: %s", self.name, exc)

    def _deliver(self):
        items = self._snapshot()
        if not self._cancelled.is_set():
            self._on_change(items)

    def _run(self, stream):
        try:
            with stream:
                for _change in stream:
                    if self._cancelled.is_set():
                        break
                    self._deliver()
        except (PyMongoError, TransportError) as exc:
            if not self._cancelled.is_set():
                logger.warning("%s stopped: %s", self.name, exc)
                self._cancelled.set()
        finally:
            with self._lock:
                self._stream = None
