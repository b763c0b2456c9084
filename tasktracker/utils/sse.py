import json
import queue

# Comment line sent when nothing changed for a while, keeps proxies from
# dropping the connection.
KEEPALIVE = ": keepalive\n\n"


def format_event(data, event="snapshot"):
    return f"event: {event}\ndata: {json.dumps(data)}\n\n"


def event_stream(subscribe, render, keepalive_seconds=15.0):
    """Turn a store subscription into Server-Sent Events.

    ``subscribe(on_change)`` must return a started watch; every delivered
    list is passed through ``render`` and sent as one ``snapshot`` event.
    The watch is cancelled when the client goes away and the generator is
    closed.
    """
    pending = queue.Queue()
    watch = subscribe(pending.put)
    try:
        while True:
            try:
                items = pending.get(timeout=keepalive_seconds)
            except queue.Empty:
                yield KEEPALIVE
                continue
            yield format_event(render(items))
    finally:
        watch.cancel()
