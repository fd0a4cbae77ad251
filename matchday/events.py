import json
import queue
import threading
from datetime import datetime, timezone

SCHEDULE_GENERATED = "schedule_generated"
BRACKET_CREATED = "bracket_created"
BRACKET_UPDATED = "bracket_updated"
BRACKET_RESET = "bracket_reset"
RESULT_RECORDED = "result_recorded"
TIE_UNDECIDED = "tie_undecided"


class EventBus:
    """In-memory pub/sub for SSE. Each subscriber gets a Queue.

    A subscriber may pass a season id; it then only receives events whose
    payload carries that ``season_id``.
    """

    def __init__(self, maxsize=50):
        self._subscribers = []
        self._maxsize = maxsize
        self._lock = threading.Lock()

    def subscribe(self, season_id=None):
        """Create a new subscriber queue."""
        q = queue.Queue(maxsize=self._maxsize)
        with self._lock:
            self._subscribers.append((q, season_id))
        return q

    def unsubscribe(self, q):
        """Remove a subscriber queue."""
        with self._lock:
            self._subscribers = [s for s in self._subscribers if s[0] is not q]

    def publish(self, event_type, data):
        """Push event to matching subscribers. Drops full queues."""
        event = {
            "type": event_type,
            "data": data,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        msg = json.dumps(event)
        season_id = data.get("season_id")
        with self._lock:
            dead = []
            for sub in self._subscribers:
                q, wanted = sub
                if wanted is not None and wanted != season_id:
                    continue
                try:
                    q.put_nowait(msg)
                except queue.Full:
                    dead.append(sub)
            for sub in dead:
                self._subscribers.remove(sub)

    @property
    def subscriber_count(self):
        with self._lock:
            return len(self._subscribers)

    def clear(self):
        """Remove all subscribers. Used in tests."""
        with self._lock:
            self._subscribers.clear()


event_bus = EventBus()
