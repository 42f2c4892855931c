import threading
from dataclasses import dataclass
from queue import Queue, Empty
from typing import List, Optional

from models import Event


@dataclass(frozen=True)
class ClientBatch:
    """All events for one client, in arrival order. The unit of replay work."""

    client_id: int
    events: List[Event]


class WorkQueue:
    """
    Thread-safe queue of client batches for replay workers.
    All synchronization is internal - callers never need to lock.
    """

    DEFAULT_TIMEOUT = 0.1

    def __init__(self):
        self._queue: Queue[ClientBatch] = Queue()
        self._shutdown_event = threading.Event()

    def publish_batch(self, batch: ClientBatch) -> None:
        """Add a batch to the queue. Thread-safe."""
        self._queue.put(batch)

    def consume_batch(self) -> Optional[ClientBatch]:
        """
        Get next batch from the queue.
        Returns None if queue is empty after timeout.
        Thread-safe.
        """
        try:
            return self._queue.get(timeout=self.DEFAULT_TIMEOUT)
        except Empty:
            return None

    def is_empty(self) -> bool:
        return self._queue.empty()

    def shutdown(self) -> None:
        """Signal no more batches will be published."""
        self._shutdown_event.set()

    def is_shutdown(self) -> bool:
        return self._shutdown_event.is_set()
