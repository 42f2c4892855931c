import sys
import os
import threading
from decimal import Decimal

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from work_queue import ClientBatch, WorkQueue
from models import Event, EventType


def make_batch(client_id: int) -> ClientBatch:
    return ClientBatch(
        client_id=client_id,
        events=[Event(EventType.DEPOSIT, client_id=client_id, transaction_id=client_id, amount=Decimal("100"))],
    )


class TestWorkQueue:
    def test_publish_consume(self):
        queue = WorkQueue()
        batch = make_batch(1)
        queue.publish_batch(batch)
        result = queue.consume_batch()
        assert result == batch

    def test_consume_empty_returns_none(self):
        queue = WorkQueue()
        result = queue.consume_batch()
        assert result is None

    def test_fifo_order(self):
        queue = WorkQueue()
        for client_id in (3, 1, 2):
            queue.publish_batch(make_batch(client_id))

        assert [queue.consume_batch().client_id for _ in range(3)] == [3, 1, 2]

    def test_is_empty(self):
        queue = WorkQueue()
        assert queue.is_empty()
        queue.publish_batch(make_batch(1))
        queue.publish_batch(make_batch(2))
        assert not queue.is_empty()
        queue.consume_batch()
        queue.consume_batch()
        assert queue.is_empty()

    def test_shutdown(self):
        queue = WorkQueue()
        assert not queue.is_shutdown()
        queue.shutdown()
        assert queue.is_shutdown()

    def test_concurrent_consumers_see_each_batch_once(self):
        queue = WorkQueue()
        for client_id in range(200):
            queue.publish_batch(make_batch(client_id))
        queue.shutdown()

        seen = []
        seen_lock = threading.Lock()

        def drain():
            while True:
                batch = queue.consume_batch()
                if batch is None:
                    if queue.is_shutdown() and queue.is_empty():
                        break
                    continue
                with seen_lock:
                    seen.append(batch.client_id)

        threads = [threading.Thread(target=drain) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(seen) == list(range(200))
