import logging
import threading
from typing import Dict, List, Sequence

from models import Account, Event, ReplayStats
from account_store import AccountStore
from grouping import client_order, partition_by_client
from ledger import replay
from reader import read_events
from work_queue import ClientBatch, WorkQueue

logger = logging.getLogger(__name__)


class LedgerEngine:
    """
    Replays a complete event log into per-client accounts.
    Clients are independent, so each client's batch is replayed by one of
    num_workers threads; events within a batch keep their arrival order.
    """

    def __init__(self, num_workers: int = 4):
        self._num_workers = num_workers
        self.stats = ReplayStats()

    def process_file(self, filepath: str) -> Dict[int, Account]:
        """Read and validate the CSV file, then replay it. Returns accounts in ascending client id."""
        events = read_events(filepath)
        return self.process_events(events)

    def process_events(self, events: Sequence[Event]) -> Dict[int, Account]:
        groups = partition_by_client(events)
        store = AccountStore()
        self.stats = ReplayStats()

        logger.info(f"Replaying {len(events)} events for {len(groups)} clients")

        batches = [ClientBatch(client_id, groups[client_id]) for client_id in client_order(groups)]
        if self._num_workers <= 1:
            for batch in batches:
                store.store_account(replay(batch.events, self.stats))
        else:
            self._replay_concurrently(batches, store)

        logger.info(
            f"Replay complete. Clients: {self.stats.clients}, "
            f"applied: {self.stats.applied}, ignored: {self.stats.ignored}"
        )
        return store.get_all_accounts()

    def _replay_concurrently(self, batches: List[ClientBatch], store: AccountStore) -> None:
        """Publish every batch, run the workers until the queue drains, re-raise the first failure."""
        queue = WorkQueue()
        errors: List[Exception] = []
        errors_lock = threading.Lock()

        workers = []
        for _ in range(self._num_workers):
            worker = threading.Thread(target=self._replay_batches, args=(queue, store, errors, errors_lock))
            worker.start()
            workers.append(worker)

        for batch in batches:
            queue.publish_batch(batch)
        queue.shutdown()

        for worker in workers:
            worker.join()

        if errors:
            logger.error(f"{len(errors)} client batches failed to replay")
            raise errors[0]

    def _replay_batches(
        self,
        queue: WorkQueue,
        store: AccountStore,
        errors: List[Exception],
        errors_lock: threading.Lock,
    ) -> None:
        """Worker loop: pull a client batch, replay it, store the account."""
        while True:
            batch = queue.consume_batch()
            if batch is None:
                if queue.is_shutdown() and queue.is_empty():
                    break
                continue

            try:
                store.store_account(replay(batch.events, self.stats))
            except Exception as e:
                logger.debug(f"Replay failed for client {batch.client_id}: {e}")
                with errors_lock:
                    errors.append(e)
