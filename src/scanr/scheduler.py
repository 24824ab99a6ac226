"""Concurrent distribution of work items over a fixed worker pool

All work items are resolved before any worker starts, so the queue is a
pre-sized immutable sequence with a cursor rather than a push/pop queue.
Shared state is limited to the queue cursor, the aggregate counters and the
output sink; everything else a worker touches is private to it.
"""

import logging
import threading
import time
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed

from scanr.errors import ScanrError
from scanr.file_utils import WorkItem
from scanr.models import RunSummary

logger = logging.getLogger(__name__)


class WorkQueue:
    """Immutable list of work items handed out one at a time."""

    def __init__(self, items: Iterable[WorkItem]):
        self._items = tuple(items)
        self._cursor = 0
        self._lock = threading.Lock()

    def pop(self) -> WorkItem | None:
        """Return the next item, or None once the queue is exhausted."""
        with self._lock:
            if self._cursor >= len(self._items):
                return None
            item = self._items[self._cursor]
            self._cursor += 1
        return item

    @property
    def remaining(self) -> int:
        with self._lock:
            return len(self._items) - self._cursor

    def __len__(self) -> int:
        return len(self._items)


class ResultAggregator:
    """Run-wide counters shared by all workers.

    Mutations are serialized; the totals are meant to be read only after the
    workers have joined.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self.total_matches = 0
        self.files_processed = 0
        self.files_matched = 0
        self.errors: list[str] = []

    def record_file(self, match_count: int) -> None:
        with self._lock:
            self.files_processed += 1
            self.total_matches += match_count
            if match_count > 0:
                self.files_matched += 1

    def record_error(self, error: ScanrError) -> None:
        with self._lock:
            self.errors.append(str(error))

    def summary(self, elapsed: float = 0.0) -> RunSummary:
        with self._lock:
            return RunSummary(
                total_matches=self.total_matches,
                files_processed=self.files_processed,
                files_matched=self.files_matched,
                errors=list(self.errors),
                elapsed=elapsed,
            )


class WorkDistributor:
    """
    Run process_item over every queued item with a fixed pool of threads.

    The pool size is min(threads, number of items). Each worker pops items
    until the queue is empty or the cancel event is set; the event is only
    checked between items, so a file in progress is always finished.

    Args:
        queue: Pre-populated work queue
        threads: Maximum number of workers
        process_item: Scans one item end-to-end
        cancel_event: Optional shared flag to stop workers between items
    """

    def __init__(
        self,
        queue: WorkQueue,
        threads: int,
        process_item: Callable[[WorkItem], None],
        cancel_event: threading.Event | None = None,
    ):
        if threads < 1:
            raise ValueError(f'Thread count must be positive, got {threads}')
        self.queue = queue
        self.threads = threads
        self.process_item = process_item
        self.cancel_event = cancel_event or threading.Event()

    @property
    def pool_size(self) -> int:
        return min(self.threads, len(self.queue))

    def _worker(self) -> int:
        thread_id = threading.current_thread().name
        processed = 0
        start_time = time.time()

        while not self.cancel_event.is_set():
            item = self.queue.pop()
            if item is None:
                break
            logger.debug(f'[WORKER {thread_id}] Scanning {item.label}')
            self.process_item(item)
            processed += 1

        elapsed = time.time() - start_time
        logger.debug(f'[WORKER {thread_id}] Done: {processed} item(s) in {elapsed:.3f}s')
        return processed

    def run(self) -> int:
        """Process the whole queue; returns the number of items workers handled."""
        pool_size = self.pool_size
        if pool_size == 0:
            logger.info('[DISTRIBUTOR] Nothing to do, queue is empty')
            return 0

        logger.info(f'[DISTRIBUTOR] Starting {pool_size} worker(s) for {len(self.queue)} item(s)')

        handled = 0
        failure: BaseException | None = None

        with ThreadPoolExecutor(max_workers=pool_size, thread_name_prefix='Worker') as executor:
            futures = [executor.submit(self._worker) for _ in range(pool_size)]
            try:
                for future in as_completed(futures):
                    try:
                        handled += future.result()
                    except Exception as e:
                        logger.error(f'[DISTRIBUTOR] Worker failed: {e}')
                        self.cancel_event.set()
                        if failure is None:
                            failure = e
            except KeyboardInterrupt:
                logger.warning(
                    f'[DISTRIBUTOR] Interrupted with {self.queue.remaining} item(s) left, '
                    'letting workers finish their current item'
                )
                self.cancel_event.set()
                raise

        if failure is not None:
            raise failure

        logger.info(f'[DISTRIBUTOR] Completed: {handled} item(s) handled')
        return handled
