"""
Bounded relay queue between scan workers and the sink writer.

Many producers, exactly one consumer. Producers block while the queue is full
(backpressure) and never drop a line; the consumer polls with a timeout so it
can re-check the completion signal.
"""
import queue
import threading

from table_export.core.errors import ConfigurationError, ExportCancelledError

# Returned by dequeue() when the timeout elapses without an item
NO_ITEM = object()


class _TrackingQueue(queue.Queue):
    """queue.Queue that records its high-water mark."""

    def __init__(self, maxsize: int):
        self.peak_size = 0
        super().__init__(maxsize)

    def _put(self, item):
        # Runs under the queue's mutex
        super()._put(item)
        if len(self.queue) > self.peak_size:
            self.peak_size = len(self.queue)


class CompletionSignal:
    """One-shot flag: no producer will enqueue after it is set."""

    def __init__(self):
        self._event = threading.Event()

    def set(self) -> None:
        if self._event.is_set():
            raise RuntimeError("Completion signal already set")
        self._event.set()

    def is_set(self) -> bool:
        return self._event.is_set()


class RelayQueue:
    """
    Fixed-capacity FIFO of output lines.

    enqueue() waits in slices of ``put_timeout`` so that a blocked producer
    notices cancel() instead of waiting on a writer that is gone.
    """

    def __init__(self, capacity: int, put_timeout: float = 0.1):
        if capacity <= 0:
            raise ConfigurationError(f"Queue capacity must be positive, got {capacity}")
        self.capacity = capacity
        self.put_timeout = put_timeout
        self._queue = _TrackingQueue(maxsize=capacity)
        self._cancelled = threading.Event()

    def enqueue(self, line: str) -> None:
        """
        Store a line, blocking while the queue is full.

        Raises:
            ExportCancelledError: If the export was cancelled before the line
                could be stored
        """
        while True:
            if self._cancelled.is_set():
                raise ExportCancelledError("Export cancelled")
            try:
                self._queue.put(line, timeout=self.put_timeout)
                return
            except queue.Full:
                continue

    def dequeue(self, timeout: float):
        """Next line, or NO_ITEM if none arrived within ``timeout`` seconds."""
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return NO_ITEM

    def empty(self) -> bool:
        return self._queue.empty()

    def size(self) -> int:
        return self._queue.qsize()

    @property
    def peak_size(self) -> int:
        return self._queue.peak_size

    def cancel(self) -> None:
        """Make every current and future enqueue() raise ExportCancelledError."""
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()
