"""
Sink writer - the only consumer of the relay queue and the only owner of the
output file.

Loop:
1. dequeue(timeout)
2. got a line -> append it (buffered, no per-line flush)
3. no line -> exit only if the completion signal is set AND the queue is empty

The empty re-check after seeing the signal is what guarantees a line enqueued
just before the signal was set is still written.
"""
import logging
import threading
from pathlib import Path
from typing import Optional, TextIO, Union

from table_export.core.errors import ConfigurationError, SinkError
from table_export.export.relay_queue import NO_ITEM, CompletionSignal, RelayQueue

logger = logging.getLogger(__name__)


class SinkWriter:
    """Drains a RelayQueue into a UTF-8 file on a dedicated thread."""

    def __init__(
        self,
        output_path: Union[str, Path],
        relay: RelayQueue,
        completion: CompletionSignal,
        poll_timeout: float = 0.1,
    ):
        self.output_path = Path(output_path)
        self.relay = relay
        self.completion = completion
        self.poll_timeout = poll_timeout
        self.lines_written = 0
        self.error: Optional[SinkError] = None
        self._file: Optional[TextIO] = None
        self._thread: Optional[threading.Thread] = None

    def open(self) -> None:
        """
        Create or truncate the output file.

        Raises:
            ConfigurationError: If the file cannot be opened for writing
        """
        try:
            self._file = open(self.output_path, "w", encoding="utf-8", newline="")
        except OSError as e:
            raise ConfigurationError(
                f"Cannot open output file {self.output_path}: {e}"
            ) from e

    def start(self) -> None:
        """Run the drain loop on a background thread."""
        if self._file is None:
            self.open()
        self._thread = threading.Thread(target=self.run, name="sink-writer", daemon=True)
        self._thread.start()

    def join(self) -> None:
        if self._thread is not None:
            self._thread.join()

    def run(self) -> None:
        """
        Drain the queue until completion, then flush and close the file.

        Any failure is recorded on ``self.error`` and cancels the relay queue
        so producers blocked on a full queue are released.
        """
        try:
            if self._file is None:
                self.open()
            while True:
                line = self.relay.dequeue(self.poll_timeout)
                if line is not NO_ITEM:
                    self._file.write(line)
                    self.lines_written += 1
                elif self.completion.is_set() and self.relay.empty():
                    break
            self._file.flush()
        except Exception as e:
            self._fail(e)
        finally:
            if self._file is not None:
                try:
                    self._file.close()
                except OSError as e:
                    self._fail(e)
        logger.debug(f"Sink writer closed {self.output_path} after {self.lines_written} lines")

    def _fail(self, cause: Exception) -> None:
        if self.error is None:
            self.error = SinkError(f"Writing {self.output_path} failed: {cause}")
            self.error.__cause__ = cause
            logger.error(f"Sink writer failed: {cause}", exc_info=cause)
        self.relay.cancel()
