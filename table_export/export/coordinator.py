"""
Scan coordinator - fans segment scans into a single sink writer.

States: INITIALIZING -> SCANNING -> DRAINING -> CLOSED

INITIALIZING: list segments, open the writer, enqueue the header
SCANNING:     a bounded worker pool pulls segments; each worker streams its
              segment through the projector into the relay queue
DRAINING:     all workers joined; completion signal set; wait for the writer
CLOSED:       file flushed and closed, pool released

A failed segment cancels the remaining work but the coordinator still walks
through DRAINING to CLOSED before re-raising, so the writer thread never leaks.
Partial output stays on disk.
"""
import logging
import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional, Union

from table_export.core.config import default_segment_count, settings
from table_export.core.errors import ExportCancelledError
from table_export.export.projector import ProjectionSpec, header_line, project_record
from table_export.export.relay_queue import CompletionSignal, RelayQueue
from table_export.export.sink_writer import SinkWriter
from table_export.ports.row_source import RowSource, Segment

logger = logging.getLogger(__name__)


class ExportState(str, Enum):
    """Coordinator lifecycle."""

    INITIALIZING = "initializing"
    SCANNING = "scanning"
    DRAINING = "draining"
    CLOSED = "closed"


@dataclass
class ExportResult:
    """Outcome of a completed export."""

    table: str
    output_path: str
    rows_written: int
    segments: int
    workers: int
    peak_queue_size: int
    elapsed_seconds: float
    state: ExportState


class ScanCoordinator:
    """
    Runs one export. Single use: build a new coordinator per export.

    Example:
        >>> coordinator = ScanCoordinator(source, "users", ProjectionSpec.of(["id"]), "users.csv")
        >>> result = coordinator.run()
    """

    def __init__(
        self,
        source: RowSource,
        table: str,
        projection: ProjectionSpec,
        output_path: Union[str, Path],
        queue_capacity: Optional[int] = None,
        segment_count: Optional[int] = None,
        max_workers: Optional[int] = None,
        poll_timeout: Optional[float] = None,
    ):
        self.source = source
        self.table = table
        self.projection = projection
        self.output_path = Path(output_path)
        self.segment_count = segment_count or settings.SEGMENT_COUNT or default_segment_count()
        self.max_workers = max_workers or settings.MAX_WORKERS
        self.poll_timeout = poll_timeout or settings.POLL_TIMEOUT_SECONDS

        self.relay = RelayQueue(
            queue_capacity or settings.QUEUE_CAPACITY, put_timeout=self.poll_timeout
        )
        self.completion = CompletionSignal()
        self.state = ExportState.INITIALIZING
        self._started = False
        self._lock = threading.Lock()

    def cancel(self) -> None:
        """Stop producers at their next record; run() raises ExportCancelledError."""
        logger.warning(f"Cancelling export of {self.table}")
        self.relay.cancel()

    def run(self) -> ExportResult:
        """
        Execute the export.

        Returns:
            ExportResult for a fully drained export

        Raises:
            ConfigurationError: Output file cannot be opened (no worker started)
            SourceUnavailableError: A segment scan failed
            SinkError: The output file could not be written
            ExportCancelledError: cancel() was called
        """
        with self._lock:
            if self._started:
                raise RuntimeError("ScanCoordinator.run() can only be called once")
            self._started = True

        started = time.monotonic()

        segments = self.source.list_segments(self.table, self.segment_count)
        workers = self._worker_count(len(segments))
        writer = SinkWriter(self.output_path, self.relay, self.completion, self.poll_timeout)
        writer.open()

        logger.info(
            f"Starting export of {self.table} to {self.output_path}: "
            f"{len(segments)} segments, {workers} workers, queue capacity {self.relay.capacity}"
        )

        writer.start()
        failures: List[BaseException] = []
        try:
            self.relay.enqueue(header_line(self.projection))
            self._transition(ExportState.SCANNING)
            failures = self._scan_all(segments, workers)
        except ExportCancelledError as e:
            failures.append(e)
        finally:
            self._transition(ExportState.DRAINING)
            self.completion.set()
            writer.join()
            self._transition(ExportState.CLOSED)

        elapsed = time.monotonic() - started
        root_cause = writer.error or self._root_cause(failures)
        if root_cause is not None:
            logger.error(
                f"Export of {self.table} failed after {elapsed:.2f}s "
                f"({max(writer.lines_written - 1, 0)} rows written): {root_cause}"
            )
            raise root_cause

        result = ExportResult(
            table=self.table,
            output_path=str(self.output_path),
            rows_written=max(writer.lines_written - 1, 0),
            segments=len(segments),
            workers=workers,
            peak_queue_size=self.relay.peak_size,
            elapsed_seconds=elapsed,
            state=self.state,
        )
        logger.info(
            f"Export completed: {result.output_path} "
            f"({result.rows_written} rows in {elapsed:.2f}s)"
        )
        return result

    def _worker_count(self, segments: int) -> int:
        if segments == 0:
            return 0
        limit = self.max_workers or 4 * (os.cpu_count() or 1)
        return max(1, min(segments, limit))

    def _scan_all(self, segments: List[Segment], workers: int) -> List[BaseException]:
        failures: List[BaseException] = []
        if not segments:
            return failures

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="segment-scan") as pool:
            futures = {pool.submit(self._scan_segment, segment): segment for segment in segments}
            try:
                for future in as_completed(futures):
                    error = future.exception()
                    if error is None:
                        continue
                    failures.append(error)
                    if not isinstance(error, ExportCancelledError):
                        logger.error(
                            f"Segment {futures[future]} of {self.table} failed: {error}",
                            exc_info=error,
                        )
                        self.relay.cancel()
            except BaseException:
                # e.g. KeyboardInterrupt: release blocked producers before the pool joins
                self.relay.cancel()
                raise
        return failures

    def _scan_segment(self, segment: Segment) -> int:
        if self.relay.cancelled:
            raise ExportCancelledError(f"Segment {segment} skipped: export cancelled")
        logger.debug(f"Scanning {self.table} segment {segment}")

        rows = 0
        for record in self.source.scan(self.table, self.projection.attributes, segment):
            if self.relay.cancelled:
                raise ExportCancelledError(f"Segment {segment} stopped: export cancelled")
            self.relay.enqueue(project_record(record, self.projection))
            rows += 1

        logger.debug(f"Segment {segment} of {self.table} finished with {rows} rows")
        return rows

    def _transition(self, state: ExportState) -> None:
        logger.debug(f"Export of {self.table}: {self.state.value} -> {state.value}")
        self.state = state

    @staticmethod
    def _root_cause(failures: List[BaseException]) -> Optional[BaseException]:
        for failure in failures:
            if not isinstance(failure, ExportCancelledError):
                return failure
        return failures[0] if failures else None
