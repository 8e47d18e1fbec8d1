"""
Export service - validates an export request and runs the scan coordinator.

Pipeline:
1. Validate table name, attributes and output path (no worker started on error)
2. Build the ProjectionSpec
3. Run ScanCoordinator: segments -> projector -> relay queue -> sink writer
4. Return the ExportResult
"""
import logging
from pathlib import Path
from typing import Optional, Sequence, Tuple, Union

from table_export.core.errors import ConfigurationError
from table_export.export.coordinator import ExportResult, ScanCoordinator
from table_export.export.projector import ProjectionSpec
from table_export.ports.row_source import RowSource

logger = logging.getLogger(__name__)


class ExportService:
    """
    Exports whole tables to CSV through a row source.

    The service does not own the source; callers open and close it.
    """

    def __init__(
        self,
        source: RowSource,
        queue_capacity: Optional[int] = None,
        segment_count: Optional[int] = None,
        max_workers: Optional[int] = None,
        poll_timeout: Optional[float] = None,
    ):
        """
        Initialize export service.

        Args:
            source: Row source for the backing store
            queue_capacity: Relay queue capacity (defaults to settings)
            segment_count: Desired scan parallelism (defaults to settings / CPU count)
            max_workers: Worker pool size (defaults to settings / derived)
            poll_timeout: Writer poll interval in seconds (defaults to settings)
        """
        for name, value in (
            ("queue_capacity", queue_capacity),
            ("segment_count", segment_count),
            ("max_workers", max_workers),
            ("poll_timeout", poll_timeout),
        ):
            if value is not None and value <= 0:
                raise ConfigurationError(f"{name} must be positive, got {value}")

        self.source = source
        self.queue_capacity = queue_capacity
        self.segment_count = segment_count
        self.max_workers = max_workers
        self.poll_timeout = poll_timeout

    def export_table(
        self,
        table: str,
        attributes: Sequence[str],
        output_path: Union[str, Path],
    ) -> ExportResult:
        """
        Export every record of ``table`` to ``output_path``.

        Args:
            table: Table name
            attributes: Columns to export, in output order
            output_path: CSV file to create (truncated if it exists)

        Returns:
            ExportResult

        Raises:
            ConfigurationError: Invalid request, nothing was started
            SourceUnavailableError: The store failed
            SinkError: The output file could not be written
        """
        projection, output_path = self.validate_request(table, attributes, output_path)

        coordinator = ScanCoordinator(
            self.source,
            table,
            projection,
            output_path,
            queue_capacity=self.queue_capacity,
            segment_count=self.segment_count,
            max_workers=self.max_workers,
            poll_timeout=self.poll_timeout,
        )
        return coordinator.run()

    @classmethod
    def validate_request(
        cls,
        table: str,
        attributes: Sequence[str],
        output_path: Union[str, Path],
    ) -> Tuple[ProjectionSpec, Path]:
        """
        Check an export request without touching the store or the file.

        Raises:
            ConfigurationError: Blank table, bad attributes or unusable output path
        """
        if not table or not table.strip():
            raise ConfigurationError("Table name is required")
        projection = ProjectionSpec.of(attributes)
        return projection, cls._validate_output_path(output_path)

    @staticmethod
    def _validate_output_path(output_path: Union[str, Path]) -> Path:
        if not str(output_path).strip():
            raise ConfigurationError("Output file is required")
        path = Path(output_path)
        if path.is_dir():
            raise ConfigurationError(f"Output path is a directory: {path}")
        parent = path.parent
        if not parent.is_dir():
            raise ConfigurationError(f"Output directory does not exist: {parent}")
        return path
