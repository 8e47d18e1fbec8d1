"""
Error taxonomy for table exports.

- ConfigurationError: caught before any worker starts
- SourceUnavailableError: anything the store raises while listing or scanning
- SinkError: the writer could not persist a line
- ExportCancelledError: a producer noticed the run was cancelled
"""
from typing import Optional


class ExportError(Exception):
    """Base class for every export failure."""

    pass


class ConfigurationError(ExportError):
    """Raised when an export is misconfigured and cannot start."""

    pass


class SourceUnavailableError(ExportError):
    """Raised when the backing store fails to list or scan a table."""

    def __init__(self, message: str, table: Optional[str] = None, segment=None):
        super().__init__(message)
        self.table = table
        self.segment = segment


class SinkError(ExportError):
    """Raised when the output file cannot be written."""

    pass


class ExportCancelledError(ExportError):
    """Raised inside a producer once the export has been cancelled."""

    pass
