"""
Export module - parallel scan fan-in to a single CSV writer.
"""
from table_export.export.projector import (
    ProjectionSpec,
    escape_field,
    header_line,
    project_record,
)
from table_export.export.relay_queue import NO_ITEM, CompletionSignal, RelayQueue
from table_export.export.sink_writer import SinkWriter
from table_export.export.coordinator import ExportResult, ExportState, ScanCoordinator

__all__ = [
    "ProjectionSpec",
    "escape_field",
    "header_line",
    "project_record",
    "NO_ITEM",
    "CompletionSignal",
    "RelayQueue",
    "SinkWriter",
    "ExportResult",
    "ExportState",
    "ScanCoordinator",
]
