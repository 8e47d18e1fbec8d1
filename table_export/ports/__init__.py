"""
Ports - interface definitions for external dependencies.

Follows hexagonal architecture pattern (ports & adapters).
Ports define interfaces, adapters provide concrete implementations.
"""
from table_export.ports.row_source import Record, RowSource, Segment
from table_export.ports.tasks import TaskRunner, TaskStatus

__all__ = ["Record", "RowSource", "Segment", "TaskRunner", "TaskStatus"]
