"""
Adapters - concrete implementations of ports.

Follows hexagonal architecture pattern (ports & adapters).
"""
from table_export.adapters.dynamodb import DynamoDBRowSource
from table_export.adapters.memory import InMemoryRowSource
from table_export.adapters.tasks_inline import InlineTaskRunner

__all__ = ["DynamoDBRowSource", "InMemoryRowSource", "InlineTaskRunner"]
