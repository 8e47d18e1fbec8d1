"""
Row source interface - the segmented range-read capability of the backing store.

Current adapters:
- DynamoDB (boto3 scan with Segment/TotalSegments)
- In-memory tables (development and tests)

Every transport or protocol failure must surface as SourceUnavailableError.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterator, List, Mapping, Sequence

# Attribute name -> typed scalar value. Only str values are exported.
Record = Mapping[str, Any]


@dataclass(frozen=True)
class Segment:
    """A disjoint partition of a table's keyspace: segment ``index`` of ``total``."""

    index: int
    total: int

    def __post_init__(self):
        if self.total <= 0:
            raise ValueError(f"Segment total must be positive, got {self.total}")
        if not 0 <= self.index < self.total:
            raise ValueError(
                f"Segment index {self.index} out of range for total {self.total}"
            )

    def __str__(self) -> str:
        return f"{self.index + 1}/{self.total}"


class RowSource(ABC):
    """
    Read-only access to a partitioned key-value table.

    Sources own their client handle and release it on close(); use them as
    context managers.
    """

    @abstractmethod
    def list_segments(self, table: str, desired_parallelism: int) -> List[Segment]:
        """
        Partition a table for parallel scanning.

        Args:
            table: Table name
            desired_parallelism: Requested number of segments

        Returns:
            Segment descriptors (may be empty for an empty table)
        """
        pass

    @abstractmethod
    def scan(
        self, table: str, projection: Sequence[str], segment: Segment
    ) -> Iterator[Record]:
        """
        Lazily read every record in a segment.

        The iterator is finite and non-restartable. Records only carry the
        attributes named in ``projection``.

        Args:
            table: Table name
            projection: Attribute allow-list
            segment: Segment to read

        Raises:
            SourceUnavailableError: If the store fails mid-scan
        """
        pass

    @abstractmethod
    def list_tables(self) -> List[str]:
        """Return the names of every table visible to this source."""
        pass

    @abstractmethod
    def sample(self, table: str, limit: int) -> List[Record]:
        """
        Read up to ``limit`` records with all attributes.

        Used for attribute discovery before an export starts.
        """
        pass

    def close(self) -> None:
        """Release the underlying client."""
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
