"""
In-memory row source.

Lean implementation of the RowSource port for local runs and tests. Segment
``i`` of ``n`` owns every record whose position modulo ``n`` equals ``i``.
"""
from typing import Dict, Iterator, List, Mapping, Optional, Sequence

from table_export.core.errors import SourceUnavailableError
from table_export.ports.row_source import Record, RowSource, Segment


class InMemoryRowSource(RowSource):
    """Serves tables held as lists of dicts."""

    def __init__(self, tables: Optional[Mapping[str, Sequence[Record]]] = None):
        self.tables: Dict[str, List[Record]] = {
            name: list(records) for name, records in (tables or {}).items()
        }
        self.closed = False

    def list_segments(self, table: str, desired_parallelism: int) -> List[Segment]:
        records = self._records(table)
        if not records:
            return []
        total = max(1, min(desired_parallelism, len(records)))
        return [Segment(index=i, total=total) for i in range(total)]

    def scan(
        self, table: str, projection: Sequence[str], segment: Segment
    ) -> Iterator[Record]:
        records = self._records(table)
        for position in range(segment.index, len(records), segment.total):
            record = records[position]
            yield {name: record[name] for name in projection if name in record}

    def list_tables(self) -> List[str]:
        return sorted(self.tables)

    def sample(self, table: str, limit: int) -> List[Record]:
        return [dict(record) for record in self._records(table)[:limit]]

    def close(self) -> None:
        self.closed = True

    def _records(self, table: str) -> List[Record]:
        if table not in self.tables:
            raise SourceUnavailableError(f"Table not found: {table}", table=table)
        return self.tables[table]
