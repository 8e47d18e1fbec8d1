"""
Attribute discovery - runs once, before an export, outside the pipeline.

DynamoDB tables have no fixed schema, so the available attributes are taken
from a sample of records.
"""
import logging
from typing import Iterable, List, Optional, Set

from table_export.core.config import settings
from table_export.ports.row_source import Record, RowSource

logger = logging.getLogger(__name__)


def attribute_names(records: Iterable[Record]) -> Set[str]:
    """Union of every attribute name in ``records``."""
    names: Set[str] = set()
    for record in records:
        names.update(record.keys())
    return names


def discover_attributes(
    source: RowSource, table: str, sample_size: Optional[int] = None
) -> List[str]:
    """
    Sample a table and return its attribute names, sorted.

    Args:
        source: Row source to sample from
        table: Table name
        sample_size: Records to sample (defaults to settings.SAMPLE_SIZE)

    Returns:
        Sorted attribute names (empty if the sample is empty)
    """
    sample_size = sample_size or settings.SAMPLE_SIZE
    logger.info(f"Sampling {sample_size} records of {table} to discover attributes")
    names = sorted(attribute_names(source.sample(table, sample_size)))
    logger.info(f"Found {len(names)} unique attributes from sample data")
    return names


def list_tables(source: RowSource) -> List[str]:
    tables = source.list_tables()
    logger.debug(f"Source lists {len(tables)} tables")
    return tables
