"""
DynamoDB row source.

Uses the low-level boto3 client:
- scan paginator with Segment/TotalSegments for parallel segment reads
- ProjectionExpression with #aN placeholders (reserved-word safe)
- TypeDeserializer so string attributes arrive as str and everything else as
  a non-str Python value

Retries are configured on the botocore client, never in the pipeline.
"""
import logging
from typing import Any, Dict, Iterator, List, Optional, Sequence

import boto3
from boto3.dynamodb.types import TypeDeserializer
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from table_export.core.config import settings
from table_export.core.errors import SourceUnavailableError
from table_export.ports.row_source import Record, RowSource, Segment

logger = logging.getLogger(__name__)

# DynamoDB rejects TotalSegments above this
MAX_TOTAL_SEGMENTS = 1_000_000


def create_client(
    region: Optional[str] = None,
    endpoint_url: Optional[str] = None,
    max_attempts: Optional[int] = None,
    max_pool_connections: int = 10,
):
    """
    Build a DynamoDB client from settings.

    Args:
        region: AWS region (defaults to settings.AWS_REGION)
        endpoint_url: Custom endpoint, e.g. DynamoDB Local
        max_attempts: Retry attempts for throttling/transient errors
        max_pool_connections: HTTP pool size, at least one per scan worker

    Returns:
        boto3 DynamoDB client
    """
    config = Config(
        retries={
            "max_attempts": max_attempts or settings.DYNAMODB_MAX_ATTEMPTS,
            "mode": "standard",
        },
        max_pool_connections=max_pool_connections,
    )
    return boto3.client(
        "dynamodb",
        region_name=region or settings.AWS_REGION,
        endpoint_url=endpoint_url or settings.DYNAMODB_ENDPOINT_URL,
        config=config,
    )


def projection_arguments(projection: Sequence[str]) -> Dict[str, Any]:
    """
    Build ProjectionExpression/ExpressionAttributeNames for a scan request.

    >>> projection_arguments(["id", "name"])
    {'ProjectionExpression': '#a0, #a1', 'ExpressionAttributeNames': {'#a0': 'id', '#a1': 'name'}}
    """
    names = {f"#a{i}": attribute for i, attribute in enumerate(projection)}
    return {
        "ProjectionExpression": ", ".join(names),
        "ExpressionAttributeNames": names,
    }


class DynamoDBRowSource(RowSource):
    """
    Row source backed by a DynamoDB table.

    boto3 clients are thread-safe, so one client serves every scan worker.
    A client passed in is still closed by close(): the source owns it.
    """

    def __init__(self, client=None, consistent_read: Optional[bool] = None):
        self.client = client if client is not None else create_client()
        self.consistent_read = (
            settings.DYNAMODB_CONSISTENT_READ if consistent_read is None else consistent_read
        )
        self._deserializer = TypeDeserializer()

    def list_segments(self, table: str, desired_parallelism: int) -> List[Segment]:
        total = max(1, min(desired_parallelism, MAX_TOTAL_SEGMENTS))
        return [Segment(index=i, total=total) for i in range(total)]

    def scan(
        self, table: str, projection: Sequence[str], segment: Segment
    ) -> Iterator[Record]:
        request = {
            "TableName": table,
            "Segment": segment.index,
            "TotalSegments": segment.total,
            **projection_arguments(projection),
        }
        if self.consistent_read:
            request["ConsistentRead"] = True

        paginator = self.client.get_paginator("scan")
        try:
            for page in paginator.paginate(**request):
                for item in page.get("Items", []):
                    yield self._deserialize(item)
        except (BotoCoreError, ClientError) as e:
            raise SourceUnavailableError(
                f"Scan of {table} segment {segment} failed: {e}",
                table=table,
                segment=segment,
            ) from e

    def list_tables(self) -> List[str]:
        tables: List[str] = []
        try:
            for page in self.client.get_paginator("list_tables").paginate():
                tables.extend(page.get("TableNames", []))
        except (BotoCoreError, ClientError) as e:
            raise SourceUnavailableError(f"Could not list tables: {e}") from e
        return tables

    def sample(self, table: str, limit: int) -> List[Record]:
        try:
            response = self.client.scan(TableName=table, Limit=limit)
        except (BotoCoreError, ClientError) as e:
            raise SourceUnavailableError(
                f"Could not sample {table}: {e}", table=table
            ) from e
        return [self._deserialize(item) for item in response.get("Items", [])]

    def close(self) -> None:
        logger.debug("Closing DynamoDB client")
        self.client.close()

    def _deserialize(self, item: Dict[str, Any]) -> Dict[str, Any]:
        return {k: self._deserializer.deserialize(v) for k, v in item.items()}
