"""
Pydantic schemas for export API.
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from table_export.ports.tasks import TaskStatus


class ExportRequest(BaseModel):
    """Request to export a table."""

    table_name: str = Field(min_length=1)
    attributes: List[str] = Field(min_length=1)
    output_file: str = Field(min_length=1)


class ExportResultSchema(BaseModel):
    """Summary of a finished export."""

    model_config = ConfigDict(from_attributes=True)

    table: str
    output_path: str
    rows_written: int
    segments: int
    workers: int
    peak_queue_size: int
    elapsed_seconds: float


class ExportTaskResponse(BaseModel):
    """Status of a submitted export."""

    task_id: str
    status: TaskStatus
    result: Optional[ExportResultSchema] = None
    error: Optional[str] = None


class TablesResponse(BaseModel):
    tables: List[str]


class AttributesResponse(BaseModel):
    table: str
    sample_size: int
    attributes: List[str]
