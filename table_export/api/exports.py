"""
Export API endpoints - table listing, attribute discovery, background exports.
"""
from contextlib import closing
from pathlib import Path
from typing import Callable, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from table_export.adapters.dynamodb import DynamoDBRowSource
from table_export.core.config import settings
from table_export.core.errors import SourceUnavailableError
from table_export.core.task_runner import get_task_runner
from table_export.ports.row_source import RowSource
from table_export.ports.tasks import TaskRunner, TaskStatus
from table_export.schemas.export import (
    AttributesResponse,
    ExportRequest,
    ExportResultSchema,
    ExportTaskResponse,
    TablesResponse,
)
from table_export.services.discovery_service import discover_attributes, list_tables
from table_export.services.export_service import ExportService

router = APIRouter()

SourceFactory = Callable[[], RowSource]


def get_source_factory() -> SourceFactory:
    """Each export opens its own source and closes it when the run ends."""
    return DynamoDBRowSource


def run_export(source_factory: SourceFactory, table: str, attributes, output_path: Path):
    with closing(source_factory()) as source:
        return ExportService(source).export_table(table, attributes, output_path)


@router.get("/tables", response_model=TablesResponse)
def get_tables(source_factory: SourceFactory = Depends(get_source_factory)):
    """List tables visible to the configured credentials."""
    try:
        with closing(source_factory()) as source:
            return TablesResponse(tables=list_tables(source))
    except SourceUnavailableError as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.get("/tables/{table_name}/attributes", response_model=AttributesResponse)
def get_attributes(
    table_name: str,
    sample_size: Optional[int] = Query(default=None, gt=0),
    source_factory: SourceFactory = Depends(get_source_factory),
):
    """Discover attribute names from a sample of the table."""
    sample_size = sample_size or settings.SAMPLE_SIZE
    try:
        with closing(source_factory()) as source:
            attributes = discover_attributes(source, table_name, sample_size)
    except SourceUnavailableError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return AttributesResponse(table=table_name, sample_size=sample_size, attributes=attributes)


@router.post("/exports", response_model=ExportTaskResponse, status_code=202)
def create_export(
    request: ExportRequest,
    source_factory: SourceFactory = Depends(get_source_factory),
    runner: TaskRunner = Depends(get_task_runner),
):
    """
    Start an export in the background.

    The file is written under ARTIFACT_ROOT; only the file name component of
    ``output_file`` is used.
    """
    file_name = Path(request.output_file).name
    if not file_name.strip():
        raise HTTPException(status_code=400, detail="Invalid output file name")

    artifact_root = Path(settings.ARTIFACT_ROOT)
    artifact_root.mkdir(parents=True, exist_ok=True)
    # Invalid requests are rejected with 400 before anything is queued
    _, output_path = ExportService.validate_request(
        request.table_name, request.attributes, artifact_root / file_name
    )

    task_id = runner.submit(
        run_export, source_factory, request.table_name, request.attributes, output_path
    )
    return _task_response(runner, task_id)


@router.get("/exports/{task_id}", response_model=ExportTaskResponse)
def get_export(task_id: str, runner: TaskRunner = Depends(get_task_runner)):
    """Poll a submitted export."""
    try:
        return _task_response(runner, task_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Export task {task_id} not found")


def _task_response(runner: TaskRunner, task_id: str) -> ExportTaskResponse:
    status = runner.status(task_id)
    response = ExportTaskResponse(task_id=task_id, status=status)
    if status == TaskStatus.COMPLETED:
        response.result = ExportResultSchema.model_validate(runner.result(task_id))
    elif status == TaskStatus.FAILED:
        response.error = runner.error(task_id)
    return response
