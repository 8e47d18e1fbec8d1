"""
Tests for the scan coordinator.

Validates:
- Scenario outputs (3 records, empty table, tiny queue with many producers)
- Drain completeness: header + one line per record, each exactly once
- Failure paths still reach CLOSED and surface the root cause
"""
import io
from typing import Iterator, Sequence

import polars as pl
import pytest

import table_export.export.coordinator as coordinator_module
from table_export.adapters.memory import InMemoryRowSource
from table_export.core.errors import (
    ConfigurationError,
    ExportCancelledError,
    SinkError,
    SourceUnavailableError,
)
from table_export.export.coordinator import ExportState, ScanCoordinator
from table_export.export.projector import ProjectionSpec
from table_export.export.sink_writer import SinkWriter
from table_export.ports.row_source import Record, Segment


class FlakySource(InMemoryRowSource):
    """Fails one segment after yielding a few rows."""

    def __init__(self, tables, failing_index=1, rows_before_failure=3):
        super().__init__(tables)
        self.failing_index = failing_index
        self.rows_before_failure = rows_before_failure

    def scan(self, table: str, projection: Sequence[str], segment: Segment) -> Iterator[Record]:
        for n, record in enumerate(super().scan(table, projection, segment)):
            if segment.index == self.failing_index and n == self.rows_before_failure:
                raise SourceUnavailableError("throttled", table=table, segment=segment)
            yield record


class BrokenFile(io.StringIO):
    def write(self, s):
        raise OSError("No space left on device")


class BrokenSinkWriter(SinkWriter):
    def open(self):
        self._file = BrokenFile()


def run_export(source, table, attributes, path, **kwargs):
    kwargs.setdefault("poll_timeout", 0.01)
    coordinator = ScanCoordinator(source, table, ProjectionSpec.of(attributes), path, **kwargs)
    return coordinator, coordinator.run()


def test_three_record_scenario(memory_source, output_path):
    _, result = run_export(memory_source, "users", ["id", "name"], output_path, segment_count=1)

    assert output_path.read_text(encoding="utf-8") == 'id,name\n1,Al\n2,"Bo, Jr."\n3,\n'
    assert result.rows_written == 3
    assert result.state == ExportState.CLOSED


def test_three_record_scenario_parallel(memory_source, output_path):
    _, result = run_export(memory_source, "users", ["id", "name"], output_path, segment_count=3)

    lines = output_path.read_text(encoding="utf-8").splitlines(keepends=True)
    assert lines[0] == "id,name\n"
    assert sorted(lines[1:]) == sorted(["1,Al\n", '2,"Bo, Jr."\n', "3,\n"])
    assert result.segments == 3

    df = pl.read_csv(output_path)
    assert df.columns == ["id", "name"]
    assert len(df) == 3


def test_empty_table_writes_header_only(memory_source, output_path):
    _, result = run_export(memory_source, "empty", ["id", "name"], output_path)

    assert output_path.read_text(encoding="utf-8") == "id,name\n"
    assert result.rows_written == 0
    assert result.segments == 0
    assert result.workers == 0


def test_tiny_queue_many_producers(memory_source, output_path):
    """Capacity 2, 100 records, 8 producers: completes with 101 lines."""
    _, result = run_export(
        memory_source,
        "events",
        ["id", "payload"],
        output_path,
        queue_capacity=2,
        segment_count=8,
        max_workers=8,
    )

    lines = output_path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 101
    assert lines[0] == "id,payload"
    assert sorted(lines[1:]) == sorted(f"{i},event {i}" for i in range(100))
    assert result.rows_written == 100
    assert result.workers == 8
    assert result.peak_queue_size <= 2


def test_more_segments_than_workers(memory_source, output_path):
    _, result = run_export(
        memory_source, "events", ["id"], output_path, segment_count=20, max_workers=3
    )

    assert result.segments == 20
    assert result.workers == 3
    assert len(output_path.read_text(encoding="utf-8").splitlines()) == 101


def test_source_failure_surfaces_after_close(output_path):
    source = FlakySource({"events": [{"id": str(i)} for i in range(200)]})
    coordinator = ScanCoordinator(
        source,
        "events",
        ProjectionSpec.of(["id"]),
        output_path,
        queue_capacity=4,
        segment_count=4,
        poll_timeout=0.01,
    )

    with pytest.raises(SourceUnavailableError, match="throttled") as excinfo:
        coordinator.run()

    assert excinfo.value.segment == Segment(1, 4)
    assert coordinator.state == ExportState.CLOSED
    # Partial output stays on disk
    assert output_path.read_text(encoding="utf-8").startswith("id\n")


def test_sink_failure_does_not_hang(monkeypatch, memory_source, output_path):
    monkeypatch.setattr(coordinator_module, "SinkWriter", BrokenSinkWriter)
    coordinator = ScanCoordinator(
        memory_source,
        "events",
        ProjectionSpec.of(["id"]),
        output_path,
        queue_capacity=2,
        segment_count=8,
        poll_timeout=0.01,
    )

    with pytest.raises(SinkError, match="No space left"):
        coordinator.run()
    assert coordinator.state == ExportState.CLOSED


def test_unknown_table_fails_before_opening_file(memory_source, output_path):
    with pytest.raises(SourceUnavailableError):
        run_export(memory_source, "missing", ["id"], output_path)
    assert not output_path.exists()


def test_unwritable_output_is_configuration_error(memory_source, tmp_path):
    with pytest.raises(ConfigurationError):
        run_export(memory_source, "users", ["id"], tmp_path / "nope" / "out.csv")


def test_cancel_before_run(memory_source, output_path):
    coordinator = ScanCoordinator(
        memory_source, "events", ProjectionSpec.of(["id"]), output_path, poll_timeout=0.01
    )
    coordinator.cancel()

    with pytest.raises(ExportCancelledError):
        coordinator.run()
    assert coordinator.state == ExportState.CLOSED


def test_single_use(memory_source, output_path):
    coordinator, _ = run_export(memory_source, "users", ["id"], output_path)
    with pytest.raises(RuntimeError, match="only be called once"):
        coordinator.run()


def test_rerun_truncates(memory_source, output_path):
    run_export(memory_source, "users", ["id", "name"], output_path, segment_count=1)
    run_export(memory_source, "users", ["id", "name"], output_path, segment_count=1)

    assert output_path.read_text(encoding="utf-8").count("id,name\n") == 1
