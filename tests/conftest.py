"""
Shared pytest fixtures.
"""
import pytest

from table_export.adapters.memory import InMemoryRowSource


@pytest.fixture
def users_records():
    """The three-record table from the export scenario."""
    return [
        {"id": "1", "name": "Al"},
        {"id": "2", "name": "Bo, Jr."},
        {"id": "3", "name": None},
    ]


@pytest.fixture
def memory_source(users_records):
    """In-memory source with a small table, a large one and an empty one."""
    return InMemoryRowSource(
        {
            "users": users_records,
            "events": [{"id": str(i), "payload": f"event {i}"} for i in range(100)],
            "empty": [],
        }
    )


@pytest.fixture
def output_path(tmp_path):
    return tmp_path / "export.csv"
