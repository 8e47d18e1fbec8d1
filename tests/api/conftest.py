"""
Pytest fixtures for API tests.

Provides a FastAPI test client wired to an in-memory row source and an
inline task runner, with exports written under a temporary ARTIFACT_ROOT.
"""
import pytest
from fastapi.testclient import TestClient

from table_export.adapters.tasks_inline import InlineTaskRunner
from table_export.api.exports import get_source_factory
from table_export.core.config import settings
from table_export.core.task_runner import get_task_runner
from table_export.main import app


@pytest.fixture
def task_runner():
    return InlineTaskRunner(mode="inline")


@pytest.fixture
def artifact_root(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "ARTIFACT_ROOT", str(tmp_path / "artifacts"))
    return tmp_path / "artifacts"


@pytest.fixture
def client(memory_source, task_runner, artifact_root):
    """
    FastAPI test client with source and runner overrides.
    """
    app.dependency_overrides[get_source_factory] = lambda: (lambda: memory_source)
    app.dependency_overrides[get_task_runner] = lambda: task_runner

    with TestClient(app) as test_client:
        yield test_client

    # Clean up overrides
    app.dependency_overrides.clear()


@pytest.fixture
def api_prefix():
    return settings.API_V1_PREFIX
