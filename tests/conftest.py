"""
Todo Service - Test Configuration (conftest.py)
================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── memory_storage: Fresh MemoryTodoStorage
    ├── sql_storage:    SQLTodoStorage on a temporary SQLite file
    ├── metrics:        Metrics with its own registry
    ├── make_client:    Factory for an HTTPX AsyncClient bound to create_app()
    └── client:         AsyncClient over memory storage with metrics
"""

import os
import tempfile

# Override settings for testing BEFORE any app imports
os.environ["STORAGE_BACKEND"] = "memory"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///" + os.path.join(
    tempfile.mkdtemp(prefix="todo_service_test_"), "test.db"
)
os.environ["METRICS_ENABLED"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from todo_service.config import Settings
from todo_service.metrics import Metrics
from todo_service.services.memory_storage import MemoryTodoStorage
from todo_service.services.sql_storage import SQLTodoStorage


@pytest.fixture
def memory_storage():
    return MemoryTodoStorage()


@pytest_asyncio.fixture
async def sql_storage(tmp_path):
    """
    SQLTodoStorage on a throwaway SQLite file.

    The file lives in a nested directory that does not exist yet, which also
    exercises parent-directory creation.
    """
    url = f"sqlite+aiosqlite:///{tmp_path / 'storage' / 'storage.db'}"
    storage = SQLTodoStorage.from_url(url)
    yield storage
    await storage.close()


@pytest.fixture
def metrics():
    return Metrics()


@pytest.fixture
def test_settings():
    return Settings(
        storage_backend="memory",
        metrics_enabled=False,
        idle_timeout=5.0,
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def make_client(test_settings):
    """
    Factory for HTTP clients talking to a freshly built app.

    Usage:
        client = await make_client(storage=my_storage, metrics=my_metrics)
        response = await client.get("/list")
    """
    from todo_service.main import create_app

    clients = []

    async def _make(storage=None, metrics=None, settings=None):
        app = create_app(
            settings=settings or test_settings,
            storage=storage or MemoryTodoStorage(),
            metrics=metrics,
        )
        client = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
        clients.append(client)
        return client

    yield _make

    for client in clients:
        await client.aclose()


@pytest_asyncio.fixture
async def client(make_client, memory_storage, metrics):
    return await make_client(storage=memory_storage, metrics=metrics)
