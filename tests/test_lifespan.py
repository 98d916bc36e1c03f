"""
Todo Service - Application Lifespan Tests
==========================================

What:  Startup and shutdown of the app as uvicorn drives them.
How:   Enters app.router.lifespan_context directly; logging setup is patched
       out so the root logger stays under pytest's control.

What we test:
    ✅ A store that cannot be opened aborts startup
    ✅ The metrics listener serves the counters while the app is up
    ✅ Shutdown stops the listener and closes storage
"""

import socket
from unittest.mock import patch

import httpx
import pytest

from todo_service.exceptions import StorageError
from todo_service.main import create_app
from todo_service.metrics import Metrics
from todo_service.services.memory_storage import MemoryTodoStorage


class UnopenableStorage(MemoryTodoStorage):
    async def ensure_schema(self):
        raise StorageError(message="storage: ensure_schema failed", operation="ensure_schema")


class ClosingStorage(MemoryTodoStorage):
    def __init__(self):
        super().__init__()
        self.closed = False

    async def close(self):
        self.closed = True


def free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


class TestStartup:

    @pytest.mark.asyncio
    async def test_unopenable_storage_is_fatal(self, test_settings):
        app = create_app(settings=test_settings, storage=UnopenableStorage())

        with patch("todo_service.main.setup_logging"):
            with pytest.raises(StorageError):
                async with app.router.lifespan_context(app):
                    pass

    @pytest.mark.asyncio
    async def test_storage_closed_on_shutdown(self, test_settings):
        storage = ClosingStorage()
        app = create_app(settings=test_settings, storage=storage)

        with patch("todo_service.main.setup_logging"):
            async with app.router.lifespan_context(app):
                assert storage.closed is False

        assert storage.closed is True


class TestMetricsListener:

    @pytest.mark.asyncio
    async def test_listener_serves_counters_then_stops(self, test_settings):
        port = free_port()
        settings = test_settings.model_copy(
            update={"metrics_enabled": True, "metrics_host": "127.0.0.1", "metrics_port": port}
        )
        metrics = Metrics()
        metrics.inc_request()
        app = create_app(settings=settings, storage=MemoryTodoStorage(), metrics=metrics)
        url = f"http://127.0.0.1:{port}/metrics"

        with patch("todo_service.main.setup_logging"):
            async with app.router.lifespan_context(app):
                async with httpx.AsyncClient(trust_env=False) as scraper:
                    response = await scraper.get(url)

                assert response.status_code == 200
                assert "todo_service_http_request_count_total 1.0" in response.text

        assert metrics._server is None
        async with httpx.AsyncClient(trust_env=False) as scraper:
            with pytest.raises(httpx.ConnectError):
                await scraper.get(url)
