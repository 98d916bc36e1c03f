"""
Todo Service - Configuration and Wiring Tests
==============================================

What:  Settings validation, entry-point argument parsing and app wiring.
"""

import pytest
from pydantic import ValidationError

from todo_service.__main__ import parse_args
from todo_service.config import Settings
from todo_service.main import create_app
from todo_service.services.memory_storage import MemoryTodoStorage
from todo_service.services.sql_storage import SQLTodoStorage


class TestSettings:

    def test_defaults(self):
        cfg = Settings(_env_file=None, storage_backend="sql", metrics_enabled=True)
        assert cfg.idle_timeout == 5.0
        assert cfg.service_port == 8080
        assert cfg.metrics_port == 8082

    def test_log_level_normalized(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level_rejected(self):
        with pytest.raises(ValidationError):
            Settings(log_level="chatty")

    def test_invalid_backend_rejected(self):
        with pytest.raises(ValidationError):
            Settings(storage_backend="postgres-over-carrier-pigeon")

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(idle_timeout=0)


class TestEntryPoint:

    def test_no_ports(self):
        args = parse_args([])
        assert args.service_port is None
        assert args.metrics_port is None

    def test_both_ports(self):
        args = parse_args(["9000", "9001"])
        assert (args.service_port, args.metrics_port) == (9000, 9001)


class TestAppWiring:

    def test_backend_selected_from_settings(self, tmp_path):
        memory_app = create_app(settings=Settings(storage_backend="memory", metrics_enabled=False))
        assert isinstance(memory_app.state.storage, MemoryTodoStorage)

        sql_app = create_app(
            settings=Settings(
                storage_backend="sql",
                database_url=f"sqlite+aiosqlite:///{tmp_path / 'app.db'}",
                metrics_enabled=False,
            )
        )
        assert isinstance(sql_app.state.storage, SQLTodoStorage)

    def test_pipeline_shares_storage_and_metrics(self):
        app = create_app(settings=Settings(storage_backend="memory", metrics_enabled=True))
        assert app.state.todo_service.storage is app.state.storage
        assert app.state.todo_service.metrics is app.state.metrics
        assert app.state.todo_service.idle_timeout == 5.0
