# Services package init
"""
Todo Service - Services Layer
==============================

What:  Request pipeline and persistence backends, independent of HTTP.

Service Inventory:
    - TodoStorage (abstract): persistence contract for todos
    - SQLTodoStorage: async SQLAlchemy implementation (SQLite by default)
    - MemoryTodoStorage: dict-backed implementation
    - TodoService: per-route pipeline (decode, deadline, envelope, metrics)
"""

from todo_service.services.memory_storage import MemoryTodoStorage
from todo_service.services.sql_storage import SQLTodoStorage
from todo_service.services.storage_base import TodoStorage


def build_storage(backend: str, database_url: str, pool_pre_ping: bool = True, echo: bool = False) -> TodoStorage:
    """Construct the storage backend named by the STORAGE_BACKEND setting."""
    if backend == "memory":
        return MemoryTodoStorage()
    return SQLTodoStorage.from_url(database_url, pool_pre_ping=pool_pre_ping, echo=echo)
