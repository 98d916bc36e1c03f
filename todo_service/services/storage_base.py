"""
Todo Service - Abstract Storage Interface
==========================================

What:  Abstract base class defining the persistence contract for todos.
How:   Concrete backends (SQLTodoStorage, MemoryTodoStorage) implement the
       five CRUD coroutines plus schema bootstrap and shutdown.
Who:   Called by TodoService, one coroutine per route.

Contract:
    - Every operation is a single statement; nothing spans operations.
    - Implementation-specific failures are wrapped in StorageError.
    - Operations may be cancelled by the caller at the request deadline.
    - update()/delete() on a missing id are no-ops that report 0 rows.
"""

from abc import ABC, abstractmethod
from typing import List

from todo_service.schemas.todo import TodoIn, TodoOut


class TodoStorage(ABC):
    """
    Abstract interface over a store of Todo records.

    Implementations:
        - SQLTodoStorage: SQLAlchemy async engine (SQLite by default)
        - MemoryTodoStorage: process-local dict, used for tests and demos
    """

    @abstractmethod
    async def ensure_schema(self) -> None:
        """
        Create the backing table if it does not exist yet.

        Idempotent. Backends also call it lazily before their first
        operation, so callers only need it to fail fast at startup.
        """
        ...

    @abstractmethod
    async def insert(self, todo: TodoIn) -> int:
        """
        Persist a new todo and return its store-assigned id.

        `todo.done` is ignored; new records are always stored with done=False.
        """
        ...

    @abstractmethod
    async def fetch_all(self) -> List[TodoOut]:
        """Return every stored todo in the store's natural order."""
        ...

    @abstractmethod
    async def update(self, todo: TodoIn, todo_id: int) -> int:
        """
        Replace name and done of the todo with `todo_id`.

        Returns the number of affected rows; 0 means the id does not exist,
        which is not an error.
        """
        ...

    @abstractmethod
    async def delete(self, todo_id: int) -> int:
        """Remove the todo with `todo_id`. Returns affected rows (0 or 1)."""
        ...

    @abstractmethod
    async def count_entries(self) -> int:
        """Return the number of stored todos."""
        ...

    async def close(self) -> None:
        """Release backend resources. No-op unless overridden."""
        return None
