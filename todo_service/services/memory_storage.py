"""
Todo Service - In-Memory Storage Backend
=========================================

What:  Dict-backed TodoStorage with SQLite-like id assignment.
Who:   Selected with STORAGE_BACKEND=memory; used by pipeline and route tests.

Ids start at 1 and are never reused within a process, matching an
INTEGER PRIMARY KEY table that only ever grows. State is lost on restart.
"""

import asyncio
from typing import Dict, List

from todo_service.schemas.todo import TodoIn, TodoOut
from todo_service.services.storage_base import TodoStorage


class MemoryTodoStorage(TodoStorage):
    """Process-local todo store. Writes are serialized with an asyncio.Lock."""

    def __init__(self):
        self._rows: Dict[int, TodoOut] = {}
        self._next_id = 1
        self._lock = asyncio.Lock()

    async def ensure_schema(self) -> None:
        return None

    async def insert(self, todo: TodoIn) -> int:
        async with self._lock:
            todo_id = self._next_id
            self._next_id += 1
            self._rows[todo_id] = TodoOut(id=todo_id, name=todo.name, done=False)
            return todo_id

    async def fetch_all(self) -> List[TodoOut]:
        # Insertion order, like a rowid scan
        return [row.model_copy() for row in self._rows.values()]

    async def update(self, todo: TodoIn, todo_id: int) -> int:
        async with self._lock:
            if todo_id not in self._rows:
                return 0
            self._rows[todo_id] = TodoOut(id=todo_id, name=todo.name, done=todo.done)
            return 1

    async def delete(self, todo_id: int) -> int:
        async with self._lock:
            return 1 if self._rows.pop(todo_id, None) is not None else 0

    async def count_entries(self) -> int:
        return len(self._rows)
