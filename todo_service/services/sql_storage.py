"""
Todo Service - SQL Storage Backend
===================================

What:  TodoStorage implementation on an async SQLAlchemy engine.
How:   Each operation opens its own session, runs one statement, commits,
       and closes. The schema (and, for SQLite, the database directory) is
       created before the first operation and eagerly at startup.
Who:   Built by the application factory when STORAGE_BACKEND=sql.

Error Handling:
    Any exception raised by the driver or SQLAlchemy is logged with the
    operation name and re-raised as StorageError. Cancellation at the request
    deadline (asyncio.CancelledError) is not an Exception and passes through
    untouched; the session context manager rolls back and releases the
    connection.

Statements:
    insert        INSERT INTO todos (name, done) VALUES (:name, false)
    fetch_all     SELECT id, name, done FROM todos
    update        UPDATE todos SET name = :name, done = :done WHERE id = :id
    delete        DELETE FROM todos WHERE id = :id
    count_entries SELECT count(*) FROM todos
"""

import asyncio
import logging
from typing import List

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncEngine

from todo_service.database import (
    Base,
    create_engine_from_url,
    create_session_factory,
    ensure_sqlite_directory,
)
from todo_service.exceptions import StorageError
from todo_service.models.todo import Todo
from todo_service.schemas.todo import TodoIn, TodoOut
from todo_service.services.storage_base import TodoStorage

logger = logging.getLogger(__name__)


class SQLTodoStorage(TodoStorage):
    """
    Todo persistence on a relational database.

    The engine is shared by all concurrent requests; the database itself
    serializes conflicting writes (SQLite holds a database-level write lock).
    """

    def __init__(self, engine: AsyncEngine):
        self._engine = engine
        self._session_factory = create_session_factory(engine)
        self._schema_ready = False
        self._schema_lock = asyncio.Lock()

    @classmethod
    def from_url(
        cls,
        database_url: str,
        pool_pre_ping: bool = True,
        echo: bool = False,
    ) -> "SQLTodoStorage":
        return cls(create_engine_from_url(database_url, pool_pre_ping=pool_pre_ping, echo=echo))

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    # ── Schema ────────────────────────────────────────────────────────────

    async def ensure_schema(self) -> None:
        if self._schema_ready:
            return
        async with self._schema_lock:
            if self._schema_ready:
                return
            try:
                ensure_sqlite_directory(self._engine.url)
                async with self._engine.begin() as conn:
                    await conn.run_sync(Base.metadata.create_all)
            except Exception as e:
                raise self._wrap("ensure_schema", e) from e
            self._schema_ready = True
            logger.info("Schema ready on %s", self._engine.url.render_as_string(hide_password=True))

    # ── CRUD ──────────────────────────────────────────────────────────────

    async def insert(self, todo: TodoIn) -> int:
        await self.ensure_schema()
        try:
            async with self._session_factory() as session:
                row = Todo(name=todo.name, done=False)
                session.add(row)
                await session.commit()
                return row.id
        except Exception as e:
            raise self._wrap("insert", e) from e

    async def fetch_all(self) -> List[TodoOut]:
        await self.ensure_schema()
        try:
            async with self._session_factory() as session:
                result = await session.execute(sa.select(Todo))
                return [TodoOut.model_validate(row) for row in result.scalars().all()]
        except Exception as e:
            raise self._wrap("fetch_all", e) from e

    async def update(self, todo: TodoIn, todo_id: int) -> int:
        await self.ensure_schema()
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    sa.update(Todo)
                    .where(Todo.id == todo_id)
                    .values(name=todo.name, done=todo.done)
                )
                await session.commit()
                return result.rowcount
        except Exception as e:
            raise self._wrap("update", e, todo_id=todo_id) from e

    async def delete(self, todo_id: int) -> int:
        await self.ensure_schema()
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    sa.delete(Todo).where(Todo.id == todo_id)
                )
                await session.commit()
                return result.rowcount
        except Exception as e:
            raise self._wrap("delete", e, todo_id=todo_id) from e

    async def count_entries(self) -> int:
        await self.ensure_schema()
        try:
            async with self._session_factory() as session:
                count = await session.scalar(
                    sa.select(sa.func.count()).select_from(Todo)
                )
                return int(count or 0)
        except Exception as e:
            raise self._wrap("count_entries", e) from e

    # ── Lifecycle ─────────────────────────────────────────────────────────

    async def close(self) -> None:
        """Close every pooled connection."""
        await self._engine.dispose()

    # ── Helpers ───────────────────────────────────────────────────────────

    @staticmethod
    def _wrap(operation: str, exc: Exception, **context) -> StorageError:
        if isinstance(exc, StorageError):
            return exc
        logger.error(
            "Storage operation %s failed: %s",
            operation,
            str(exc),
            exc_info=True,
        )
        context["original_error"] = type(exc).__name__
        return StorageError(
            message=f"storage: {operation} failed",
            operation=operation,
            context=context,
        )
