"""
Todo Service - Database Engine Helpers
=======================================

What:  Async SQLAlchemy engine and session factory construction, plus the
       declarative Base shared by all ORM models.
How:   `create_engine_from_url()` builds an async engine; SQLTodoStorage owns
       the engine it creates, prepares the SQLite directory with
       `ensure_sqlite_directory()` before first use, and disposes of the
       engine on shutdown.
Who:   Used by SQLTodoStorage and by tests that want a throwaway database.

Connection Notes:
    SQLite URLs get `check_same_thread=False` so the aiosqlite worker thread
    can use connections created elsewhere. Pool sizing is left to
    SQLAlchemy's per-dialect defaults (SQLite does not accept pool_size for
    in-memory databases).
"""

import os

from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    `Base.metadata.create_all` is how the storage layer ensures its schema
    exists; it only issues CREATE TABLE for tables that are absent.
    """
    pass


def create_engine_from_url(
    database_url: str,
    pool_pre_ping: bool = True,
    echo: bool = False,
) -> AsyncEngine:
    """Build an async engine for `database_url`. No connection is opened yet."""
    url = make_url(database_url)
    connect_args = {}

    if url.drivername.startswith("sqlite"):
        connect_args["check_same_thread"] = False

    return create_async_engine(
        database_url,
        pool_pre_ping=pool_pre_ping,
        echo=echo,
        connect_args=connect_args,
    )


def ensure_sqlite_directory(url: URL) -> None:
    """
    Create the parent directory of a file-backed SQLite database.

    sqlite refuses to create a database file inside a missing directory.
    No-op for other dialects and for in-memory databases.
    """
    if not url.drivername.startswith("sqlite"):
        return
    if not url.database or url.database == ":memory:":
        return
    parent = os.path.dirname(os.path.abspath(url.database))
    os.makedirs(parent, exist_ok=True)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Session factory bound to `engine`.

    expire_on_commit=False: rows returned by a storage call are read after the
    session commits, so attributes must stay loaded.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
