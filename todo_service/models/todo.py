"""
Todo Service - Todo SQLAlchemy Model
=====================================

What:  ORM model representing the `todos` table.
Who:   Used by SQLTodoStorage for all five CRUD statements and by
       `Base.metadata.create_all` for schema bootstrap.

Table:
    id    INTEGER PRIMARY KEY   (store-assigned, SQLite rowid alias)
    name  VARCHAR NOT NULL
    done  BOOLEAN NOT NULL
"""

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from todo_service.database import Base


class Todo(Base):
    """
    A single todo row.

    Lifecycle:
        1. Inserted with done=False (whatever the client sent)
        2. Updated in place: name and done are both replaced
        3. Deleted by id (hard delete, no tombstone)
    """

    __tablename__ = "todos"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    name: Mapped[str] = mapped_column(
        String,
        nullable=False,
    )

    done: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    def __repr__(self) -> str:
        return f"<Todo(id={self.id}, name='{self.name}', done={self.done})>"
