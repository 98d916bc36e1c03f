"""
Todo Service - Application Package Initializer
===============================================

What: Marks the `todo_service` directory as a Python package.
Who:  Imported by uvicorn (`todo_service.main:app`), pytest, and the
      `python -m todo_service` entry point.

Architecture Note:
    The service is a thin layered stack:

    ┌─────────────────────────────────────┐
    │      Middleware (CORS, JSON, log)   │  ← request decoration
    ├─────────────────────────────────────┤
    │           Routes (API Layer)        │  ← raw body / query extraction
    ├─────────────────────────────────────┤
    │    TodoService (request pipeline)   │  ← decode, deadline, envelope
    ├─────────────────────────────────────┤
    │      TodoStorage (persistence)      │  ← SQL or in-memory backend
    └─────────────────────────────────────┘

    Metrics are a separate sink handed to the pipeline at construction time.
"""

__version__ = "1.0.0"
