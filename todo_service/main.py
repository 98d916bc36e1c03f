"""
Todo Service - FastAPI Application Factory
===========================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() wires settings, storage, metrics, the
       request pipeline, middleware, exception handlers and routes.
Who:   uvicorn (`todo_service.main:app`), `python -m todo_service`, tests.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────────┐ ┌──────────────┐ ┌─────────────┐  │
    │  │ CORS headers │→│ JSON content │→│ Access log  │  │
    │  └──────────────┘ └──────────────┘ └─────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  /create  /list  /update/  /delete/  /count         │
    │                                                     │
    │  app.state:                                         │
    │  storage (TodoStorage) · metrics · todo_service     │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Ensure the storage schema exists (fatal on failure)
    3. Start the metrics listener when enabled

    Shutdown:
    1. Stop the metrics listener
    2. Close storage (dispose the database engine)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from todo_service import __version__
from todo_service.config import Settings, settings as default_settings
from todo_service.exceptions import TodoServiceError
from todo_service.metrics import Metrics
from todo_service.middleware import (
    CORS_HEADERS,
    AccessLogMiddleware,
    CORSHeadersMiddleware,
    JSONContentTypeMiddleware,
)
from todo_service.routes import todos
from todo_service.schemas.todo import Envelope
from todo_service.services import build_storage
from todo_service.services.storage_base import TodoStorage
from todo_service.services.todo_service import TodoService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(log_level: str) -> None:
    """
    Configure root logging once for the whole process.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
        force=True,
    )

    # uvicorn's own access log duplicates AccessLogMiddleware
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    cfg: Settings = app.state.settings
    storage: TodoStorage = app.state.storage
    metrics: Optional[Metrics] = app.state.metrics

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(cfg.log_level)
    logger.info("Todo service %s starting up...", __version__)

    # A store that cannot be opened is the one fatal condition
    try:
        await storage.ensure_schema()
    except TodoServiceError as e:
        logger.critical("Could not initialize storage: %s | Context: %s", e.message, e.context)
        raise
    logger.info("Storage initialized (%s backend)", cfg.storage_backend)

    if metrics is not None and cfg.metrics_enabled:
        metrics.serve(cfg.metrics_host, cfg.metrics_port)

    logger.info(
        "Server ready at http://%s:%d (idle timeout %.1fs)",
        cfg.service_host,
        cfg.service_port,
        cfg.idle_timeout,
    )

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Todo service shutting down...")
    if metrics is not None:
        metrics.shutdown()
    await storage.close()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Render errors raised outside the pipeline as envelopes.

    Handler hierarchy:
        TodoServiceError         → its own status_code
        StarletteHTTPException   → its status (404 unknown path, 405 wrong method)
        RequestValidationError   → 400
        Exception (fallback)     → 500, stack trace logged server-side only

    The fallback handler runs in Starlette's ServerErrorMiddleware, outside
    every middleware added by create_app(), so it sets the CORS headers itself.
    """

    @app.exception_handler(TodoServiceError)
    async def handle_service_error(request: Request, exc: TodoServiceError):
        logger.warning("%s %s: %s", request.method, request.url.path, exc.message)
        envelope = Envelope.failure(exc.status_code, exc.message)
        return JSONResponse(status_code=envelope.status, content=envelope.to_wire())

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        envelope = Envelope.failure(exc.status_code, str(exc.detail))
        return JSONResponse(
            status_code=envelope.status,
            content=envelope.to_wire(),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        envelope = Envelope.failure(400, "Malformed request")
        return JSONResponse(status_code=400, content=envelope.to_wire())

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("Unexpected error: %s", str(exc), exc_info=True)
        envelope = Envelope.failure(500, "An unexpected error occurred")
        return JSONResponse(status_code=500, content=envelope.to_wire(), headers=CORS_HEADERS)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    settings: Optional[Settings] = None,
    storage: Optional[TodoStorage] = None,
    metrics: Optional[Metrics] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration; defaults to the module singleton.
        storage:  Storage backend; built from settings when omitted.
        metrics:  Metrics sink; a fresh one is built when omitted and
                  METRICS_ENABLED is true, otherwise requests are not measured.
    """
    cfg = settings or default_settings

    if storage is None:
        storage = build_storage(
            cfg.storage_backend,
            cfg.database_url,
            pool_pre_ping=cfg.db_pool_pre_ping,
            echo=cfg.log_level == "DEBUG",
        )
    if metrics is None and cfg.metrics_enabled:
        metrics = Metrics()

    app = FastAPI(
        title="Todo Service",
        description="CRUD over todos with a uniform JSON response envelope.",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = cfg
    app.state.storage = storage
    app.state.metrics = metrics
    app.state.todo_service = TodoService(
        storage=storage,
        idle_timeout=cfg.idle_timeout,
        metrics=metrics,
        renderer=todos.render,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: CORS → JSON content type → access log → route
    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(JSONContentTypeMiddleware)
    app.add_middleware(CORSHeadersMiddleware)

    register_exception_handlers(app)

    app.include_router(todos.router)

    return app


# uvicorn expects `todo_service.main:app` to be importable
app = create_app()
