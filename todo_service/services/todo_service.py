"""
Todo Service - Request Pipeline (Business Logic Orchestrator)
==============================================================

What:  The per-route handler logic: decode → deadline-bounded storage call →
       envelope.
How:   TodoService is built once with a storage handle, the idle timeout, an
       optional Metrics sink and an optional renderer. Each public coroutine
       returns the Envelope, or whatever the renderer turns it into (the app
       passes the JSONResponse builder from routes/todos.py).
Who:   Called by routes/todos.py.

Per-request flow:
    ┌──────────┐    ┌──────────────┐    ┌──────────────────┐    ┌──────────┐
    │ Deadline │───▶│ Decode input │───▶│ Storage call     │───▶│ Envelope │
    │ (start)  │    │ (400 on bad) │    │ (500 / 408)      │    │ 2xx      │
    └──────────┘    └──────────────┘    └──────────────────┘    └──────────┘

Deadline semantics:
    The storage call runs under asyncio.wait_for with whatever is left of the
    deadline, so an awaiting call that overruns is cancelled (408). After the
    call returns, the deadline is checked once more: a call that blocked the
    event loop past the deadline completes its work but the request is still
    reported as 408.

Metrics:
    A finalizer around every request records duration by final status,
    increments the request counter, and increments the error counter for any
    non-2xx status. The window runs from handler entry until the response
    body is rendered; the socket write that follows belongs to uvicorn.
    Unexpected exceptions are recorded as 500 and re-raised.
"""

import asyncio
import logging
import re
import time
from typing import Any, Awaitable, Callable, Optional, TypeVar

from pydantic import ValidationError

from todo_service.exceptions import DeadlineExceededError, InputError, TodoServiceError
from todo_service.metrics import Metrics
from todo_service.schemas.todo import CountPayload, Envelope, TodoIn, TodoOut
from todo_service.services.storage_base import TodoStorage

logger = logging.getLogger(__name__)

T = TypeVar("T")

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

_ID_PATTERN = re.compile(r"[+-]?[0-9]+")

# INT64_MIN and INT64_MAX have 19 digits
MAX_ID_DIGITS = 19


# ══════════════════════════════════════════════════════════════════════════
# Input Decoding
# ══════════════════════════════════════════════════════════════════════════


def parse_id(raw: Optional[str]) -> int:
    """
    Decode the `id` query parameter as a signed 64-bit decimal integer.

    Raises:
        InputError: missing, non-numeric, or out of int64 range.
    """
    if raw is None or not _ID_PATTERN.fullmatch(raw):
        raise InputError(
            message=f"invalid id {raw or ''!r}: expected an integer",
            field="id",
        )
    # Bounds int() before CPython's int-string conversion limit applies
    if len(raw.lstrip("+-").lstrip("0")) > MAX_ID_DIGITS:
        raise InputError(
            message=f"invalid id {raw[:MAX_ID_DIGITS + 1]!r}...: value out of range",
            field="id",
            context={"length": len(raw)},
        )
    value = int(raw)
    if not INT64_MIN <= value <= INT64_MAX:
        raise InputError(
            message=f"invalid id {raw!r}: value out of range",
            field="id",
        )
    return value


def parse_todo(body: bytes) -> TodoIn:
    """
    Decode a JSON request body into a TodoIn.

    Raises:
        InputError: body is not JSON, not an object, or has wrong field types.
    """
    try:
        return TodoIn.model_validate_json(body)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ())) or "body"
        raise InputError(
            message=f"invalid todo body: {location}: {first.get('msg', 'invalid value')}",
            field="body",
            context={"error_count": e.error_count()},
        )


# ══════════════════════════════════════════════════════════════════════════
# Pipeline
# ══════════════════════════════════════════════════════════════════════════


class TodoService:
    """
    Handler logic for the five todo routes.

    Stateless apart from its collaborators; one instance serves every
    concurrent request.

    Args:
        renderer: Builds the HTTP response from the final Envelope. It runs
                  inside the metrics finalizer, so serialization counts
                  towards the recorded duration.
    """

    def __init__(
        self,
        storage: TodoStorage,
        idle_timeout: float,
        metrics: Optional[Metrics] = None,
        renderer: Optional[Callable[[Envelope], Any]] = None,
    ):
        self.storage = storage
        self.idle_timeout = idle_timeout
        self.metrics = metrics
        self.renderer = renderer

    # ── Routes ────────────────────────────────────────────────────────────

    async def create(self, body: bytes) -> Any:
        """POST /create → 201 with the stored todo (done is always false)."""
        return await self._handle("create", self._create, body)

    async def fetch_all(self) -> Any:
        """GET /list → 200 with every stored todo."""
        return await self._handle("fetch_all", self._fetch_all)

    async def update(self, raw_id: Optional[str], body: bytes) -> Any:
        """PUT /update/?id=N → 200, also when no todo has that id."""
        return await self._handle("update", self._update, raw_id, body)

    async def delete(self, raw_id: Optional[str]) -> Any:
        """DELETE /delete/?id=N → 200, also when no todo has that id."""
        return await self._handle("delete", self._delete, raw_id)

    async def count_entries(self) -> Any:
        """GET /count → 200 with {"count": N}."""
        return await self._handle("count_entries", self._count_entries)

    # ── Operation Bodies ──────────────────────────────────────────────────

    async def _create(self, deadline: float, body: bytes) -> Envelope:
        todo = parse_todo(body)
        todo_id = await self._bounded(self.storage.insert(todo), deadline)
        return Envelope.success(201, TodoOut(id=todo_id, name=todo.name, done=False))

    async def _fetch_all(self, deadline: float) -> Envelope:
        todos = await self._bounded(self.storage.fetch_all(), deadline)
        return Envelope.success(200, todos)

    async def _update(self, deadline: float, raw_id: Optional[str], body: bytes) -> Envelope:
        todo_id = parse_id(raw_id)
        todo = parse_todo(body)
        affected = await self._bounded(self.storage.update(todo, todo_id), deadline)
        if not affected:
            logger.debug("handler.update: no todo with id %d, nothing changed", todo_id)
        return Envelope.success(200)

    async def _delete(self, deadline: float, raw_id: Optional[str]) -> Envelope:
        todo_id = parse_id(raw_id)
        affected = await self._bounded(self.storage.delete(todo_id), deadline)
        if not affected:
            logger.debug("handler.delete: no todo with id %d, nothing removed", todo_id)
        return Envelope.success(200)

    async def _count_entries(self, deadline: float) -> Envelope:
        count = await self._bounded(self.storage.count_entries(), deadline)
        return Envelope.success(200, CountPayload(count=count))

    # ── Plumbing ──────────────────────────────────────────────────────────

    async def _handle(
        self,
        operation: str,
        op: Callable[..., Awaitable[Envelope]],
        *args,
    ) -> Any:
        loop = asyncio.get_running_loop()
        started = time.perf_counter()
        deadline = loop.time() + self.idle_timeout
        status = 500

        try:
            try:
                envelope = await op(deadline, *args)
            except TodoServiceError as e:
                envelope = Envelope.failure(e.status_code, e.message)
                self._log(operation, envelope, e)
            else:
                self._log(operation, envelope)
            response = envelope if self.renderer is None else self.renderer(envelope)
            status = envelope.status
            return response
        finally:
            if self.metrics is not None:
                self._record(time.perf_counter() - started, status)

    async def _bounded(self, call: Awaitable[T], deadline: float) -> T:
        """Await a storage call within what remains of the request deadline."""
        loop = asyncio.get_running_loop()
        remaining = max(deadline - loop.time(), 0.0)

        try:
            result = await asyncio.wait_for(call, timeout=remaining)
        except asyncio.TimeoutError:
            raise DeadlineExceededError(self.idle_timeout, context={"phase": "in_flight"})

        if loop.time() >= deadline:
            raise DeadlineExceededError(self.idle_timeout, context={"phase": "after_call"})
        return result

    def _record(self, elapsed: float, status: int) -> None:
        self.metrics.observe_request(elapsed, status)
        self.metrics.inc_request()
        if not 200 <= status < 300:
            self.metrics.inc_error()

    @staticmethod
    def _log(
        operation: str,
        envelope: Envelope,
        error: Optional[TodoServiceError] = None,
    ) -> None:
        extra = {"operation": operation, "status": envelope.status}
        if error is None:
            logger.info("handler.%s: %d OK", operation, envelope.status, extra=extra)
        elif envelope.status >= 500:
            logger.error(
                "handler.%s: %d %s | Context: %s",
                operation, envelope.status, error.message, error.context,
                extra=extra,
            )
        else:
            logger.warning(
                "handler.%s: %d %s", operation, envelope.status, error.message,
                extra=extra,
            )
