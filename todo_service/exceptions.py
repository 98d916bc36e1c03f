"""
Todo Service - Custom Exception Hierarchy
==========================================

What:  Application-specific exceptions, one per failure class of the request
       pipeline.
How:   Each exception carries a message (returned to the client in the
       envelope's `error` field), a context dict (logged only) and the HTTP
       status it maps to.
Who:   Raised by the pipeline and storage backends; rendered by the pipeline
       itself or by the global handlers registered in main.py.

Exception Hierarchy:
    TodoServiceError (base)       → 500 Internal Server Error
    ├── InputError                → 400 Bad Request (malformed body or id)
    ├── StorageError              → 500 Internal Server Error
    └── DeadlineExceededError     → 408 Request Timeout
"""

from typing import Any, Dict, Optional


class TodoServiceError(Exception):
    """
    Base exception for all Todo Service application errors.

    Attributes:
        message:     Client-facing error description (goes into the envelope)
        context:     Additional debug info (logged but NOT returned to client)
        status_code: HTTP status the error maps to
    """

    status_code = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class InputError(TodoServiceError):
    """
    Raised when the request body or the `id` query parameter cannot be decoded.

    When:    Malformed JSON, wrong field types, missing `name`, non-integer id.
    HTTP:    400 Bad Request. The storage layer is never reached.
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Malformed request",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class StorageError(TodoServiceError):
    """
    Raised when a persistence operation fails.

    When:    Driver error, SQL error, unreachable database file.
    HTTP:    500 Internal Server Error

    The driver's own error text is kept in `context["original_error"]` for
    the server log; the client only sees `message`.
    """

    status_code = 500

    def __init__(
        self,
        message: str = "A storage error occurred",
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if operation:
            ctx["operation"] = operation
        super().__init__(message=message, context=ctx)
        self.operation = operation


class DeadlineExceededError(TodoServiceError):
    """
    Raised when a request outlives its idle-timeout deadline.

    When:    The storage call was cancelled at the deadline, or it returned
             after the deadline had already passed.
    HTTP:    408 Request Timeout, overriding the operation's own status.
    """

    status_code = 408

    def __init__(
        self,
        timeout: float,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["timeout"] = timeout
        super().__init__(
            message=f"Error: request deadline of {timeout:g}s exceeded",
            context=ctx,
        )
        self.timeout = timeout
