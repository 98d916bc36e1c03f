"""
Todo Service - Access Log Middleware
=====================================

What:  One log line per request: client address, method, path.
When:  Innermost middleware, emitted BEFORE the handler runs. It records
       dispatch, not outcome; the pipeline logs the outcome of each
       operation separately. Preflight OPTIONS requests are answered by
       CORSHeadersMiddleware before they get here; it calls log_access()
       itself.

Log Format:
    Addr: 127.0.0.1:53211. Method: POST. URL: /create.

What we log vs what we DON'T log:
    ✅ Log: client address, method, path and query
    ❌ Don't log: request body, headers
"""

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("todo_service.access")


def client_address(request: Request) -> str:
    # request.client is None under some test transports
    if request.client is None:
        return "unknown"
    return f"{request.client.host}:{request.client.port}"


def log_access(request: Request) -> None:
    """Emit the access line for `request`."""
    addr = client_address(request)
    method = request.method
    url = request.url.path
    if request.url.query:
        url = f"{url}?{request.url.query}"

    logger.info(
        "Addr: %s. Method: %s. URL: %s.",
        addr,
        method,
        url,
        extra={"client_addr": addr, "method": method, "path": request.url.path},
    )


class AccessLogMiddleware(BaseHTTPMiddleware):
    """Logs each request as it is dispatched to the handler."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        log_access(request)
        return await call_next(request)
