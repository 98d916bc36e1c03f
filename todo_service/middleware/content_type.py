"""
Todo Service - JSON Content-Type Middleware
============================================

What:  Forces `Content-Type: application/json` on every response.
Why:   All bodies are JSON envelopes, including ones produced by framework
       error paths.
"""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

JSON_CONTENT_TYPE = "application/json"


class JSONContentTypeMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)
        response.headers["Content-Type"] = JSON_CONTENT_TYPE
        return response
