"""
Todo Service - CORS Headers Middleware
=======================================

What:  Adds allow-all CORS headers to every response and answers preflight
       OPTIONS requests directly.
When:  Outermost middleware added by create_app(). Unhandled exceptions are
       rendered further out, by the fallback handler in main.py, which sets
       CORS_HEADERS itself.

Headers (fixed, not configurable):
    Access-Control-Allow-Origin:  *
    Access-Control-Allow-Methods: POST, GET, OPTIONS, PUT, DELETE
    Access-Control-Allow-Headers: Accept, Content-Type, Content-Length,
                                  Accept-Encoding, X-CSRF-Token, Authorization

Starlette's CORSMiddleware only decorates requests that carry an Origin
header; these headers are set unconditionally.
"""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from todo_service.middleware.logging import log_access
from todo_service.schemas.todo import Envelope

ALLOW_ORIGIN = "*"
ALLOW_METHODS = "POST, GET, OPTIONS, PUT, DELETE"
ALLOW_HEADERS = (
    "Accept, Content-Type, Content-Length, Accept-Encoding, X-CSRF-Token, Authorization"
)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": ALLOW_ORIGIN,
    "Access-Control-Allow-Methods": ALLOW_METHODS,
    "Access-Control-Allow-Headers": ALLOW_HEADERS,
}


class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """Allow-all CORS decoration for every route."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method == "OPTIONS":
            # Never reaches AccessLogMiddleware
            log_access(request)
            response = JSONResponse(status_code=200, content=Envelope.success(200).to_wire())
        else:
            response = await call_next(request)

        response.headers.update(CORS_HEADERS)
        return response
