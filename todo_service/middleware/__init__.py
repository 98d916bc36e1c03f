# Middleware package init
"""
Todo Service - Middleware Package
==================================

What:  Cross-cutting request decoration applied to every route.

Middleware Chain (outermost to innermost):
    Request → [CORS headers] → [JSON content type] → [Access log] → Route Handler

    Starlette runs the LAST added middleware first, so create_app() adds
    them in reverse: AccessLog, then JSONContentType, then CORSHeaders.
"""

from todo_service.middleware.content_type import JSONContentTypeMiddleware
from todo_service.middleware.cors import CORS_HEADERS, CORSHeadersMiddleware
from todo_service.middleware.logging import AccessLogMiddleware

__all__ = [
    "CORS_HEADERS",
    "AccessLogMiddleware",
    "CORSHeadersMiddleware",
    "JSONContentTypeMiddleware",
]
