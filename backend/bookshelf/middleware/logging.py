"""
Bookshelf Backend: Access Log Middleware
=========================================

What:  One access log line per book API request.
How:   Times the downstream call, then logs the matched route template
       (`/books/{book_id}`, not `/books/42`) with method, status, duration,
       request ID and client IP. The level follows the status class:
       5xx → ERROR, 4xx → WARNING, everything else → INFO.
When:  Runs inside RequestIDMiddleware, so the request ID is already set.

Paths listed in Settings.access_log_skip_paths (default `/health`) are passed
through without a log line. Request bodies are never logged.
"""

import logging
import time
from typing import Iterable, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from bookshelf.middleware.request_id import request_id_var

logger = logging.getLogger("bookshelf.access")


def _status_level(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


def route_template(request: Request) -> str:
    """The path pattern of the route that served the request, or the raw path when none matched."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Access log keyed by route template so per-book URLs group together."""

    def __init__(self, app: ASGIApp, skip_paths: Optional[Iterable[str]] = None):
        super().__init__(app)
        self.skip_paths = frozenset(skip_paths or ())

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.skip_paths:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        # request.client is None under ASGITransport without a client tuple
        client_ip = request.client.host if request.client else "unknown"
        route = route_template(request)
        rid = request_id_var.get("")
        status = response.status_code

        logger.log(
            _status_level(status),
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            route,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "route": route,
                "path": request.url.path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

        return response
