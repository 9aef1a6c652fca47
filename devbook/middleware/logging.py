"""
Devbook API — Access Log Middleware
====================================

What:  One `devbook.access` line per request, written after the response
       is ready, including requests the token check rejected.

Line format:
    <METHOD> <route template> -> <status> (<ms>ms) rid=<request id>

The route template (`/posts/{post_id}`) is logged instead of the raw path
so lines for the same endpoint group together. Request bodies and the
Authorization header are never logged.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from devbook.middleware.request_id import request_id_var

logger = logging.getLogger("devbook.access")

QUIET_PATHS = frozenset({"/health", "/docs", "/redoc", "/openapi.json"})


def level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


def route_template(request: Request) -> str:
    # Only set once routing matched; unknown paths fall back to the raw path
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        logger.log(
            level_for(response.status_code),
            "%s %s -> %d (%.1fms) rid=%s",
            request.method,
            route_template(request),
            response.status_code,
            elapsed_ms,
            request_id_var.get(""),
            extra={
                "client_ip": request.client.host if request.client else "unknown",
                "duration_ms": round(elapsed_ms, 2),
            },
        )
        return response
