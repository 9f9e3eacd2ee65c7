"""
Blog API — Access Log Middleware
================================

What:  One common-log style line per HTTP request on `blog_api.access`.
When:  Runs inside RequestIDMiddleware, so the request id is already set.

Example line:
    127.0.0.1 [a1b2c3d4] "GET /posts/3f0c... HTTP/1.1" 500 34 4.2ms

The size field is the response Content-Length, or "-" when the response
is streamed or empty. Request bodies are never logged.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from blog_api.middleware.request_id import request_id_var

logger = logging.getLogger("blog_api.access")


def level_for_status(status: int) -> int:
    """5xx → ERROR, 4xx → WARNING, anything else → INFO."""
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


def format_access_line(request: Request, response: Response, duration_ms: float) -> str:
    client = request.client.host if request.client else "-"
    target = request.url.path
    if request.url.query:
        target = f"{target}?{request.url.query}"
    http_version = request.scope.get("http_version", "1.1")
    size = response.headers.get("content-length", "-")
    if size == "0":
        size = "-"

    return (
        f'{client} [{request_id_var.get("") or "-"}] '
        f'"{request.method} {target} HTTP/{http_version}" '
        f"{response.status_code} {size} {duration_ms:.1f}ms"
    )


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        logger.log(
            level_for_status(response.status_code),
            format_access_line(request, response, duration_ms),
            extra={
                "request_id": request_id_var.get(""),
                "status": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )
        return response
