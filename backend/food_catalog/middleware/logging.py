"""
Food Catalog Backend: Request Logging Middleware
=================================================

What:  One access-log line per request on the `food_catalog.access` logger.

    POST /api/foods 201 48.3ms [a1b2c3d4] from 10.0.0.7 upload=20480B
    GET /api/uploads/foods/3f2a….png 200 1.2ms [e5f6a7b8] from 10.0.0.7

How:   The level follows the status (5xx ERROR, 4xx WARNING, else INFO).
       Create and update requests also log the declared body size, which
       is dominated by the image. Image downloads are logged at DEBUG so
       catalog pages with many thumbnails do not flood the log. /health is
       never logged.

Request bodies (form fields, image bytes) are never logged.
"""

import logging
import time
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from food_catalog.middleware.request_id import request_id_var

logger = logging.getLogger("food_catalog.access")

SILENT_PATHS = {"/health"}
IMAGE_PATH_PREFIX = "/api/uploads/"
UPLOAD_METHODS = {"POST", "PUT"}


def _level_for(path: str, status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    if path.startswith(IMAGE_PATH_PREFIX):
        return logging.DEBUG
    return logging.INFO


def _upload_size(request: Request) -> Optional[int]:
    """Declared body size of a create/update request, if any."""
    if request.method not in UPLOAD_METHODS:
        return None
    length = request.headers.get("content-length")
    return int(length) if length and length.isdigit() else None


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Access logging with request-ID correlation."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in SILENT_PATHS:
            return await call_next(request)

        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000

        status = response.status_code
        level = _level_for(path, status)
        if not logger.isEnabledFor(level):
            return response

        rid = request_id_var.get("")
        client_ip = request.client.host if request.client else "unknown"
        upload = _upload_size(request)
        suffix = f" upload={upload}B" if upload is not None else ""

        logger.log(
            level,
            "%s %s %d %.1fms [%s] from %s%s",
            request.method, path, status, duration_ms, rid, client_ip, suffix,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
                "upload_bytes": upload,
            },
        )
        return response
