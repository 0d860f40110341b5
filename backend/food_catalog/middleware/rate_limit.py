"""
Food Catalog Backend: Rate Limiting Middleware
===============================================

What:  Per-IP sliding-window request limit.
How:   Keeps the timestamps of each client's requests inside the window;
       once the count reaches the limit the request is answered with 429
       and a Retry-After header.

State is in-process memory: limits apply per worker process.
Image downloads and health/docs endpoints are not counted.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, List, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from food_catalog.config import settings
from food_catalog.exceptions import RateLimitExceededError
from food_catalog.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding-window rate limiter.

    Args:
        max_requests: Requests allowed per window (default: settings)
        window_seconds: Window length (default: settings)
    """

    EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}
    EXCLUDED_PREFIXES = ("/api/uploads/",)

    def __init__(
        self,
        app,
        max_requests: Optional[int] = None,
        window_seconds: Optional[int] = None,
    ):
        super().__init__(app)
        self.max_requests = max_requests or settings.rate_limit_requests
        self.window_seconds = window_seconds or settings.rate_limit_window
        self._requests: Dict[str, List[float]] = defaultdict(list)
        self._seen = 0

    def _is_excluded(self, path: str) -> bool:
        return path in self.EXCLUDED_PATHS or path.startswith(self.EXCLUDED_PREFIXES)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if self._is_excluded(request.url.path):
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.time()
        window_start = now - self.window_seconds

        timestamps = [ts for ts in self._requests[client_ip] if ts > window_start]
        self._requests[client_ip] = timestamps

        if len(timestamps) >= self.max_requests:
            retry_after = int(timestamps[0] + self.window_seconds - now) + 1
            logger.warning(
                "Rate limit exceeded for IP %s: %d requests in %ds window",
                client_ip,
                len(timestamps),
                self.window_seconds,
            )
            exc = RateLimitExceededError(retry_after=retry_after)
            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limit_exceeded",
                    "message": exc.message,
                    "details": exc.context,
                    "request_id": request_id_var.get(""),
                },
                headers={"Retry-After": str(retry_after)},
            )

        timestamps.append(now)

        self._seen += 1
        if self._seen % 1000 == 0:
            self._cleanup_inactive_ips(window_start)

        return await call_next(request)

    def _cleanup_inactive_ips(self, window_start: float) -> None:
        """Drop clients with no requests inside the current window."""
        inactive_ips = [
            ip for ip, timestamps in self._requests.items()
            if not timestamps or max(timestamps) < window_start
        ]
        for ip in inactive_ips:
            del self._requests[ip]

        if inactive_ips:
            logger.debug("Cleaned up %d inactive IP entries", len(inactive_ips))
