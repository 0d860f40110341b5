"""
Food Catalog Backend: Request ID Middleware
============================================

What:  Tags each request with a correlation ID, echoed in X-Request-ID and
       included in every error body and access-log line.
How:   A client-supplied X-Request-ID is reused when it is a short token of
       safe characters; anything else (too long, spaces, control
       characters) is replaced by a generated 8-character ID so that a
       header value can never forge extra log lines.
"""

import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,64}$")

# Read by exception handlers and the access logger
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


def resolve_request_id(header_value: str | None) -> str:
    """The client's ID when it is usable, otherwise a fresh one."""
    if header_value and _VALID_REQUEST_ID.match(header_value):
        return header_value
    return new_request_id()


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Sets request_id_var, request.state.request_id and the response header."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
