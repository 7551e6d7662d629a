"""
Customer API — Request ID Middleware
=====================================

What:  Assigns a correlation ID to each request and echoes it in the response.
How:   Reuses a well-formed client X-Request-ID header or generates a short
       UUID, stores it in a ContextVar for loggers and error handlers, and sets
       the X-Request-ID response header.
Who:   Applied to every request via Starlette middleware.

Error responses include the same ID in their `request_id` field, so a client
report can be matched to the server-side log entries for that request.
"""

import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

REQUEST_ID_HEADER = "X-Request-ID"

# Client IDs end up in logs; accept only short token-like values
_CLIENT_ID_PATTERN = re.compile(r"[A-Za-z0-9._-]{1,64}")


def new_request_id() -> str:
    return str(uuid.uuid4())[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Behavior:
        1. Use the client's X-Request-ID when it is a short token
        2. Otherwise generate an 8-character ID
        3. Store it in request_id_var and request.state.request_id
        4. Add it to the response headers
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get(REQUEST_ID_HEADER, "")
        if not _CLIENT_ID_PATTERN.fullmatch(rid):
            rid = new_request_id()

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
