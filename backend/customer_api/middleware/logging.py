"""
Customer API — Request Logging Middleware
==========================================

What:  One access-log line per HTTP request, with status and duration.
How:   Times the downstream call and logs on the `customer_api.access` logger
       at a level chosen from the status class.
When:  Runs inside RequestIDMiddleware, so the request ID is already set.

Requests are logged under their route template
("/api/customers/{resource_id}"), not the concrete path, so customer
identifiers stay out of the access log and lines group per endpoint.
Unmatched requests (404 from the router) fall back to the raw path.

Not logged: request or response bodies (customer data is personal data).
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from customer_api.middleware.request_id import request_id_var

logger = logging.getLogger("customer_api.access")

# Probed every few seconds by orchestrators
QUIET_PATHS = {"/health"}


def level_for_status(status: int) -> int:
    """5xx → ERROR, 4xx → WARNING, everything else → INFO."""
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


def route_template(request: Request) -> str:
    """Path template of the matched route; the router fills scope["route"]."""
    route = request.scope.get("route")
    return getattr(route, "path_format", None) or request.url.path


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Access log keyed by route template and request ID."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)

        route = route_template(request)
        logger.log(
            level_for_status(response.status_code),
            "%s %s → %d in %.1fms",
            request.method,
            route,
            response.status_code,
            elapsed_ms,
            extra={
                "request_id": request_id_var.get(""),
                "method": request.method,
                "route": route,
                "status": response.status_code,
                "duration_ms": elapsed_ms,
            },
        )
        return response
