"""
CodeVault Backend — Request Logging Middleware
===============================================

What:  One access-log line for every HTTP request and response.
How:   Logs method, path, status and duration once the response is ready,
       with the request id from RequestIDMiddleware and, for requests the
       auth gate admitted, the subject id of the caller.
When:  Runs inside RequestIDMiddleware, so the id is already set.

What we log vs what we DON'T log:
    ✅ Log: method, path, status, duration, client IP, request ID, subject id
    ❌ Don't log: request bodies (user PII), the Authorization header, tokens
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from codevault.middleware.request_id import request_id_var

logger = logging.getLogger("codevault.access")

# Health probes run every few seconds; logging them drowns real traffic
QUIET_PATHS = frozenset({"/health"})


def _status_level(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Access log for the API.

    Level by status:
        5xx → ERROR, 4xx → WARNING, everything else → INFO
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)

        rid = request_id_var.get("")
        # Set by the auth gate; absent on open routes and rejected requests
        identity = getattr(request.state, "identity", None)
        subject = identity.subject_id if identity is not None else "-"
        client_ip = request.client.host if request.client else "unknown"

        logger.log(
            _status_level(response.status_code),
            "%s %s %d %.1fms [%s] subject=%s from %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            rid,
            subject,
            client_ip,
            extra={
                "request_id": rid,
                "subject_id": subject,
                "status": response.status_code,
                "duration_ms": elapsed_ms,
            },
        )
        return response
