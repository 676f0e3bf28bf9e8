"""Logging middleware for request/response tracking."""

import time
from urllib.parse import parse_qsl, urlencode

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from cpa_auth.core.logging import SECRET_KEYS, get_logger

logger = get_logger(__name__)


def redact_query(query: str) -> str | None:
    """Mask credential-bearing query parameters such as ``code``."""
    if not query:
        return None
    pairs = [
        (key, "***" if key in SECRET_KEYS else value)
        for key, value in parse_qsl(query, keep_blank_values=True)
    ]
    return urlencode(pairs, safe="*")


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log incoming requests and outgoing responses with structured logging."""

    async def dispatch(self, request: Request, call_next):
        """
        Log request details and response status with timing information.

        Logs include:
        - Request method and path
        - Request ID (automatically included via context from RequestIDMiddleware)
        - Client host
        - Query parameters, with codes and tokens masked
        - Response status code
        - Request duration in milliseconds
        """
        start_time = time.time()

        # request_id is automatically included from context
        logger.info(
            "incoming_request",
            method=request.method,
            path=str(request.url.path),
            client_host=request.client.host if request.client else None,
            query_params=redact_query(request.url.query),
        )

        response: Response = await call_next(request)

        duration_ms = (time.time() - start_time) * 1000

        logger.info(
            "request_completed",
            method=request.method,
            path=str(request.url.path),
            status_code=response.status_code,
            duration_ms=round(duration_ms, 2),
        )

        return response
