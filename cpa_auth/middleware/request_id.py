"""Request ID middleware for tracking requests."""

import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Middleware to attach a request ID to each request."""

    async def dispatch(self, request: Request, call_next):
        """
        Attach a request ID to the request, its logs and its response.

        The request ID is:
        - Taken from an incoming X-Request-ID header, or generated as a UUID4
        - Stored in request.state for access in route handlers
        - Bound to structlog context for automatic inclusion in all logs
        - Added to response headers as X-Request-ID
        """
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())

        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        try:
            response: Response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            structlog.contextvars.clear_contextvars()
