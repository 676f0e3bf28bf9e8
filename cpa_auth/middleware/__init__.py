"""Custom middleware components."""

from cpa_auth.middleware.logging import LoggingMiddleware
from cpa_auth.middleware.request_id import RequestIDMiddleware

__all__ = ["RequestIDMiddleware", "LoggingMiddleware"]
