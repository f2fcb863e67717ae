"""Middleware package."""

from pulseboard.middleware.logging import LoggingMiddleware
from pulseboard.middleware.request_id import RequestIDMiddleware

__all__ = ["LoggingMiddleware", "RequestIDMiddleware"]
