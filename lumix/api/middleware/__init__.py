"""API middleware."""

from lumix.api.middleware.error_handler import ErrorHandlerMiddleware
from lumix.api.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware", "ErrorHandlerMiddleware"]
