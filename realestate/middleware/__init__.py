"""
Middleware package.
"""

from realestate.middleware.request_logging import RequestLoggingMiddleware, get_request_logger

__all__ = ["RequestLoggingMiddleware", "get_request_logger"]
