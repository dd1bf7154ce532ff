"""
Request/response logging middleware.

Each request gets a short request id and a LoggerAdapter carrying it. The
adapter is stored on request.state and handed to handlers through the
`get_request_logger` dependency.
"""

from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import ClientDisconnect
import logging
import time
import uuid

logger = logging.getLogger("realestate.requests")

# Non-standard status used when the client went away mid-request
CLIENT_CLOSED_REQUEST = 499


class RequestLoggerAdapter(logging.LoggerAdapter):
    """Prefixes every message with the request id."""

    def process(self, msg, kwargs):
        kwargs.setdefault("extra", {}).update(self.extra)
        return f"[{self.extra['request_id']}] {msg}", kwargs


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs every request and response with timing."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = str(uuid.uuid4())[:8]
        request_logger = RequestLoggerAdapter(logger, {"request_id": request_id})
        request.state.request_id = request_id
        request.state.logger = request_logger

        start_time = time.perf_counter()
        request_logger.info(f"Request: [{request.method}] {request.url.path}")

        try:
            response = await call_next(request)
        except ClientDisconnect:
            request_logger.info(f"Client disconnected: [{request.method}] {request.url.path}")
            return Response(status_code=CLIENT_CLOSED_REQUEST)

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Processing-Time"] = f"{elapsed_ms:.2f}ms"

        request_logger.info(
            f"Response: [{request.method}] {request.url.path} => {response.status_code} ({elapsed_ms:.2f}ms)"
        )
        return response


def get_request_logger(request: Request) -> logging.LoggerAdapter:
    """Dependency returning the current request's logger."""
    request_logger = getattr(request.state, "logger", None)
    if request_logger is None:
        request_logger = RequestLoggerAdapter(logger, {"request_id": "-"})
    return request_logger
