"""
Error handling service for consistent envelope formatting and logging.
Every failure leaves the API as {success, statusCode, message, data, meta, errors}.
"""

from typing import Any, Dict, List, Optional
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import DisconnectionError, IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from realestate.utils.exceptions import APIException
import logging

logger = logging.getLogger(__name__)

# Store failures that mean "cannot reach the database" rather than "bad query"
CONNECTIVITY_ERRORS = (OperationalError, DisconnectionError, PoolTimeoutError)


def _request_id(request: Optional[Request]) -> Optional[str]:
    if request is None:
        return None
    return getattr(request.state, "request_id", None)


def _path(request: Optional[Request]) -> Optional[str]:
    return request.url.path if request is not None else None


class ErrorHandlerService:
    """
    Converts exceptions into response envelopes with appropriate logging.
    Internal details are logged, never returned.
    """

    @staticmethod
    def format_envelope(
        status_code: int,
        message: str,
        errors: Optional[List[str]] = None,
        data: Any = None,
    ) -> Dict[str, Any]:
        """
        Build the response envelope.

        Args:
            status_code: HTTP status code
            message: Human-readable message
            errors: Optional list of detailed messages
            data: Optional payload

        Returns:
            Envelope dictionary using wire (camelCase) names
        """
        return {
            "success": 200 <= status_code < 300,
            "statusCode": status_code,
            "message": message,
            "data": data,
            "meta": None,
            "errors": list(errors or []),
        }

    @staticmethod
    def handle_api_exception(
        exception: APIException,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """Handle the application's typed exceptions."""
        logger.warning(
            f"API Exception [{_request_id(request)}]: {exception.error_code} - {exception.detail}",
            extra={
                "error_code": exception.error_code,
                "status_code": exception.status_code,
                "path": _path(request),
            }
        )

        return JSONResponse(
            status_code=exception.status_code,
            content=ErrorHandlerService.format_envelope(
                exception.status_code, exception.detail, exception.errors
            ),
            headers=exception.headers
        )

    @staticmethod
    def handle_validation_error(
        exception: RequestValidationError,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """
        Handle request body/query validation errors as a 400 listing
        `field: message` entries.
        """
        errors = []
        for error in exception.errors():
            location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
            field = ".".join(location)
            errors.append(f"{field}: {error['msg']}" if field else error["msg"])

        logger.warning(
            f"Validation Error [{_request_id(request)}]: {len(errors)} field errors",
            extra={"path": _path(request), "validation_errors": errors}
        )

        return JSONResponse(
            status_code=400,
            content=ErrorHandlerService.format_envelope(400, "Request validation failed", errors)
        )

    @staticmethod
    def handle_database_error(
        exception: SQLAlchemyError,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """
        Map store errors: connectivity problems to 503, integrity violations
        to 409, anything else to 500.
        """
        if isinstance(exception, IntegrityError):
            status_code, message = 409, "Data integrity constraint violation"
        elif isinstance(exception, CONNECTIVITY_ERRORS):
            status_code, message = 503, "Data store unavailable"
        else:
            status_code, message = 500, "Database operation failed"

        logger.error(
            f"Database Error [{_request_id(request)}]: {type(exception).__name__} - {exception}",
            extra={"path": _path(request), "status_code": status_code},
            exc_info=True
        )

        return JSONResponse(
            status_code=status_code,
            content=ErrorHandlerService.format_envelope(status_code, message)
        )

    @staticmethod
    def handle_http_exception(
        exception: StarletteHTTPException,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """Handle framework HTTP errors such as unknown routes."""
        logger.warning(
            f"HTTP Exception [{_request_id(request)}]: {exception.status_code} - {exception.detail}",
            extra={"status_code": exception.status_code, "path": _path(request)}
        )

        return JSONResponse(
            status_code=exception.status_code,
            content=ErrorHandlerService.format_envelope(exception.status_code, str(exception.detail)),
            headers=getattr(exception, "headers", None)
        )

    @staticmethod
    def handle_unexpected_error(
        exception: Exception,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """Handle anything else with a generic 500."""
        logger.error(
            f"Unexpected Error [{_request_id(request)}]: {type(exception).__name__} - {exception}",
            extra={"path": _path(request), "exception_type": type(exception).__name__},
            exc_info=exception
        )

        return JSONResponse(
            status_code=500,
            content=ErrorHandlerService.format_envelope(500, "An unexpected error occurred")
        )
