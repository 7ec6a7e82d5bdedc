"""
Global error handling for the FastAPI application.
Catches and formats all exceptions consistently.
"""

import logging
import traceback
from typing import Any, Dict
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError

from timeclock.config import settings
from timeclock.domain.models.base import DomainException

logger = logging.getLogger(__name__)


# Domain error code -> (HTTP status, error title)
DOMAIN_ERROR_STATUS: Dict[str, tuple] = {
    "INVALID_INPUT": (status.HTTP_400_BAD_REQUEST, "Bad Request"),
    "NOT_FOUND": (status.HTTP_404_NOT_FOUND, "Not Found"),
    "DUPLICATE_ENTRY": (status.HTTP_409_CONFLICT, "Conflict"),
    "EXIT_ALREADY_REGISTERED": (status.HTTP_409_CONFLICT, "Conflict"),
    "UNIQUE_CONSTRAINT": (status.HTTP_409_CONFLICT, "Conflict"),
    "UNRESOLVED": (status.HTTP_422_UNPROCESSABLE_ENTITY, "Unprocessable Entity"),
    "STORAGE_ERROR": (status.HTTP_503_SERVICE_UNAVAILABLE, "Service Unavailable"),
}


def domain_error_response(exc: DomainException) -> Dict[str, Any]:
    """Format a domain exception into the error response structure."""
    status_code, error = DOMAIN_ERROR_STATUS.get(
        exc.code, (status.HTTP_400_BAD_REQUEST, "Bad Request")
    )
    body = {
        "error": error,
        "message": exc.message,
        "code": exc.code,
        "status_code": status_code,
    }
    field = getattr(exc, "field", None)
    if field:
        body["field"] = field
    return body


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    """
    Translate domain errors raised by use cases into HTTP responses.
    """
    body = domain_error_response(exc)
    if body["status_code"] >= 500:
        logger.error(
            f"Domain failure: {exc.code}: {exc.message}",
            extra={"request_path": request.url.path, "request_method": request.method}
        )
    return JSONResponse(status_code=body["status_code"], content=body)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Report malformed request payloads as invalid input.
    """
    body = {
        "error": "Bad Request",
        "message": "Request validation failed",
        "code": "INVALID_INPUT",
        "status_code": status.HTTP_400_BAD_REQUEST,
        "details": jsonable_encoder(exc.errors()),
    }
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Middleware to handle all uncaught exceptions and format error responses.
    """

    async def dispatch(self, request: Request, call_next):
        """
        Process the request and handle any exceptions.
        """
        try:
            response = await call_next(request)
            return response
        except Exception as exc:
            return await self.handle_exception(request, exc)

    async def handle_exception(self, request: Request, exc: Exception) -> JSONResponse:
        """
        Handle different types of exceptions and return appropriate responses.
        """
        # Log the full exception with traceback
        logger.error(
            f"Unhandled exception: {type(exc).__name__}: {str(exc)}",
            exc_info=True,
            extra={
                "request_path": request.url.path,
                "request_method": request.method,
                "client_host": request.client.host if request.client else None
            }
        )

        if isinstance(exc, DomainException):
            error_response = domain_error_response(exc)
        else:
            error_response = {
                "error": "Internal Server Error",
                "message": "An unexpected error occurred",
                "status_code": status.HTTP_500_INTERNAL_SERVER_ERROR
            }

        # In development, add more debug information
        if settings.debug:
            error_response["debug"] = {
                "exception_type": type(exc).__name__,
                "traceback": traceback.format_exc().split("\n")
            }

        return JSONResponse(
            status_code=error_response["status_code"],
            content=error_response
        )
