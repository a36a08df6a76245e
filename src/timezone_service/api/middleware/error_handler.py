"""
Error handling middleware for API

FastAPI lets us define custom handlers for specific exception types.
When an exception is raised anywhere in the request, FastAPI catches it
and calls the matching handler to build the response.

Every error leaves the service as a short plain-text body with a standard
status code. Internal details (exception types, tracebacks) only go to the log.

Handlers:
- Domain errors (invalid zone, serialization failure)
- Starlette HTTP errors (unknown path, method not allowed)
- Generic errors (unexpected problems)
"""

import json
import uuid
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from timezone_service.utils.logger import get_logger
from timezone_service.models.enums import LogCategory

log = get_logger().for_category(LogCategory.API)

INTERNAL_ERROR_MESSAGE = "internal server error"


class DomainError(Exception):
    """Base class for domain-specific errors"""
    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
        status_code: int = 400
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        self.status_code = status_code
        super().__init__(message)


class InvalidTimeZoneError(DomainError):
    """Zone name is not in the time-zone database"""
    def __init__(self, zone: str):
        super().__init__(
            code="INVALID_TIMEZONE",
            message=f"timezone: {json.dumps(zone, ensure_ascii=False)} is invalid",
            details={"zone": zone},
            status_code=404
        )
        self.zone = zone


class ReportSerializationError(DomainError):
    """Report could not be encoded as JSON"""
    def __init__(self, reason: str):
        super().__init__(
            code="SERIALIZATION_FAILED",
            message=INTERNAL_ERROR_MESSAGE,
            details={"reason": reason},
            status_code=500
        )


def _plain_text(status_code: int, message: str, headers: Optional[dict] = None) -> PlainTextResponse:
    return PlainTextResponse(f"{message}\n", status_code=status_code, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with FastAPI app"""

    @app.exception_handler(DomainError)
    async def domain_exception_handler(request: Request, exc: DomainError):
        """Handle domain-specific errors"""
        request_id = str(uuid.uuid4())

        log.warn(
            f"Domain error ({request_id}): {exc.code} - {exc.message}",
            path=request.url.path,
            **exc.details
        )

        return _plain_text(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Unknown routes (404) and unsupported methods (405)"""
        log.debug(
            f"HTTP {exc.status_code} for {request.method} {request.url.path}",
            detail=exc.detail
        )

        return _plain_text(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected errors"""
        request_id = str(uuid.uuid4())

        log.error(
            f"Unexpected error ({request_id}): {type(exc).__name__}: {str(exc)}",
            path=request.url.path
        )

        return _plain_text(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)
