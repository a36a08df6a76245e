"""
API Middleware - Request/response processing

Middleware runs before and after each request.
Order matters: middleware registered first runs first for requests,
but runs last for responses (like a stack).
"""

from .error_handler import (
    DomainError,
    InvalidTimeZoneError,
    ReportSerializationError,
    register_exception_handlers,
)
from .request_logging import RequestMiddleware, register_request_middleware

__all__ = [
    "DomainError",
    "InvalidTimeZoneError",
    "ReportSerializationError",
    "register_exception_handlers",
    "RequestMiddleware",
    "register_request_middleware",
]
