"""
Custom exceptions and error handlers for consistent error responses.

Provides standardized error codes and global exception handlers.
"""

import logging

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from typing import Any, Dict, Optional

from backend.app.core.observability import get_correlation_id

logger = logging.getLogger(__name__)


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, error_code: str, status_code: int = 500, details: Dict[str, Any] = None):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class ValidationError(AppException):
    """Raised for missing or malformed input, including unknown status values."""

    def __init__(self, message: str = "Validation error", details: Dict[str, Any] = None):
        super().__init__(
            message=message,
            error_code="ERR_VALIDATION",
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details
        )


class InvalidStatusTransitionError(ValidationError):
    """Raised when a status change is not allowed by the trip request lifecycle."""

    def __init__(self, current: str, target: str):
        super().__init__(
            message=f"Cannot change status from '{current}' to '{target}'",
            details={"current": current, "requested": target}
        )


class ForbiddenError(AppException):
    """Raised when user doesn't have permission to perform an action."""

    def __init__(self, message: str = "Access denied", details: Dict[str, Any] = None):
        super().__init__(
            message=message,
            error_code="ERR_PERM_001",
            status_code=status.HTTP_403_FORBIDDEN,
            details=details
        )


class ResourceNotFoundError(AppException):
    """Raised when requested resource is not found."""

    def __init__(self, resource: str, resource_id: Any = None):
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} with ID {resource_id} not found"
        super().__init__(
            message=message,
            error_code="ERR_NOT_FOUND_001",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource": resource, "id": resource_id}
        )


class AuthenticationError(AppException):
    """Raised for authentication failures."""

    def __init__(self, message: str = "Authentication failed", error_code: str = "ERR_AUTH_001"):
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=status.HTTP_401_UNAUTHORIZED
        )


class InvalidTokenError(AuthenticationError):
    """Raised when a token signature, format or payload is invalid."""

    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(message=message, error_code="ERR_AUTH_002")


class ExpiredTokenError(AuthenticationError):
    """Raised when a token is past its expiry."""

    def __init__(self):
        super().__init__(message="Token has expired", error_code="ERR_AUTH_003")


class TokenRevokedError(AuthenticationError):
    """Raised when token has been revoked."""

    def __init__(self):
        super().__init__(message="Token has been revoked", error_code="ERR_AUTH_004")


class ConfigurationError(AppException):
    """
    Raised when a required setting is missing.

    Only used inside the email notifier, where it is recorded in the
    delivery result and never rendered to an HTTP caller.
    """

    def __init__(self, message: str, setting: Optional[str] = None):
        super().__init__(
            message=message,
            error_code="ERR_CONFIG_001",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details={"setting": setting} if setting else None
        )


# Global Exception Handlers

async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handler for custom application exceptions."""
    headers = None
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": exc.error_code,
            "message": exc.message,
            "details": exc.details
        },
        headers=headers
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handler for FastAPI HTTPException with standardized format."""
    # Map status code to error code
    error_code_map = {
        400: "ERR_BAD_REQUEST",
        401: "ERR_UNAUTHORIZED",
        403: "ERR_FORBIDDEN",
        404: "ERR_NOT_FOUND",
        405: "ERR_METHOD_NOT_ALLOWED",
        500: "ERR_INTERNAL_SERVER"
    }

    error_code = error_code_map.get(exc.status_code, "ERR_UNKNOWN")

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": error_code,
            "message": exc.detail,
            "details": {}
        },
        headers=getattr(exc, "headers", None)
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handler for Pydantic validation errors. Bad input is a 400."""
    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "msg": error.get("msg"),
            "type": error.get("type"),
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=jsonable_encoder({
            "error_code": "ERR_VALIDATION",
            "message": errors[0]["msg"] if errors else "Validation error",
            "details": {
                "errors": errors
            }
        })
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handler for unhandled exceptions."""
    correlation_id = get_correlation_id(request)
    logger.exception("[%s] Unhandled exception on %s %s", correlation_id, request.method, request.url.path)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error_code": "ERR_INTERNAL_SERVER",
            "message": "An internal server error occurred",
            "details": {"correlation_id": correlation_id}
        }
    )
