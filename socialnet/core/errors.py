"""
Error handling configuration

Custom exception classes and exception handlers for FastAPI.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from socialnet.core.logging import get_logger

logger = get_logger(__name__)


class AppError(Exception):
    """Base exception class for application errors"""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.code = code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(AppError):
    """Resource not found error"""

    def __init__(self, message: str = "Resource not found", details: Optional[Dict] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            code="NOT_FOUND",
            details=details,
        )


class ValidationError(AppError):
    """Data validation error"""

    def __init__(self, message: str = "Validation error", details: Optional[Dict] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            code="VALIDATION_ERROR",
            details=details,
        )


class AuthenticationError(AppError):
    """Authentication failed"""

    def __init__(self, message: str = "Authentication failed", details: Optional[Dict] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            code="AUTHENTICATION_FAILED",
            details=details,
        )


class ConflictError(AppError):
    """Resource already exists"""

    def __init__(self, message: str = "Conflict", details: Optional[Dict] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_409_CONFLICT,
            code="CONFLICT",
            details=details,
        )


# ============ Friend relationship errors ============

class InvalidTargetError(AppError):
    """A user tried to befriend themselves"""

    def __init__(self, message: str = "You cannot send a friend request to yourself.", details: Optional[Dict] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            code="INVALID_TARGET",
            details=details,
        )


class AlreadyFriendsError(AppError):
    def __init__(self, message: str = "You are already friends.", details: Optional[Dict] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_409_CONFLICT,
            code="ALREADY_FRIENDS",
            details=details,
        )


class DuplicatePendingError(AppError):
    """A pending request already exists between the pair, in either direction"""

    def __init__(self, message: str = "A friend request is already pending.", details: Optional[Dict] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_409_CONFLICT,
            code="DUPLICATE_PENDING",
            details=details,
        )


class RequestNotFoundError(NotFoundError):
    def __init__(self, message: str = "Friend request not found.", details: Optional[Dict] = None):
        super().__init__(message=message, details=details)


class UserNotFoundError(NotFoundError):
    def __init__(self, message: str = "User not found.", details: Optional[Dict] = None):
        super().__init__(message=message, details=details)
        self.code = "USER_NOT_FOUND"


class NotAuthorizedError(AppError):
    """Only the recipient of a request may respond to it"""

    def __init__(self, message: str = "You are not authorized to respond to this request.", details: Optional[Dict] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            code="NOT_AUTHORIZED",
            details=details,
        )


class AlreadyResolvedError(AppError):
    def __init__(self, message: str = "Friend request is already resolved.", details: Optional[Dict] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_409_CONFLICT,
            code="ALREADY_RESOLVED",
            details=details,
        )


class NotFriendsError(AppError):
    def __init__(self, message: str = "You are not friends with this user.", details: Optional[Dict] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            code="NOT_FRIENDS",
            details=details,
        )


class IdentityStoreUnavailableError(AppError):
    """Transient failure looking up users; callers may retry"""

    def __init__(self, message: str = "Identity store is unavailable. Please retry.", details: Optional[Dict] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            code="IDENTITY_STORE_UNAVAILABLE",
            details=details,
        )


# ============ Handlers ============

async def app_exception_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle custom application exceptions"""
    log = logger.error if exc.status_code >= 500 else logger.info
    log(
        f"App error: {exc.message}",
        error_code=exc.code,
        status_code=exc.status_code,
        details=exc.details,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "code": exc.code,
                "message": exc.message,
                "details": exc.details,
            }
        },
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle standard FastAPI HTTP exceptions"""
    logger.warning(
        f"HTTP error: {exc.detail}",
        status_code=exc.status_code,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "code": "HTTP_ERROR",
                "message": str(exc.detail),
            }
        },
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle Pydantic validation errors"""
    errors = exc.errors()
    logger.warning(
        "Validation error",
        error_count=len(errors),
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "Request validation failed",
                "details": {"errors": jsonable_encoder(errors)},
            }
        },
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unhandled exceptions"""
    logger.exception(
        "Unhandled exception",
        error=str(exc),
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "code": "INTERNAL_SERVER_ERROR",
                "message": "An unexpected error occurred",
            }
        },
    )
