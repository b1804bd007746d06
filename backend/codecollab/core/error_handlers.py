"""
Error types and FastAPI exception handlers.

Every error response has the same shape: a top-level
``error`` message plus any extra fields the raising code attached
(for example ``reason``/``canView``/``canEdit`` on edit denials).
"""
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from codecollab.core.config import get_settings


class APIError(Exception):
    """Custom API error class"""
    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = None,
        extra: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.extra = extra or {}
        super().__init__(message)


class NotFoundError(APIError):
    def __init__(self, message: str = "Not found"):
        super().__init__(message, status_code=404, error_code="NOT_FOUND")


class PermissionDeniedError(APIError):
    """Authorization failure; ``extra`` is merged into the response body"""
    def __init__(self, message: str = "Access denied", extra: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=403, error_code="PERMISSION_DENIED", extra=extra)


class AuthenticationError(APIError):
    def __init__(self, message: str = "Invalid token", error_code: str = "INVALID_TOKEN"):
        super().__init__(message, status_code=401, error_code=error_code)


class ValidationException(APIError):
    """Validation error"""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, error_code="VALIDATION_ERROR")
        self.details = details


def create_error_response(
    status_code: int,
    message: str,
    error_code: str = None,
    details: dict = None,
    extra: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None
) -> JSONResponse:
    """Create standardized error response"""
    settings = get_settings()

    content: Dict[str, Any] = {"error": message}
    if error_code:
        content["code"] = error_code
    if extra:
        content.update(extra)
    if details and settings.environment != "production":
        content["details"] = details

    return JSONResponse(status_code=status_code, content=content, headers=headers)


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Handle custom API errors"""
    if exc.status_code >= 500:
        logger.error(f"API Error: {exc.message} (Status: {exc.status_code})")
    else:
        logger.info(f"API Error: {exc.message} (Status: {exc.status_code}) {request.method} {request.url.path}")

    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return create_error_response(
        status_code=exc.status_code,
        message=exc.message,
        error_code=exc.error_code,
        details=getattr(exc, "details", None),
        extra=exc.extra,
        headers=headers
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle HTTP exceptions"""
    logger.warning(f"HTTP Exception: {exc.detail} (Status: {exc.status_code})")

    return create_error_response(
        status_code=exc.status_code,
        message=exc.detail or "An error occurred",
        headers=getattr(exc, "headers", None)
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request validation errors"""
    logger.warning(f"Validation Error: {exc.errors()}")

    formatted_errors = []
    for error in exc.errors():
        formatted_errors.append({
            "field": " -> ".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"]
        })

    return create_error_response(
        status_code=400,
        message="Validation failed",
        error_code="VALIDATION_ERROR",
        details={"validation_errors": formatted_errors}
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Handle database errors"""
    settings = get_settings()

    logger.error(f"Database Error: {str(exc)}")

    if isinstance(exc, OperationalError):
        message = "Database temporarily unavailable. Please try again later."
        error_code = "DB_CONNECTION_ERROR"
        status_code = 503
    elif isinstance(exc, IntegrityError):
        message = "Data integrity error. Please check your input."
        error_code = "DB_INTEGRITY_ERROR"
        status_code = 400
    else:
        message = "Database error occurred"
        error_code = "DB_ERROR"
        status_code = 500

    details = None
    if settings.environment == "development":
        details = {"database_error": str(exc)}

    return create_error_response(
        status_code=status_code,
        message=message,
        error_code=error_code,
        details=details
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle all other unhandled exceptions"""
    settings = get_settings()

    error_id = f"ERR_{datetime.now(timezone.utc).strftime('%Y%m%d_%H%M%S')}_{id(exc)}"

    logger.error(
        f"Unhandled Exception [{error_id}]: {str(exc)}\n"
        f"Request: {request.method} {request.url}\n"
        f"Traceback: {''.join(traceback.format_exception(type(exc), exc, exc.__traceback__))}"
    )

    details = None
    if settings.environment == "development":
        details = {
            "error_id": error_id,
            "exception_type": type(exc).__name__,
            "exception_message": str(exc)
        }

    return create_error_response(
        status_code=500,
        message="Something went wrong!",
        error_code="INTERNAL_ERROR",
        details=details
    )


def register_exception_handlers(app) -> None:
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, general_exception_handler)
