import logging

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from dust_gold.config import get_settings
from dust_gold.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)


class AppException(HTTPException):
    """Base API error. Rendered as {"error": <code>, "detail": <message>}."""

    status_code = 500
    error = "internal_error"
    default_detail = "Internal Server Error"

    def __init__(self, detail: str | None = None):
        super().__init__(status_code=self.status_code, detail=detail or self.default_detail)


class UnauthorizedException(AppException):
    """Missing or invalid caller identity."""
    status_code = 401
    error = "unauthorized"
    default_detail = "Unauthorized"

    def __init__(self, detail: str | None = None):
        super().__init__(detail)
        self.headers = {"WWW-Authenticate": "Bearer"}


class ForbiddenException(AppException):
    """Authenticated, but not allowed to touch the resource."""
    status_code = 403
    error = "forbidden"
    default_detail = "You do not have permission to perform this action"


class NotFoundException(AppException):
    status_code = 404
    error = "not_found"
    default_detail = "Not found"


class ValidationException(AppException):
    """Malformed submission, username or provider id."""
    status_code = 400
    error = "validation_error"
    default_detail = "Invalid request"


class UpstreamException(AppException):
    """Third-party provider failure or no results."""
    status_code = 502
    error = "upstream_error"
    default_detail = "Provider request failed"


class InternalException(AppException):
    status_code = 500
    error = "internal_error"
    default_detail = "Internal Server Error"


def _error_response(status_code: int, error: str, detail: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, detail=detail).model_dump(),
        headers=headers,
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    return _error_response(exc.status_code, exc.error, exc.detail, exc.headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report the first pydantic error as a validation_error."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = first.get("msg", "Invalid request")
        detail = f"{field}: {message}" if field else message
    else:
        detail = ValidationException.default_detail
    return _error_response(400, ValidationException.error, detail)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unexpected failures (store errors included)."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    detail = str(exc) if get_settings().debug else InternalException.default_detail
    return _error_response(500, InternalException.error, detail)


def register_exception_handlers(app) -> None:
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
