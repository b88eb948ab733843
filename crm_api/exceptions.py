"""Error hierarchy shared by services, repositories and routers.

Every error carries the HTTP status it maps to; the handlers installed by
``register_exception_handlers`` turn them into ``{"success": false, "message"}``.
"""

from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from crm_api.utils.logger import logger


class CRMAPIError(Exception):
    """Base exception for all API errors."""

    status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        """Initialize CRMAPIError.

        Args:
            message: Client-facing error message
        """
        self.message = message or self.default_message
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"{self.__class__.__name__} ({int(self.status_code)}): {self.message}"


class ValidationError(CRMAPIError):
    """Malformed or out-of-range input (400)."""

    status_code = HTTPStatus.BAD_REQUEST
    default_message = "Validation failed"


class AuthError(CRMAPIError):
    """Missing, invalid or revoked credentials (401)."""

    status_code = HTTPStatus.UNAUTHORIZED
    default_message = "Authentication failed"


class ForbiddenError(CRMAPIError):
    """Authenticated but not allowed to perform the action (403)."""

    status_code = HTTPStatus.FORBIDDEN
    default_message = "Insufficient permissions"


class NotFoundError(CRMAPIError):
    """Resource absent within the caller's tenant (404)."""

    status_code = HTTPStatus.NOT_FOUND
    default_message = "Resource not found"


class ConflictError(CRMAPIError):
    """Uniqueness violation (409)."""

    status_code = HTTPStatus.CONFLICT
    default_message = "Resource already exists"


class InternalError(CRMAPIError):
    """Unexpected failure (500)."""


def _error_response(status_code: int, message: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=int(status_code),
        content={"success": False, "message": message},
        headers=headers,
    )


async def crm_api_error_handler(request: Request, exc: CRMAPIError) -> JSONResponse:
    if exc.status_code >= HTTPStatus.INTERNAL_SERVER_ERROR:
        logger.exception(
            "Request failed", path=request.url.path, method=request.method, error=str(exc)
        )
    else:
        logger.info(
            "Request rejected",
            path=request.url.path,
            method=request.method,
            status_code=int(exc.status_code),
            error=exc.message,
        )
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthError) else None
    return _error_response(exc.status_code, exc.message, headers)


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        text = error.get("msg", "Invalid value")
        messages.append(f"{location}: {text}" if location else text)
    message = "; ".join(messages) or ValidationError.default_message
    logger.info("Request validation failed", path=request.url.path, error=message)
    return _error_response(HTTPStatus.BAD_REQUEST, message)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else HTTPStatus(exc.status_code).phrase
    return _error_response(exc.status_code, message, getattr(exc, "headers", None))


async def rate_limit_exceeded_handler(
    request: Request, exc: RateLimitExceeded
) -> JSONResponse:
    logger.warning(
        "Rate limit exceeded", path=request.url.path, limit=str(exc.detail)
    )
    return _error_response(
        HTTPStatus.TOO_MANY_REQUESTS,
        "Too many requests, please try again later",
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled error", path=request.url.path, method=request.method, error=str(exc)
    )
    return _error_response(HTTPStatus.INTERNAL_SERVER_ERROR, InternalError.default_message)


def register_exception_handlers(app: FastAPI) -> None:
    """Install the centralized error handlers on the application."""
    app.add_exception_handler(CRMAPIError, crm_api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
