"""
Custom middleware and the shared rate limiter.
"""

import time
import uuid
from collections.abc import Callable

from fastapi import Request, Response
from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.middleware.base import BaseHTTPMiddleware

from crm_api.config import get_app_settings
from crm_api.utils.logger import logger

REQUEST_ID_HEADER = "X-Request-ID"

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "camera=(), microphone=(), geolocation=()",
}

# Limits are resolved lazily so tests can swap settings after import
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[lambda: get_app_settings().rate_limit_default],
    storage_uri=get_app_settings().rate_limit_storage_uri,
)


def auth_rate_limit() -> str:
    return get_app_settings().rate_limit_auth


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Assign a request id, time the request and log its outcome."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception(
                "Request failed",
                method=request.method,
                path=request.url.path,
                request_id=request_id,
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
                error=str(e),
            )
            raise

        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info(
            "Request completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            request_id=request_id,
            duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            client=request.client.host if request.client else "unknown",
        )
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add conservative security headers to every response."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response
