# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the weather proxy.
#
# Every error leaves the API as:
#   {"error": "<title>", "code": "<MACHINE_CODE>", "message": "<text>"}
#
# Messages are generic on purpose where the upstream is involved: provider
# error text is logged, never forwarded.
# =============================================================================

import logging
from http import HTTPStatus
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class SkyCastException(Exception):
    """
    Base exception for the SkyCast API.

    All proxy errors inherit from this class and carry the HTTP status they
    map to.
    """

    def __init__(
        self,
        message: str,
        code: str = "SKYCAST_ERROR",
        status_code: int = 500,
        error: str = "Internal Server Error",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.error = error
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        return {
            "error": self.error,
            "code": self.code,
            "message": self.message,
        }


# =============================================================================
# Request Exceptions
# =============================================================================

class BadRequestError(SkyCastException):
    """Raised when the city parameter is missing or blank."""

    def __init__(self, message: str = "City parameter is required and must be a non-empty string"):
        super().__init__(
            message=message,
            code="BAD_REQUEST",
            status_code=400,
            error="Bad Request",
        )


class MethodNotAllowedError(SkyCastException):
    """Raised for any method other than GET on a proxy route."""

    def __init__(self, method: str | None = None):
        super().__init__(
            message="Method not allowed",
            code="METHOD_NOT_ALLOWED",
            status_code=405,
            error="Method Not Allowed",
            details={"method": method} if method else None,
        )


# =============================================================================
# Server Exceptions
# =============================================================================

class ServerMisconfiguredError(SkyCastException):
    """Raised when the provider API key is not configured."""

    def __init__(self):
        super().__init__(
            message="Weather API key is not configured",
            code="SERVER_MISCONFIGURED",
            status_code=500,
            error="Server Configuration Error",
        )


class InternalError(SkyCastException):
    """Raised on network, timeout or parse failures talking to the provider."""

    def __init__(self, reason: str | None = None):
        super().__init__(
            message="An unexpected error occurred. Please try again later.",
            code="INTERNAL_ERROR",
            status_code=500,
            error="Internal Server Error",
            details={"reason": reason} if reason else None,
        )


# =============================================================================
# Upstream Exceptions
# =============================================================================

class CityNotFoundError(SkyCastException):
    """Raised when the provider has no data for the requested city."""

    def __init__(self, city: str):
        super().__init__(
            message=(
                f'Could not find weather data for "{city}". '
                "Please check the city name and try again."
            ),
            code="CITY_NOT_FOUND",
            status_code=404,
            error="City Not Found",
            details={"city": city},
        )


class RateLimitedError(SkyCastException):
    """Raised when the provider answers 429."""

    def __init__(self):
        super().__init__(
            message="Too many requests. Please try again later.",
            code="RATE_LIMITED",
            status_code=429,
            error="Rate Limit Exceeded",
        )


class UpstreamError(SkyCastException):
    """Raised for any other non-2xx provider status; the status is kept."""

    def __init__(self, upstream_status: int):
        super().__init__(
            message="Failed to fetch weather data. Please try again later.",
            code="UPSTREAM_ERROR",
            status_code=upstream_status,
            error="Weather API Error",
            details={"upstream_status": upstream_status},
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def skycast_exception_handler(
    request: Request,
    exc: SkyCastException
) -> JSONResponse:
    """
    Convert SkyCastException to JSON response.

    Returns structured error with:
    - error: Short title
    - code: Machine-readable error code
    - message: Human-readable message, safe to show to end users
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException
) -> JSONResponse:
    """
    Render framework HTTP errors (404 route, 405 method) in the same shape.
    """
    if exc.status_code == 405:
        body = MethodNotAllowedError(request.method).to_dict()
    else:
        try:
            title = HTTPStatus(exc.status_code).phrase
        except ValueError:
            title = "Error"
        body = {
            "error": title,
            "code": title.upper().replace(" ", "_"),
            "message": str(exc.detail),
        }
    return JSONResponse(
        status_code=exc.status_code,
        content=body,
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Last resort: log and answer with a generic 500."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content=InternalError().to_dict(),
    )
