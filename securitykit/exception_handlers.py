"""Exception handlers mapping security errors to JSON responses."""

from fastapi import Request
from fastapi.responses import JSONResponse

from securitykit.errors import HTMLSanitizerUnavailable, SecurityError
from securitykit.logging_config import log_error


async def sanitizer_unavailable_handler(
    request: Request, exc: HTMLSanitizerUnavailable
) -> JSONResponse:
    """Handle a missing HTML sanitizer: the request cannot be sanitized."""
    log_error(exc, request, context="xss_clean")

    return JSONResponse(
        status_code=500, content={"detail": "Content could not be sanitized"}
    )


async def security_error_handler(request: Request, exc: SecurityError) -> JSONResponse:
    """Handle other security errors as a bad request."""
    log_error(exc, request)

    return JSONResponse(status_code=400, content={"detail": str(exc)})
