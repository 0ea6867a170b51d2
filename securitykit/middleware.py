"""Middleware for cleaning request URIs before routing."""

from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from securitykit.dependencies import get_security_manager
from securitykit.logging_config import log_uri_rewrite

SKIPPED_PATHS = ("/health",)


class UriCleaningMiddleware(BaseHTTPMiddleware):
    """Middleware to run every request path through the uri_filter chain."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Clean the request path and process the request.

        Args:
            request: The incoming HTTP request
            call_next: The next middleware/route handler

        Returns:
            The HTTP response
        """
        path = request.url.path
        if path in SKIPPED_PATHS:
            return await call_next(request)

        manager = get_security_manager(request)
        cleaned = manager.clean_uri(path)

        if cleaned != path:
            log_uri_rewrite(request, path, cleaned)
            request.scope["path"] = cleaned
            request.scope["raw_path"] = cleaned.encode("utf-8")

        return await call_next(request)
