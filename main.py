"""Main FastAPI application entry point.

Wires the securitykit filter chain into a FastAPI application: request paths
are cleaned by middleware, handlers get a request-scoped SecurityManager and
CSRF service through dependencies.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI

from securitykit.config import load_security_config
from securitykit.dependencies import get_csrf, get_security_manager
from securitykit.errors import HTMLSanitizerUnavailable, SecurityError
from securitykit.exception_handlers import sanitizer_unavailable_handler, security_error_handler
from securitykit.logging_config import get_logger
from securitykit.middleware import UriCleaningMiddleware
from securitykit.security.manager import OUTPUT_FILTER, SecurityManager
from securitykit.security.resolver import default_registry


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan context manager."""
    logger = get_logger()
    logger.info(f"Starting securitykit with filters: {app.state.filter_registry.names()}")
    yield
    logger.info("Shutting down securitykit")


def create_app(config: Optional[dict] = None) -> FastAPI:
    """Build the application with the given (or environment) security config."""
    app = FastAPI(
        title="securitykit",
        description="Input/output sanitization pipeline",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.security_config = config if config is not None else load_security_config()
    app.state.filter_registry = default_registry()

    app.add_middleware(UriCleaningMiddleware)

    app.add_exception_handler(HTMLSanitizerUnavailable, sanitizer_unavailable_handler)
    app.add_exception_handler(SecurityError, security_error_handler)

    @app.get("/health")
    def health_check():
        """Fast health check endpoint for load balancers and monitoring."""
        return {"status": "ok", "service": "securitykit"}

    @app.get("/echo")
    def echo(q: str = "", manager: SecurityManager = Depends(get_security_manager)):
        """Return ``q`` after the input filters and then the output filters."""
        cleaned = manager.clean(q)
        return {"value": manager.clean(cleaned, kind=OUTPUT_FILTER)}

    @app.get("/csrf-token")
    def csrf_token(csrf=Depends(get_csrf)):
        """Return the CSRF token for the caller's session."""
        return {"csrf_token": csrf.token()}

    return app


app = create_app()
