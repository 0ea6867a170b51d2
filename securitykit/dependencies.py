"""FastAPI dependencies providing a request-scoped SecurityManager and CSRF service."""

from fastapi import Depends, Request

from securitykit.auth.session import session_from_request
from securitykit.config import load_security_config
from securitykit.security.manager import SecurityManager
from securitykit.security.resolver import default_registry


def get_security_manager(request: Request) -> SecurityManager:
    """Get the request-scoped security manager.

    The filter registry and config are shared through ``app.state``; the
    manager itself lives for one request so its CSRF service is bound to the
    request's session.
    """
    manager = getattr(request.state, "security", None)
    if manager is not None:
        return manager

    app_state = request.app.state
    config = getattr(app_state, "security_config", None)
    if config is None:
        config = load_security_config()
    registry = getattr(app_state, "filter_registry", None)
    if registry is None:
        registry = default_registry()

    manager = SecurityManager(
        config,
        resolver=registry,
        session_provider=lambda: session_from_request(request),
    )
    request.state.security = manager
    return manager


def get_csrf(manager: SecurityManager = Depends(get_security_manager)):
    """Get the CSRF service for the current request's session."""
    return manager.csrf()
