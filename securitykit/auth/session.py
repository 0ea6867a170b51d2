"""Session lookup for the CSRF service."""

from dataclasses import dataclass
from typing import Optional

from fastapi import Request

SESSION_COOKIE = "session_id"


@dataclass(frozen=True)
class Session:
    session_id: Optional[str] = None


def session_from_request(request: Request) -> Session:
    """Get the current session from the session cookie."""
    return Session(session_id=request.cookies.get(SESSION_COOKIE) or None)
