"""CSRF protection for forms."""

from collections.abc import Mapping
import secrets
import threading
from typing import Any, Optional

DEFAULT_TOKEN_BYTES = 32

# In-memory storage for CSRF tokens (session_id -> csrf_token)
_csrf_tokens: dict[str, str] = {}
_csrf_lock = threading.Lock()


def generate_csrf_token(num_bytes: int = DEFAULT_TOKEN_BYTES) -> str:
    """Generate a cryptographically secure CSRF token.

    Returns:
        Hex string, 64 characters for the default 32 bytes
    """
    return secrets.token_hex(num_bytes)


class CsrfTokenService:
    """Per-session CSRF tokens, built by SecurityManager.csrf()."""

    def __init__(self, config: Mapping, session: Any):
        self.token_bytes = int(config.get("csrf_token_bytes", DEFAULT_TOKEN_BYTES))
        self.session = session

    @property
    def session_id(self) -> Optional[str]:
        return getattr(self.session, "session_id", None)

    def token(self) -> Optional[str]:
        """Get the CSRF token for the session, generating one if it doesn't exist.

        Returns:
            The CSRF token, or None if there is no session
        """
        session_id = self.session_id
        if session_id is None:
            return None

        with _csrf_lock:
            if session_id not in _csrf_tokens:
                _csrf_tokens[session_id] = generate_csrf_token(self.token_bytes)
            return _csrf_tokens[session_id]

    def validate(self, submitted_token: Optional[str]) -> bool:
        """Validate a submitted token against the session's stored token.

        Args:
            submitted_token: The token submitted with the form

        Returns:
            True if valid, False otherwise
        """
        session_id = self.session_id
        if session_id is None or submitted_token is None:
            return False

        stored_token = _csrf_tokens.get(session_id)
        if stored_token is None:
            return False

        # Use constant-time comparison to prevent timing attacks
        return secrets.compare_digest(stored_token, submitted_token)

    def rotate(self) -> Optional[str]:
        """Regenerate the session's token after an authentication state change."""
        session_id = self.session_id
        if session_id is None:
            return None

        new_token = generate_csrf_token(self.token_bytes)
        with _csrf_lock:
            _csrf_tokens[session_id] = new_token
        return new_token

    def delete(self) -> None:
        """Forget the session's token, called when a session is destroyed."""
        session_id = self.session_id
        if session_id is None:
            return
        with _csrf_lock:
            _csrf_tokens.pop(session_id, None)
