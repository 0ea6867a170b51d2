"""Exception types raised by the sanitization pipeline."""


class SecurityError(Exception):
    """Base class for securitykit errors."""


class FilterNotResolvable(SecurityError, LookupError):
    """Raised by a filter resolver when no handler exists for a name.

    The dispatcher treats this as an expected condition: the name is recorded
    as a miss and used as a raw character class from then on.
    """

    def __init__(self, name: str):
        super().__init__(f"No filter registered under '{name}'")
        self.name = name


class HTMLSanitizerUnavailable(SecurityError, RuntimeError):
    """Raised when XSS cleaning is requested but bleach cannot be imported."""
