"""Input/output sanitization pipeline for web applications."""

from securitykit.errors import FilterNotResolvable, HTMLSanitizerUnavailable, SecurityError
from securitykit.security.manager import SecurityManager
from securitykit.security.resolver import FilterRegistry, FilterResolver, default_registry

__all__ = [
    "SecurityManager",
    "FilterRegistry",
    "FilterResolver",
    "default_registry",
    "SecurityError",
    "FilterNotResolvable",
    "HTMLSanitizerUnavailable",
]
