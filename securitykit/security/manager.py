"""Security manager: configurable input/output filter chains.

The manager owns the filter configuration, resolves filter names to handlers
through an injected resolver and applies them in order to arbitrary values.
Resolved handles are cached for the lifetime of the manager; names that fail
to resolve are recorded as misses and never looked up again, falling back to
being used as a regex character class.
"""

from collections.abc import Mapping
import re
import threading
from types import MappingProxyType
from typing import Any, Callable, Optional

from securitykit.auth.csrf import CsrfTokenService
from securitykit.errors import FilterNotResolvable, HTMLSanitizerUnavailable
from securitykit.logging_config import get_logger, log_filter_miss, log_filter_resolved
from securitykit.security.filters import (
    FilterHandle,
    RawPattern,
    classify_handle,
    map_leaves,
    strip_unsafe,
)
from securitykit.security.resolver import FilterResolver, default_registry

URI_FILTER = "uri_filter"
INPUT_FILTER = "input_filter"
OUTPUT_FILTER = "output_filter"
FILTER_KINDS = (URI_FILTER, INPUT_FILTER, OUTPUT_FILTER)

DOT_SEGMENT_PATTERN = re.compile(r"\.+/")
REPEATED_SLASH_PATTERN = re.compile(r"/+")


def _strictly_equal(left: Any, right: Any) -> bool:
    """Compare type and value at every level; dicts must also match key order."""
    if type(left) is not type(right):
        return False
    if isinstance(left, dict):
        return len(left) == len(right) and all(
            _strictly_equal(lk, rk) and _strictly_equal(lv, rv)
            for (lk, lv), (rk, rv) in zip(left.items(), right.items())
        )
    if isinstance(left, (list, tuple)):
        return len(left) == len(right) and all(
            _strictly_equal(li, ri) for li, ri in zip(left, right)
        )
    return left == right


def _as_filter_list(filters: Any) -> list:
    if isinstance(filters, (list, tuple)):
        return list(filters)
    return [filters]


class SecurityManager:
    """Container for the filter chain, the cleaned ledger and the CSRF service."""

    def __init__(
        self,
        config: Optional[Mapping] = None,
        resolver: Optional[FilterResolver] = None,
        session_provider: Optional[Callable[[], Any]] = None,
        csrf_factory: Optional[Callable[[Mapping, Any], Any]] = None,
        html_sanitizer: Optional[Callable[..., str]] = None,
    ):
        """Create a manager.

        Args:
            config: Filter configuration; ``uri_filter``, ``input_filter`` and
                ``output_filter`` default to empty lists.
            resolver: Resolves filter names; defaults to the built-in registry.
            session_provider: Returns the current session for the CSRF service.
            csrf_factory: Builds the CSRF service from (config, session).
            html_sanitizer: ``sanitize(html, safe=..., balanced=...)`` used by
                ``xss_clean``; the bleach backend is loaded on first use if omitted.
        """
        self._config = dict(config or {})
        for key in FILTER_KINDS:
            if self._config.get(key) is None:
                self._config[key] = []

        self.resolver = resolver if resolver is not None else default_registry()
        self.session_provider = session_provider or (lambda: None)
        self.csrf_factory = csrf_factory or CsrfTokenService
        self._html_sanitizer = html_sanitizer

        self._csrf = None
        self._filters: dict[str, FilterHandle] = {}
        self._misses: set[str] = set()
        self._cleaned: list = []
        self._lock = threading.RLock()
        self.logger = get_logger()

    @property
    def config(self) -> Mapping:
        return MappingProxyType(self._config)

    @property
    def misses(self) -> frozenset:
        return frozenset(self._misses)

    @property
    def filters(self) -> Mapping:
        return MappingProxyType(self._filters)

    def get_config(self, key: str, default: Any = None) -> Any:
        return self._config.get(key, default)

    def csrf(self):
        """Return the CSRF service, building it on first use."""
        with self._lock:
            if self._csrf is None:
                self._csrf = self.csrf_factory(self.config, self.session_provider())
                self.logger.debug(f"CSRF service created: {type(self._csrf).__name__}")
            return self._csrf

    def clean_uri(self, uri: str, strict: Optional[bool] = None) -> Any:
        """Clean a request URI with the configured ``uri_filter`` chain.

        Args:
            uri: The request URI or path.
            strict: Collapse dot segments and repeated slashes first. Defaults
                to the ``uri_strict`` config value.
        """
        if strict is None:
            strict = bool(self._config.get("uri_strict", False))

        if strict:
            normalized = REPEATED_SLASH_PATTERN.sub("/", DOT_SEGMENT_PATTERN.sub("/", uri))
            if normalized != uri:
                self.logger.debug(f"URI normalized: {uri!r} -> {normalized!r}")
            uri = normalized

        return self.clean(uri, self._config[URI_FILTER], URI_FILTER)

    def clean(self, value: Any, filters: Any = None, kind: str = INPUT_FILTER) -> Any:
        """Run ``value`` through a chain of filters.

        Args:
            value: Scalar or nested list/tuple/dict to filter.
            filters: A filter specifier or ordered list of specifiers. When
                omitted the configured list for ``kind`` is used.
            kind: Config key holding the default chain.

        Returns:
            The value produced by the last filter.
        """
        if filters is None:
            filters = self._config.get(kind, [])

        for specifier in _as_filter_list(filters):
            value = self._handle_for(specifier).apply(value)

        return value

    def _handle_for(self, specifier: Any) -> FilterHandle:
        if not isinstance(specifier, str):
            return classify_handle(specifier)

        name = specifier.lower()
        handle = self._filters.get(name)
        if handle is not None:
            return handle

        if self._load_filter(name):
            return self._filters[name]

        return RawPattern(specifier)

    def _load_filter(self, name: str) -> bool:
        with self._lock:
            if name in self._filters:
                return True
            if name in self._misses:
                return False

            try:
                handler = self.resolver.resolve(name, self)
            except FilterNotResolvable:
                handler = None

            if handler is None:
                self._misses.add(name)
                log_filter_miss(name)
                return False

            handle = classify_handle(handler)
            self._filters[name] = handle
            log_filter_resolved(name, type(handle).__name__)
            return True

    def is_clean(self, value: Any) -> None:
        """Tag ``value`` as already cleaned."""
        with self._lock:
            self._cleaned.append(value)

    def is_cleaned(self, value: Any) -> bool:
        """Check whether ``value`` was tagged, matching on type and value."""
        return any(_strictly_equal(item, value) for item in self._cleaned)

    def strip_tags(self, value: Any) -> Any:
        """Strip markup and control characters from every scalar in ``value``."""
        return map_leaves(value, strip_unsafe)

    def xss_clean(self, value: Any) -> Any:
        """Sanitize HTML in every string of ``value``.

        Raises:
            HTMLSanitizerUnavailable: bleach is not installed.
        """
        if isinstance(value, dict):
            return {key: self.xss_clean(item) for key, item in value.items()}
        if isinstance(value, list):
            return [self.xss_clean(item) for item in value]
        if isinstance(value, tuple):
            return tuple(self.xss_clean(item) for item in value)
        if not isinstance(value, str):
            return value

        sanitize = self._get_html_sanitizer()
        return sanitize(value, safe=True, balanced=False)

    def _get_html_sanitizer(self) -> Callable[..., str]:
        if self._html_sanitizer is None:
            try:
                from securitykit.security.sanitizer import sanitize_html
            except ImportError as exc:
                self.logger.error("HTML sanitizer unavailable: bleach could not be imported")
                raise HTMLSanitizerUnavailable(
                    'You need to install the "bleach" package to use SecurityManager.xss_clean()'
                ) from exc
            self._html_sanitizer = sanitize_html
        return self._html_sanitizer
