"""Filter resolution: maps lowercase filter names to handler instances."""

import abc
import logging
import threading
from typing import Any, Callable

from securitykit.errors import FilterNotResolvable
from securitykit.security.filters import HtmlEntitiesFilter, StripTagsFilter, XssCleanFilter

logger = logging.getLogger(__name__)

FilterFactory = Callable[[Any], Any]


class FilterResolver(abc.ABC):
    """Interface for turning a filter name into a handler."""

    @abc.abstractmethod
    def resolve(self, name: str, manager: Any) -> Any:
        """Return a handler for ``name``.

        Args:
            name: Lowercase filter name.
            manager: The SecurityManager asking, passed to the handler factory.

        Returns:
            A handler exposing ``clean(value)`` or callable as ``value -> value``.

        Raises:
            FilterNotResolvable: No handler exists for ``name``. Any other
                exception is a genuine failure and propagates to the caller.
        """


class FilterRegistry(FilterResolver):
    """In-memory resolver backed by named factories.

    Factories receive the manager and return a handler. Names are stored
    lowercase so registration and lookup are case-insensitive.
    """

    def __init__(self):
        self._factories: dict[str, FilterFactory] = {}
        self._lock = threading.Lock()

    def register(self, name: str, factory: FilterFactory) -> None:
        with self._lock:
            self._factories[name.lower()] = factory
        logger.debug(f"Registered filter factory: {name.lower()}")

    def unregister(self, name: str) -> None:
        with self._lock:
            self._factories.pop(name.lower(), None)

    def names(self) -> list[str]:
        with self._lock:
            return sorted(self._factories)

    def __contains__(self, name: str) -> bool:
        return name.lower() in self._factories

    def resolve(self, name: str, manager: Any) -> Any:
        factory = self._factories.get(name.lower())
        if factory is None:
            raise FilterNotResolvable(name)
        return factory(manager)


def default_registry() -> FilterRegistry:
    """Build a registry holding the built-in filters."""
    registry = FilterRegistry()
    registry.register("htmlentities", HtmlEntitiesFilter)
    registry.register("strip_tags", StripTagsFilter)
    registry.register("xss_clean", XssCleanFilter)
    return registry
