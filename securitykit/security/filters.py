"""Filter handle types and the transformations shared by the filter chain.

A filter specifier is classified once into one of three handle variants:

* ``MethodHandle`` wraps an object exposing ``clean(value)``
* ``CallableHandle`` wraps a plain ``value -> value`` callable
* ``RawPattern`` holds a string used as a regex character class

Values may be scalars or arbitrarily nested lists, tuples and dicts. Every
transformation here recurses through containers and preserves dict keys.
"""

from dataclasses import dataclass
import html
import re
from typing import Any, Callable, Protocol, Union, runtime_checkable

# A tag starts with "<" directly followed by a name, "/", "!" or "?"
TAG_PATTERN = re.compile(r"<(?=[A-Za-z/!?])[^>]*>?")
CONTROL_CHAR_PATTERN = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


@runtime_checkable
class Cleanable(Protocol):
    """Capability implemented by filter classes."""

    def clean(self, value: Any) -> Any: ...


@dataclass(frozen=True)
class MethodHandle:
    handler: Cleanable

    def apply(self, value: Any) -> Any:
        return self.handler.clean(value)


@dataclass(frozen=True)
class CallableHandle:
    handler: Callable[[Any], Any]

    def apply(self, value: Any) -> Any:
        return self.handler(value)


@dataclass(frozen=True)
class RawPattern:
    pattern: str

    def apply(self, value: Any) -> Any:
        return filter_regex(value, self.pattern)


FilterHandle = Union[MethodHandle, CallableHandle, RawPattern]


def classify_handle(handler: Any) -> FilterHandle:
    """Pick the dispatch variant for a resolved handler.

    A callable ``clean`` attribute wins over the handler being callable itself;
    anything else is treated as a character class.
    """
    if isinstance(handler, Cleanable) and callable(handler.clean):
        return MethodHandle(handler)
    if callable(handler):
        return CallableHandle(handler)
    return RawPattern(str(handler))


def map_leaves(value: Any, func: Callable[[Any], Any]) -> Any:
    """Apply ``func`` to every scalar in ``value``, keeping container shape."""
    if isinstance(value, dict):
        return {key: map_leaves(item, func) for key, item in value.items()}
    if isinstance(value, list):
        return [map_leaves(item, func) for item in value]
    if isinstance(value, tuple):
        return tuple(map_leaves(item, func) for item in value)
    return func(value)


def filter_regex(value: Any, pattern: str) -> Any:
    """Remove every character of the class ``[pattern]`` from string leaves.

    Non-string leaves are returned unchanged.

    Raises:
        ValueError: ``pattern`` does not form a valid character class.
    """
    try:
        regex = re.compile(f"[{pattern}]", re.IGNORECASE)
    except re.error as exc:
        raise ValueError(f"Invalid character class filter: {pattern!r}") from exc

    def strip(leaf):
        if isinstance(leaf, str):
            return regex.sub("", leaf)
        return leaf

    return map_leaves(value, strip)


def to_text(value: Any) -> str:
    """Coerce a scalar to text the way form input is stringified."""
    if value is None or value is False:
        return ""
    if value is True:
        return "1"
    return str(value)


def strip_unsafe(value: Any) -> str:
    """Strip tags and control characters from a scalar and encode quotes."""
    text = to_text(value)
    text = TAG_PATTERN.sub("", text)
    text = CONTROL_CHAR_PATTERN.sub("", text)
    return text.replace('"', "&#34;").replace("'", "&#39;")


class HtmlEntitiesFilter:
    """Escape HTML special characters in every string leaf."""

    def __init__(self, manager=None):
        self.manager = manager

    def clean(self, value: Any) -> Any:
        return map_leaves(
            value, lambda leaf: html.escape(leaf, quote=True) if isinstance(leaf, str) else leaf
        )


class StripTagsFilter:
    """Filter wrapper around ``SecurityManager.strip_tags``."""

    def __init__(self, manager):
        self.manager = manager

    def clean(self, value: Any) -> Any:
        return self.manager.strip_tags(value)


class XssCleanFilter:
    """Filter wrapper around ``SecurityManager.xss_clean``."""

    def __init__(self, manager):
        self.manager = manager

    def clean(self, value: Any) -> Any:
        return self.manager.xss_clean(value)
