"""Filter chain, filter resolution and HTML sanitization."""

from .filters import Cleanable, CallableHandle, MethodHandle, RawPattern
from .manager import INPUT_FILTER, OUTPUT_FILTER, URI_FILTER, SecurityManager
from .resolver import FilterRegistry, FilterResolver, default_registry

__all__ = [
    "SecurityManager",
    "FilterRegistry",
    "FilterResolver",
    "default_registry",
    "Cleanable",
    "MethodHandle",
    "CallableHandle",
    "RawPattern",
    "URI_FILTER",
    "INPUT_FILTER",
    "OUTPUT_FILTER",
]
