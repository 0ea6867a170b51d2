"""Tests for filter handle classification and leaf transformations."""

import pytest

from securitykit.security.filters import (
    CallableHandle,
    Cleanable,
    HtmlEntitiesFilter,
    MethodHandle,
    RawPattern,
    classify_handle,
    filter_regex,
    map_leaves,
    strip_unsafe,
)


class Trim:
    def clean(self, value):
        return value.strip()


def test_classify_object_with_clean_method():
    handle = classify_handle(Trim())
    assert isinstance(handle, MethodHandle)
    assert isinstance(handle.handler, Cleanable)
    assert handle.apply("  x ") == "x"


def test_classify_plain_callable():
    handle = classify_handle(str.lower)
    assert isinstance(handle, CallableHandle)
    assert handle.apply("ABC") == "abc"


def test_classify_non_callable_as_pattern():
    handle = classify_handle("<>")
    assert handle == RawPattern("<>")
    assert handle.apply("<a>") == "a"


def test_non_callable_clean_attribute_is_not_a_method_handle():
    class Flag:
        clean = True

        def __call__(self, value):
            return "called"

    assert isinstance(classify_handle(Flag()), CallableHandle)


def test_map_leaves_preserves_container_types():
    value = {"a": [1, (2, 3)], "b": {"c": 4}}
    assert map_leaves(value, lambda leaf: leaf * 10) == {"a": [10, (20, 30)], "b": {"c": 40}}


def test_filter_regex_supports_ranges():
    assert filter_regex("abc123", "0-9") == "abc"


def test_filter_regex_leaves_non_strings():
    assert filter_regex([None, 12, b"<>", "<>"], "<>") == [None, 12, b"<>", ""]


def test_filter_regex_rejects_invalid_character_class():
    for pattern in ("", "z-a"):
        with pytest.raises(ValueError, match="Invalid character class filter"):
            filter_regex("abc", pattern)


def test_strip_unsafe_removes_comments_and_tags():
    assert strip_unsafe("a<!-- hidden -->b<br/>c") == "abc"


def test_htmlentities_filter_escapes_nested_strings():
    cleaned = HtmlEntitiesFilter().clean({"q": ["<&>", 1]})
    assert cleaned == {"q": ["&lt;&amp;&gt;", 1]}
