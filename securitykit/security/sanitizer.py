"""HTML sanitization backend used for XSS cleaning."""

from dataclasses import dataclass
import logging
import re

import bleach

logger = logging.getLogger(__name__)

# Tags kept in safe mode
SAFE_TAGS = [
    # Typography
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "p",
    "br",
    "hr",
    "strong",
    "b",
    "em",
    "i",
    "u",
    "sub",
    "sup",
    "small",
    "mark",
    # Lists
    "ul",
    "ol",
    "li",
    "dl",
    "dt",
    "dd",
    # Tables
    "table",
    "thead",
    "tbody",
    "tfoot",
    "tr",
    "th",
    "td",
    "caption",
    # Semantic elements
    "article",
    "section",
    "aside",
    "header",
    "footer",
    "main",
    "nav",
    "div",
    "span",
    # Media
    "img",
    "figure",
    "figcaption",
    # Links
    "a",
    # Code
    "pre",
    "code",
    "kbd",
    "samp",
    # Quotes
    "blockquote",
    "cite",
    "q",
    "abbr",
    "dfn",
    "time",
]

# Document-level tags only allowed outside safe mode
DOCUMENT_TAGS = ["html", "head", "body", "title", "meta", "link", "style", "svg"]

ALLOWED_ATTRIBUTES = {
    "*": ["id", "class", "title", "lang", "dir", "style"],
    "a": ["href", "target", "rel"],
    "img": ["src", "alt", "width", "height"],
    "meta": ["name", "content", "charset"],
    "link": ["rel", "href", "type"],
    "style": ["type"],
    "svg": ["width", "height", "viewBox", "xmlns"],
    "th": ["scope", "colspan", "rowspan"],
    "td": ["colspan", "rowspan"],
    "time": ["datetime"],
}

ALLOWED_CSS_PROPERTIES = [
    "font-family",
    "font-size",
    "font-weight",
    "font-style",
    "color",
    "text-align",
    "line-height",
    "text-decoration",
    "margin",
    "padding",
    "width",
    "height",
    "max-width",
    "max-height",
    "display",
    "vertical-align",
    "background-color",
    "border",
    "border-radius",
    "border-collapse",
    "border-spacing",
]

SAFE_PROTOCOLS = ["http", "https", "mailto"]
ALLOWED_PROTOCOLS = ["http", "https", "mailto", "tel"]

EVENT_HANDLER_PATTERN = re.compile(r'\s*\bon[a-z]+\s*=\s*["\'][^"\']*["\']', re.IGNORECASE)
JAVASCRIPT_URL_PATTERN = re.compile(
    r'(href|src)\s*=\s*["\'][^"\']*javascript\s*:[^"\']*["\']', re.IGNORECASE
)
CSS_EXPRESSION_PATTERN = re.compile(r"expression\s*\([^)]*\)", re.IGNORECASE)
CSS_JAVASCRIPT_PATTERN = re.compile(r'url\s*\(\s*["\']?\s*javascript:', re.IGNORECASE)


@dataclass(frozen=True)
class SanitizeOptions:
    """Options for a single sanitization pass.

    Attributes:
        safe: Restrict output to body-level formatting tags and drop
            document-level tags such as ``style``, ``meta`` and ``svg``.
        balanced: Whether the caller requires tag balancing. bleach rebuilds
            the tree through html5lib and always serializes balanced markup,
            so this only documents the caller's intent.
    """

    safe: bool = True
    balanced: bool = False


class CustomCSSSanitizer:
    """CSS sanitizer hook for bleach."""

    def __init__(self, sanitizer_instance):
        self.sanitizer = sanitizer_instance

    def sanitize_css(self, style: str) -> str:
        """Sanitize CSS properties in style attributes."""
        return self.sanitizer._css_sanitizer(style)


class HTMLSanitizer:
    """Strips dangerous markup from HTML and records what was removed."""

    def __init__(self, options: SanitizeOptions | None = None):
        self.options = options or SanitizeOptions()
        self.sanitization_log = []

    def sanitize(self, html_content: str) -> tuple[str, list[dict]]:
        """
        Sanitize HTML content and return sanitized HTML with sanitization log.

        Args:
            html_content: Raw HTML content to sanitize

        Returns:
            tuple of (sanitized_html, sanitization_log)
        """
        self.sanitization_log = []

        html_content = self._remove_event_handlers(html_content)
        html_content = self._remove_javascript_urls(html_content)
        html_content = self._remove_dangerous_css(html_content)

        if self.options.safe:
            tags = SAFE_TAGS
            protocols = SAFE_PROTOCOLS
        else:
            tags = SAFE_TAGS + DOCUMENT_TAGS
            protocols = ALLOWED_PROTOCOLS

        sanitized = bleach.clean(
            html_content,
            tags=tags,
            attributes=ALLOWED_ATTRIBUTES,
            protocols=protocols,
            strip=True,
            strip_comments=True,
            css_sanitizer=CustomCSSSanitizer(self),
        )

        sanitized = self._validate_links(sanitized)

        if self.sanitization_log:
            logger.debug(f"HTML sanitized: {self.sanitization_log}")

        return sanitized, self.sanitization_log

    def _record(self, entry_type: str, count: int, message: str) -> None:
        self.sanitization_log.append({"type": entry_type, "count": count, "message": message})

    def _remove_event_handlers(self, content: str) -> str:
        """Remove event handlers from HTML."""
        matches = EVENT_HANDLER_PATTERN.findall(content)
        if matches:
            self._record(
                "event_handler_removed",
                len(matches),
                f"Removed {len(matches)} event handler(s)",
            )
        return EVENT_HANDLER_PATTERN.sub("", content)

    def _remove_javascript_urls(self, content: str) -> str:
        """Remove javascript: URLs."""
        matches = JAVASCRIPT_URL_PATTERN.findall(content)
        if matches:
            self._record(
                "javascript_url_removed",
                len(matches),
                f"Removed {len(matches)} javascript: URL(s)",
            )
        return JAVASCRIPT_URL_PATTERN.sub("", content)

    def _remove_dangerous_css(self, content: str) -> str:
        """Remove dangerous CSS properties and values."""
        matches = CSS_EXPRESSION_PATTERN.findall(content)
        if matches:
            self._record(
                "css_expression_removed",
                len(matches),
                f"Removed {len(matches)} CSS expression(s)",
            )
        content = CSS_EXPRESSION_PATTERN.sub("", content)

        matches = CSS_JAVASCRIPT_PATTERN.findall(content)
        if matches:
            self._record(
                "css_javascript_url_removed",
                len(matches),
                f"Removed {len(matches)} javascript: URL(s) in CSS",
            )
        return CSS_JAVASCRIPT_PATTERN.sub("url(", content)

    def _css_sanitizer(self, style: str) -> str:
        """Sanitize CSS properties in style attributes."""
        if not style:
            return ""

        properties = []
        for prop in style.split(";"):
            prop = prop.strip()
            if ":" not in prop:
                continue

            name, value = prop.split(":", 1)
            name = name.strip().lower()
            value = value.strip()

            if name not in ALLOWED_CSS_PROPERTIES:
                self._record("css_property_blocked", 1, f"Blocked disallowed CSS property: {name}")
                continue
            if "url(" in value.lower():
                self._record("css_url_blocked", 1, f"Blocked URL in CSS property: {name}")
                continue
            properties.append(f"{name}: {value}")

        return "; ".join(properties)

    def _validate_links(self, content: str) -> str:
        """Force rel="noopener noreferrer" on external links."""
        link_pattern = re.compile(
            r'<a\s+([^>]*href=["\']https?://[^"\']*["\'][^>]*)>', re.IGNORECASE
        )

        def add_rel_attribute(match):
            tag_content = match.group(1)
            if "rel=" not in tag_content:
                return f'<a {tag_content} rel="noopener noreferrer">'
            tag_content = re.sub(r'rel=["\'][^"\']*["\']', 'rel="noopener noreferrer"', tag_content)
            return f"<a {tag_content}>"

        return link_pattern.sub(add_rel_attribute, content)


def sanitize_html(html_content: str, safe: bool = True, balanced: bool = False) -> str:
    """Return ``html_content`` with unsafe markup removed."""
    options = SanitizeOptions(safe=safe, balanced=balanced)
    sanitized, _ = HTMLSanitizer(options).sanitize(html_content)
    return sanitized
