"""HTML parsing entry point: backend selection, markup stripping, link extraction.

`HtmlParser.parse` picks the streaming backend for documents above
`streaming_threshold` bytes and the selector backend otherwise. If the chosen
backend rejects the markup, the other one gets a chance before `ParseError`.
"""

from __future__ import annotations

import html as html_lib
import logging
import re
from typing import Callable, List, Optional, Tuple, Union
from news_platform.core.exceptions import ParseError
from news_platform.core.scraping.backends import (
    Document,
    ParserBackend,
    SelectorBackend,
    StreamingBackend,
    collapse_whitespace,
)
from news_platform.core.scraping.normalizer import is_http_url, normalize_url, resolve_url

logger = logging.getLogger(__name__)

DEFAULT_STREAMING_THRESHOLD = 600_000
DEFAULT_SELECTOR_MAX_BYTES = 550_000
DEFAULT_MIN_LENGTH = 100

_NON_CONTENT_BLOCK_RE = re.compile(
    r"<(script|style|noscript)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL
)
_MARKUP_RE = re.compile(r"<[^>]+>")
_SKIP_HREF_PREFIXES = ("javascript:", "mailto:", "tel:", "#")

SelectHook = Callable[[str, int], None]


def normalize_markup(html: str) -> str:
    """Unify line endings and drop NUL bytes."""
    return html.replace("\r\n", "\n").replace("\r", "\n").replace("\x00", "")


def strip_tags(html: str) -> str:
    """Plain text of raw markup, for when no parsed document is available."""
    text = _NON_CONTENT_BLOCK_RE.sub(" ", html or "")
    text = _MARKUP_RE.sub(" ", text)
    return collapse_whitespace(html_lib.unescape(text))


class HtmlParser:
    """Turns raw HTML into a queryable `Document`.

    `on_select(backend_name, size_in_bytes)` is called every time a backend
    is chosen, which lets callers observe the size-based strategy.
    """

    def __init__(
        self,
        streaming_threshold: int = DEFAULT_STREAMING_THRESHOLD,
        selector_max_bytes: int = DEFAULT_SELECTOR_MAX_BYTES,
        min_length: int = DEFAULT_MIN_LENGTH,
        on_select: Optional[SelectHook] = None,
    ) -> None:
        self.streaming_threshold = streaming_threshold
        self.min_length = min_length
        self.on_select = on_select
        self.streaming = StreamingBackend()
        self.selector = SelectorBackend(max_bytes=selector_max_bytes)

    @classmethod
    def from_settings(cls, settings, on_select: Optional[SelectHook] = None) -> "HtmlParser":
        return cls(
            streaming_threshold=settings.streaming_threshold_bytes,
            selector_max_bytes=settings.selector_max_bytes,
            min_length=settings.min_html_length,
            on_select=on_select,
        )

    def select_backend(self, size: int) -> ParserBackend:
        if size > self.streaming_threshold:
            return self.streaming
        return self.selector

    def parse(self, html: Union[str, bytes, None]) -> Document:
        if isinstance(html, bytes):
            html = html.decode("utf-8", errors="replace")
        length = len((html or "").strip().encode("utf-8"))
        if length < self.min_length:
            logger.error("HTML content too short (length=%d)", length)
            raise ParseError(f"HTML content is empty or too short. Length: {length}")

        html = normalize_markup(html)
        size = len(html.encode("utf-8"))
        backend = self.select_backend(size)
        if self.on_select is not None:
            self.on_select(backend.name, size)
        logger.info("Parsing HTML with %s backend (html_length=%d)", backend.name, size)

        try:
            return backend.parse(html)
        except ParseError as first:
            other = self.selector if backend is self.streaming else self.streaming
            logger.warning(
                "%s backend rejected HTML (%s), trying %s", backend.name, first, other.name
            )
            try:
                return other.parse(html)
            except ParseError as second:
                raise ParseError(
                    f"Both parsers rejected HTML. Length: {size}. "
                    f"{backend.name}: {first}; {other.name}: {second}"
                ) from second


_default_parser: Optional[HtmlParser] = None


def parse_html(html: Union[str, bytes, None]) -> Document:
    """Parse with a module-level parser using default thresholds."""
    global _default_parser
    if _default_parser is None:
        _default_parser = HtmlParser()
    return _default_parser.parse(html)


def extract_links(
    document: Document,
    base_url: str,
    selector: str = "a[href]",
    patterns: Optional[List[str]] = None,
) -> List[Tuple[str, str]]:
    """Extract links matched by `selector` and return list of (url, link_text).

    - Resolves hrefs against `base_url` and normalizes them via `normalize_url`.
    - Drops anything that does not resolve to an http(s) URL.
    - Keeps only URLs matching one of `patterns` (regexes) when given.
    - Deduplicates by URL, preserving document order.
    """
    compiled = [re.compile(p, re.IGNORECASE) for p in patterns] if patterns else None

    seen = set()
    results: List[Tuple[str, str]] = []
    for a in document.find(selector):
        raw = (a.attribute("href") or "").strip()
        if not raw or raw.lower().startswith(_SKIP_HREF_PREFIXES):
            continue
        url = normalize_url(resolve_url(raw, base_url))
        if not is_http_url(url):
            logger.warning("Skipping invalid URL resolved from %r", raw)
            continue
        if compiled and not any(rx.search(url) for rx in compiled):
            continue
        if url in seen:
            continue
        seen.add(url)
        results.append((url, a.text()))

    return results
