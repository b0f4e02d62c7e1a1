"""Document/Element abstraction and the two parsing backends behind it.

- `StreamingBackend` (lxml, recover mode): tolerant of very large or broken
  markup, queried through the XPath produced by `selectors.css_to_xpath`.
- `SelectorBackend` (BeautifulSoup + soupsieve): full CSS support, limited
  to documents under `max_bytes`.

Crawlers only ever see `Document` and `Element`.
"""

from __future__ import annotations

import html as html_lib
import logging
import re
from abc import ABC, abstractmethod
from typing import List, Optional, Union

from bs4 import BeautifulSoup
from bs4.element import Tag
from lxml import etree
from soupsieve import SelectorSyntaxError

from news_platform.core.exceptions import ParseError
from news_platform.core.scraping.selectors import (
    compile_selector,
    fallback_tag,
    normalize_for_css,
    split_selector_group,
)

logger = logging.getLogger(__name__)

STREAMING = "streaming"
SELECTOR = "selector"

NON_CONTENT_TAGS = ("script", "style", "noscript")

_WS_RE = re.compile(r"\s+")
_BODY_RE = re.compile(r"<body[^>]*>(.*?)</body>", re.IGNORECASE | re.DOTALL)
_TITLE_RE = re.compile(r"<title[^>]*>(.*?)</title>", re.IGNORECASE | re.DOTALL)

FindResult = Union[List["Element"], "Element", None]


def collapse_whitespace(text: str) -> str:
    return _WS_RE.sub(" ", text or "").strip()


def _pick(results: List["Element"], index: Optional[int]) -> FindResult:
    if index is None:
        return results
    try:
        return results[index]
    except IndexError:
        return None


class Element(ABC):
    """A node of a parsed document."""

    @property
    @abstractmethod
    def tag(self) -> str: ...

    @abstractmethod
    def find(self, selector: str, index: Optional[int] = None) -> FindResult:
        """Query descendants. A list without `index`, else one element or None."""

    @abstractmethod
    def text(self) -> str:
        """All descendant text, whitespace collapsed and trimmed."""

    @abstractmethod
    def attribute(self, name: str) -> Optional[str]: ...

    @abstractmethod
    def parent(self) -> Optional["Element"]: ...

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.tag}>"


class Document(ABC):
    """Parsed HTML page."""

    backend: str = ""

    @abstractmethod
    def find(self, selector: str, index: Optional[int] = None) -> FindResult: ...

    @abstractmethod
    def text(self) -> str:
        """Text of `<body>` (or of the whole tree when there is no body)."""

    def title(self) -> str:
        el = self.find("title", 0)
        return el.text() if el is not None else ""


# --- lxml ------------------------------------------------------------------


def _xpath_query(node, selector: str, absolute: bool) -> List["LxmlElement"]:
    found: List[LxmlElement] = []
    seen = set()
    for xp in compile_selector(selector):
        expr = f"/{xp}" if absolute else xp
        try:
            matches = node.xpath(expr)
        except etree.XPathError as exc:
            logger.debug("XPath %r rejected: %s", expr, exc)
            continue
        for m in matches:
            if not isinstance(m, etree._Element) or id(m) in seen:
                continue
            seen.add(id(m))
            found.append(LxmlElement(m))
    return found


class LxmlElement(Element):
    def __init__(self, node):
        self._node = node

    @property
    def tag(self) -> str:
        return str(self._node.tag).lower()

    def find(self, selector: str, index: Optional[int] = None) -> FindResult:
        return _pick(_xpath_query(self._node, selector, absolute=False), index)

    def text(self) -> str:
        return collapse_whitespace("".join(self._node.itertext()))

    def attribute(self, name: str) -> Optional[str]:
        return self._node.get(name.lower())

    def parent(self) -> Optional[Element]:
        p = self._node.getparent()
        return LxmlElement(p) if p is not None else None


class LxmlDocument(Document):
    backend = STREAMING

    def __init__(self, root, head_title: str = ""):
        self.root = root
        # <title> of a page parsed from its body slice only
        self.head_title = head_title

    def find(self, selector: str, index: Optional[int] = None) -> FindResult:
        return _pick(_xpath_query(self.root, selector, absolute=True), index)

    def text(self) -> str:
        body = self.find("body", 0)
        if body is not None:
            return body.text()
        return collapse_whitespace("".join(self.root.itertext()))

    def title(self) -> str:
        return super().title() or self.head_title


# --- BeautifulSoup -----------------------------------------------------------


def _soup_query(scope, selector: str) -> List["SoupElement"]:
    found: List[SoupElement] = []
    seen = set()
    for part in split_selector_group(selector):
        try:
            matches = scope.select(normalize_for_css(part))
        except (SelectorSyntaxError, NotImplementedError):
            tag = fallback_tag(part)
            matches = scope.find_all(tag) if tag else []
        for m in matches:
            if id(m) in seen:
                continue
            seen.add(id(m))
            found.append(SoupElement(m))
    return found


class SoupElement(Element):
    def __init__(self, node: Tag):
        self._node = node

    @property
    def tag(self) -> str:
        return (self._node.name or "").lower()

    def find(self, selector: str, index: Optional[int] = None) -> FindResult:
        return _pick(_soup_query(self._node, selector), index)

    def text(self) -> str:
        return collapse_whitespace(self._node.get_text())

    def attribute(self, name: str) -> Optional[str]:
        value = self._node.get(name.lower())
        if isinstance(value, list):
            return " ".join(value)
        return value

    def parent(self) -> Optional[Element]:
        p = self._node.parent
        if p is None or isinstance(p, BeautifulSoup):
            return None
        return SoupElement(p)


class SoupDocument(Document):
    backend = SELECTOR

    def __init__(self, soup: BeautifulSoup):
        self.soup = soup

    def find(self, selector: str, index: Optional[int] = None) -> FindResult:
        return _pick(_soup_query(self.soup, selector), index)

    def text(self) -> str:
        body = self.soup.body
        return collapse_whitespace((body or self.soup).get_text())


# --- backends ----------------------------------------------------------------


class ParserBackend(ABC):
    name: str = ""

    @abstractmethod
    def parse(self, html: str) -> Document:
        """Parse markup or raise ParseError."""


class StreamingBackend(ParserBackend):
    """lxml in recover mode; tries the `<body>` slice before the whole page."""

    name = STREAMING

    def _load(self, markup: str):
        # bytes + explicit encoding: lxml refuses str input carrying an
        # encoding declaration
        parser = etree.HTMLParser(
            recover=True, remove_comments=True, huge_tree=True, encoding="utf-8"
        )
        try:
            return etree.fromstring(markup.encode("utf-8"), parser)
        except (etree.LxmlError, ValueError) as exc:
            logger.debug("lxml rejected markup: %s", exc)
            return None

    def parse(self, html: str) -> Document:
        root = None
        head_title = ""
        m = _BODY_RE.search(html)
        if m:
            t = _TITLE_RE.search(html, 0, m.start())
            if t:
                head_title = collapse_whitespace(html_lib.unescape(t.group(1)))
            logger.info("Parsing extracted body (body_length=%d)", len(m.group(1)))
            root = self._load(f"<html><body>{m.group(1)}</body></html>")
            if root is None:
                logger.info("Body-only parsing failed, trying full HTML")
                head_title = ""

        if root is None:
            root = self._load(html)

        if root is None:
            raise ParseError(f"Streaming parser failed to parse HTML. Length: {len(html)}")

        etree.strip_elements(root, *NON_CONTENT_TAGS, with_tail=False)
        return LxmlDocument(root, head_title=head_title)


class SelectorBackend(ParserBackend):
    """BeautifulSoup/soupsieve; input is truncated to `max_bytes`."""

    name = SELECTOR

    def __init__(self, max_bytes: int = 550_000, features: str = "html.parser"):
        self.max_bytes = max_bytes
        self.features = features

    def truncate(self, html: str) -> str:
        raw = html.encode("utf-8")
        if len(raw) <= self.max_bytes:
            return html
        logger.warning(
            "HTML exceeds selector parser limit, truncating (original_length=%d, max=%d)",
            len(raw),
            self.max_bytes,
        )
        return raw[: self.max_bytes].decode("utf-8", errors="ignore")

    def parse(self, html: str) -> Document:
        html = self.truncate(html)
        try:
            soup = BeautifulSoup(html, self.features)
        except Exception as exc:
            raise ParseError(f"HTML parsing error: {exc}") from exc

        if soup.find() is None:
            raise ParseError(f"No elements found in HTML. Length: {len(html)}")

        for node in soup(list(NON_CONTENT_TAGS)):
            node.decompose()
        return SoupDocument(soup)
