import logging
from typing import Iterable, List, Optional, Union

from news_platform.core.config import CrawlerSettings
from news_platform.core.interfaces import BaseCrawler
from news_platform.core.models import Article, Source
from news_platform.core.scraping.backends import Document, Element
from news_platform.core.scraping.dates import coerce_datetime
from news_platform.core.scraping.fetcher import Fetcher
from news_platform.core.scraping.normalizer import resolve_url
from news_platform.core.scraping.parser import HtmlParser, strip_tags

logger = logging.getLogger(__name__)

Scope = Union[Document, Element]

# anchors worth following when a page has no recognizable article containers
ARTICLE_LINK_SELECTOR = (
    'a[href*="/article"], a[href*="/post"], a[href*="/news"], a[href*="/story"]'
)


class HtmlCrawler(BaseCrawler):
    """
    Parent class for HTML crawlers.
    Ships the shared tooling: fetch + parse, ordered selector candidates,
    link scanning and the fallback article.
    """

    def __init__(
        self,
        fetcher: Optional[Fetcher] = None,
        parser: Optional[HtmlParser] = None,
        settings: Optional[CrawlerSettings] = None,
    ):
        self.settings = settings or CrawlerSettings()
        self.fetcher = fetcher or Fetcher.from_settings(self.settings)
        self.parser = parser or HtmlParser.from_settings(self.settings)

    def fetch_html(self, url: str) -> str:
        logger.info("[%s] Fetching %s", self.name, url)
        return self.fetcher.get_text(url)

    def parse_html(self, html: str) -> Document:
        return self.parser.parse(html)

    def fetch_document(self, url: str) -> Document:
        return self.parse_html(self.fetch_html(url))

    # --- selector helpers -------------------------------------------------

    @staticmethod
    def first_element(scope: Scope, selectors: Iterable[str]) -> Optional[Element]:
        """First element matched by the first productive selector."""
        for selector in selectors:
            el = scope.find(selector, 0)
            if el is not None:
                return el
        return None

    @staticmethod
    def first_text(scope: Scope, selectors: Iterable[str]) -> str:
        """Text of the first match with non-empty text, trying selectors in order."""
        for selector in selectors:
            for el in scope.find(selector):
                text = el.text()
                if text:
                    return text
        return ""

    @staticmethod
    def first_attribute(
        scope: Scope, selectors: Iterable[str], attribute: str
    ) -> Optional[str]:
        for selector in selectors:
            for el in scope.find(selector):
                value = (el.attribute(attribute) or "").strip()
                if value:
                    return value
        return None

    @staticmethod
    def find_containers(document: Scope, selectors: Iterable[str]) -> List[Element]:
        """All matches of the first selector that matches anything."""
        for selector in selectors:
            found = document.find(selector)
            if found:
                logger.debug("Containers matched by %r: %d", selector, len(found))
                return found
        return []

    def scan_article_links(self, document: Document, source: Source) -> List[Article]:
        """Articles built from anchors that look like article links."""
        articles: List[Article] = []
        for link in document.find(ARTICLE_LINK_SELECTOR):
            title = link.text()
            href = (link.attribute("href") or "").strip()
            if not title or not href:
                continue
            parent = link.parent()
            content = parent.text() if parent is not None else ""
            articles.append(
                self.make_article(
                    source,
                    title=title,
                    url=resolve_url(href, source.base_url),
                    content=content[: self.settings.fallback_content_chars],
                    extracted_from="link",
                )
            )
        return articles

    def parse_date(self, scope: Scope, selectors: Iterable[str]):
        """Publication date from a `datetime` attribute or element text, if any."""
        el = self.first_element(scope, selectors)
        if el is None:
            return None
        return coerce_datetime(el.attribute("datetime") or el.text())

    def fallback_article(
        self,
        source: Source,
        reason: str,
        document: Optional[Document] = None,
        html: str = "",
        error: Optional[BaseException] = None,
        default_title: Optional[str] = None,
    ) -> Article:
        """Single low-fidelity article so a crawl never comes back empty."""
        title = document.title() if document is not None else ""
        if document is not None:
            text = document.text()
        else:
            text = strip_tags(html)
        limit = self.settings.fallback_content_chars
        metadata = {"fallback": True, "reason": reason}
        if error is not None:
            metadata["parse_error"] = str(error)
        logger.warning(
            "[%s] Falling back to page content for source %s (reason=%s)",
            self.name,
            source.id,
            reason,
        )
        return self.make_article(
            source,
            title=title or default_title or f"Crawled from {source.name}",
            url=source.base_url,
            content=text[:limit] or "Content unavailable",
            **metadata,
        )
