import logging
from typing import List, Optional

from news_platform.core.models import Article, Source, SourceType
from news_platform.core.scraping.backends import Element
from news_platform.core.scraping.normalizer import resolve_url

from .base_html import HtmlCrawler

logger = logging.getLogger(__name__)

CONTAINER_SELECTORS = [
    "article",
    "div.article",
    'div[class*="article"]',
    "div.post",
    'div[class*="post"]',
    "div.entry",
    'div[class*="entry"]',
    "div.item",
    'div[class*="item"]',
]
TITLE_SELECTORS = ["h1", "h2", "h3", ".title", '[class*="title"]']
CONTENT_SELECTORS = [
    ".content",
    ".excerpt",
    ".summary",
    "p",
    '[class*="content"]',
    '[class*="excerpt"]',
]
AUTHOR_SELECTORS = [".author", '[class*="author"]', ".byline", '[class*="byline"]']
DATE_SELECTORS = ["time", ".date", '[class*="date"]', ".published", '[class*="published"]']

MAX_CONTENT_CHARS = 5000


class GenericWebsiteCrawler(HtmlCrawler):
    """
    Catch-all crawler for `website` sources.
    Knows the usual blog/news markup (article, .post, .entry, .item) and
    degrades to link scanning and finally to a page-level fallback article.
    """

    name = "generic_website"
    priority = 10

    def supports(self, source: Source) -> bool:
        return source.source_type == SourceType.WEBSITE.value

    def extract(self, source: Source) -> List[Article]:
        logger.info("Starting generic website crawl (source_id=%s)", source.id)
        html = self.fetch_html(source.base_url)
        document = self.parse_html(html)

        containers = self.find_containers(document, CONTAINER_SELECTORS)
        if containers:
            articles = [
                a for a in (self._from_container(c, source) for c in containers) if a
            ]
        else:
            logger.info("No article containers, scanning links (source_id=%s)", source.id)
            articles = self.scan_article_links(document, source)

        if not articles:
            articles = [
                self.fallback_article(source, reason="no_articles_found", document=document)
            ]

        logger.info(
            "Generic website crawl completed (source_id=%s, articles=%d)",
            source.id,
            len(articles),
        )
        return articles

    def _from_container(self, container: Element, source: Source) -> Optional[Article]:
        title = self.first_text(container, TITLE_SELECTORS)
        href = self.first_attribute(container, ["a[href]"], "href")
        if not title and not href:
            return None

        url = resolve_url(href, source.base_url) if href else source.base_url
        content = self._content(container)
        return self.make_article(
            source,
            title=title or f"Article from {source.name}",
            url=url,
            content=content[:MAX_CONTENT_CHARS],
            author=self.first_text(container, AUTHOR_SELECTORS) or None,
            published_at=self.parse_date(container, DATE_SELECTORS),
        )

    @staticmethod
    def _content(container: Element) -> str:
        for selector in CONTENT_SELECTORS:
            parts = [el.text() for el in container.find(selector)]
            content = " ".join(p for p in parts if p)
            if content:
                return content
        return container.text()
