"""CNN scraper.

Two-level crawl: the homepage lists `container__link` anchors, each detail
page is fetched (capped and paced through `work_list`) and parsed with
ordered selector chains. When the listing yields nothing usable a single
fallback article is returned instead.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from news_platform.core.exceptions import FetchError, ParseError
from news_platform.core.models import Article, Source
from news_platform.core.scraping.backends import Document
from news_platform.core.scraping.normalizer import ensure_scheme
from news_platform.core.scraping.parser import extract_links

from .base_scraper import SiteScraper

logger = logging.getLogger(__name__)

LINK_SELECTORS = [
    "a.container__link",
    'a[class*="container__link"]',
    'a[class="container__link"]',
]
HEADLINE_SELECTORS = [
    ".headline__text",
    '[class*="headline__text"]',
    '[class="headline__text"]',
    "h1.headline__text",
    # generic headline markup
    "h1",
    "title",
    ".article__headline",
    '[data-module="ArticleHeadline"]',
]
AUTHOR_SELECTORS = [
    ".byline__authors",
    '[class*="byline__authors"]',
    '[class="byline__authors"]',
    ".byline__author",
    '[class*="byline__author"]',
    ".author",
    '[class*="author"]',
    '[data-module="ArticleAuthor"]',
    # generic byline markup
    ".byline",
    '[class*="byline"]',
    '[rel="author"]',
    ".article__author",
    '[data-module="Byline"]',
]
CONTENT_SELECTORS = [
    ".article__content",
    '[class*="article__content"]',
    '[class="article__content"]',
    ".article-body",
    '[class*="article-body"]',
    ".l-container",
    '[data-module="ArticleBody"]',
]

MIN_PARAGRAPH_CHARS = 10


class CnnNewsScraper(SiteScraper):
    name = "cnn_news"
    domains = ("edition.cnn.com",)

    def extract(self, source: Source) -> List[Article]:
        base_url = ensure_scheme(source.base_url)
        if base_url != source.base_url:
            logger.info("CNN base URL fixed: %s -> %s", source.base_url, base_url)
        logger.info("Starting CNN News crawl (source_id=%s, url=%s)", source.id, base_url)

        html = self.fetch_html(base_url)
        try:
            listing = self.parse_html(html)
        except ParseError as exc:
            logger.error("CNN listing page could not be parsed: %s", exc)
            return [
                self.fallback_article(
                    source,
                    reason="parse_error",
                    html=html,
                    error=exc,
                    default_title=f"CNN News - {source.name}",
                )
            ]

        links = self.collect_links(listing, base_url)
        logger.info("CNN News: extracted %d article links", len(links))
        if not links:
            return [
                self.fallback_article(
                    source, reason="no_links_found", document=listing, default_title="CNN News"
                )
            ]

        articles: List[Article] = []
        work = self.work_list(links)
        if work.dropped:
            logger.info("CNN News: skipping %d links over the cap", work.dropped)
        for url in work:
            article = self.fetch_article(url, source)
            if article is not None:
                articles.append(article)

        if not articles:
            articles = [
                self.fallback_article(
                    source,
                    reason="no_articles_created",
                    document=listing,
                    default_title="CNN News",
                )
            ]

        logger.info(
            "CNN News crawl completed (source_id=%s, articles=%d)", source.id, len(articles)
        )
        return articles

    def collect_links(self, listing: Document, base_url: str) -> List[str]:
        links: List[str] = []
        for selector in LINK_SELECTORS:
            links = [url for url, _ in extract_links(listing, base_url, selector)]
            if links:
                break
        return links

    def fetch_article(self, url: str, source: Source) -> Optional[Article]:
        """Parse one detail page; failures are logged and yield None."""
        try:
            page = self.fetch_document(url)
        except (FetchError, ParseError) as exc:
            logger.warning("CNN News: skipping %s: %s", url, exc)
            return None

        title = self.first_text(page, HEADLINE_SELECTORS)
        content = self.clean_text(self.extract_body(page))
        if not title and not content:
            logger.debug("CNN News: no headline or body on %s", url)
            return None

        return self.make_article(
            source,
            title=title or "CNN News Article",
            url=url,
            content=content,
            author=self.first_text(page, AUTHOR_SELECTORS) or None,
            parsed_from="article_page",
            content_empty=not content,
        )

    def extract_body(self, page: Document) -> str:
        for selector in CONTENT_SELECTORS:
            element = page.find(selector, 0)
            if element is None:
                continue

            paragraphs = [p.text() for p in element.find("p")]
            paragraphs = [p for p in paragraphs if len(p) > MIN_PARAGRAPH_CHARS]
            if paragraphs:
                return "\n\n".join(paragraphs)

            text = element.text()
            if text:
                return text
        return ""
