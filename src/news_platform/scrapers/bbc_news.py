"""BBC News scraper: the outlet's feed first, its homepage markup second."""

from __future__ import annotations

import logging
from typing import List, Optional

from news_platform.core.exceptions import FetchError, ParseError
from news_platform.core.models import Article, Source
from news_platform.core.scraping.backends import Element
from news_platform.core.scraping.normalizer import resolve_url
from news_platform.crawlers.rss_feed import parse_feed

from .base_scraper import SiteScraper

logger = logging.getLogger(__name__)

CARD_SELECTORS = [
    'article, div[data-testid="card"], div[data-testid="story-card"]',
    "div.gs-c-promo, div.qa-story",
]
HEADLINE_SELECTORS = ["h3", "h2", ".qa-story-headline", '[data-testid="card-headline"]']
SUMMARY_SELECTORS = ["p", ".qa-story-summary", '[data-testid="card-description"]']


class BbcNewsScraper(SiteScraper):
    name = "bbc_news"
    domains = ("bbc.com", "bbc.co.uk")

    def extract(self, source: Source) -> List[Article]:
        logger.info("Starting BBC News crawl (source_id=%s)", source.id)
        feed_url = source.base_url.rstrip("/") + "/feed"
        try:
            articles = parse_feed(self.fetch_html(feed_url), source, self.make_article)
        except (FetchError, ParseError) as exc:
            logger.warning("BBC feed failed, trying website: %s", exc)
            articles = []

        if not articles:
            articles = self.parse_website(self.fetch_html(source.base_url), source)

        logger.info(
            "BBC News crawl completed (source_id=%s, articles=%d)", source.id, len(articles)
        )
        return articles

    def parse_website(self, html: str, source: Source) -> List[Article]:
        document = self.parse_html(html)
        cards = self.find_containers(document, CARD_SELECTORS)

        articles = [a for a in (self._from_card(c, source) for c in cards) if a]
        if not articles:
            articles = [
                self.fallback_article(
                    source,
                    reason="no_articles_found",
                    document=document,
                    default_title="BBC News",
                )
            ]
        return articles

    def _from_card(self, card: Element, source: Source) -> Optional[Article]:
        title = self.first_text(card, HEADLINE_SELECTORS)
        href = self.first_attribute(card, ["a[href]"], "href")
        if not title and not href:
            return None
        return self.make_article(
            source,
            title=title or "BBC News Article",
            url=resolve_url(href, source.base_url) if href else source.base_url,
            content=self.first_text(card, SUMMARY_SELECTORS),
            parsed_from="website",
        )
