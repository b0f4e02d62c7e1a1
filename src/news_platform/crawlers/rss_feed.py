import logging
from typing import Callable, List, Optional, Tuple

import feedparser

from news_platform.core.config import CrawlerSettings
from news_platform.core.exceptions import CrawlError, FetchError, ParseError
from news_platform.core.interfaces import BaseCrawler
from news_platform.core.models import Article, Source, SourceType
from news_platform.core.scraping.dates import coerce_datetime
from news_platform.core.scraping.detector import detect_resource_type, sniff_resource_type
from news_platform.core.scraping.fetcher import Fetcher
from news_platform.core.scraping.parser import strip_tags

logger = logging.getLogger(__name__)

FEED_PATHS = ["/feed", "/rss", "/rss.xml", "/feed.xml", "/atom.xml"]

ArticleFactory = Callable[..., Article]


def _entry_content(entry) -> str:
    contents = entry.get("content") or []
    for item in contents:
        value = item.get("value")
        if value:
            return value
    return entry.get("summary") or entry.get("description") or ""


def _entry_date(entry):
    for key in ("published_parsed", "updated_parsed"):
        if entry.get(key):
            return coerce_datetime(entry[key])
    for key in ("published", "updated"):
        if entry.get(key):
            return coerce_datetime(entry[key])
    return None


def parse_feed(text: str, source: Source, make_article: ArticleFactory) -> List[Article]:
    """Turn an RSS or Atom document into articles.

    `make_article` is the crawler's article builder, so each caller stamps
    its own metadata. Raises ParseError when no feed can be recognized.
    """
    parsed = feedparser.parse(text)
    if not parsed.get("version") and not parsed.entries:
        reason = parsed.get("bozo_exception") or "no channel or entries"
        raise ParseError(f"Failed to parse feed XML: {reason}")

    feed_type = "atom" if parsed.get("version", "").startswith("atom") else "rss"
    id_key = "id" if feed_type == "atom" else "guid"

    articles: List[Article] = []
    for entry in parsed.entries:
        articles.append(
            make_article(
                source,
                title=strip_tags(entry.get("title") or "") or "Untitled",
                url=entry.get("link") or source.base_url,
                content=strip_tags(_entry_content(entry)),
                author=entry.get("author") or None,
                published_at=_entry_date(entry),
                feed_type=feed_type,
                **{id_key: entry.get("id")},
            )
        )
    return articles


class FeedCrawler(BaseCrawler):
    """
    Reads RSS/Atom sources.
    Uses the base URL when it already serves a feed, otherwise tries the
    usual feed paths until one answers with a feed document.
    """

    name = "rss_feed"
    priority = 80

    def __init__(
        self,
        fetcher: Optional[Fetcher] = None,
        settings: Optional[CrawlerSettings] = None,
    ):
        self.settings = settings or CrawlerSettings()
        self.fetcher = fetcher or Fetcher.from_settings(self.settings)

    def supports(self, source: Source) -> bool:
        return source.source_type == SourceType.RSS.value

    def candidate_urls(self, base_url: str) -> List[str]:
        if detect_resource_type(base_url).is_feed:
            return [base_url]
        root = base_url.rstrip("/")
        return [base_url] + [root + path for path in FEED_PATHS]

    def discover_feed(self, source: Source) -> Tuple[str, str]:
        """Return (url, body) of the first candidate that serves a feed."""
        last_error: Optional[Exception] = None
        for url in self.candidate_urls(source.base_url):
            try:
                logger.info("[%s] Fetching %s", self.name, url)
                body = self.fetcher.get_text(url)
            except FetchError as exc:
                logger.debug("Feed candidate %s failed: %s", url, exc)
                last_error = exc
                continue
            if sniff_resource_type(body).is_feed:
                return url, body
            logger.debug("Feed candidate %s is not a feed", url)

        raise CrawlError(
            f"Failed to fetch RSS feed from {source.base_url}"
        ) from last_error

    def extract(self, source: Source) -> List[Article]:
        logger.info("Starting RSS feed crawl (source_id=%s)", source.id)
        url, body = self.discover_feed(source)
        articles = parse_feed(body, source, self.make_article)
        logger.info(
            "RSS feed crawl completed (source_id=%s, feed=%s, articles=%d)",
            source.id,
            url,
            len(articles),
        )
        return articles
