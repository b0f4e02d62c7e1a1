import logging
from typing import Any, Dict, List, Optional

from news_platform.core.config import CrawlerSettings
from news_platform.core.exceptions import CrawlError
from news_platform.core.interfaces import BaseCrawler
from news_platform.core.models import Article, Source, SourceType
from news_platform.core.scraping.dates import coerce_datetime
from news_platform.core.scraping.fetcher import Fetcher

logger = logging.getLogger(__name__)

# keys under which list endpoints usually nest their records
LIST_KEYS = ("articles", "results", "data")


def _first(item: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = item.get(key)
        if value not in (None, ""):
            return value
    return None


def unwrap_items(payload: Any) -> List[Any]:
    """Return the list of records carried by a JSON payload.

    Accepts a bare array or an object with one of `LIST_KEYS` holding an
    array. Any other shape raises CrawlError.
    """
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in LIST_KEYS:
            if isinstance(payload.get(key), list):
                return payload[key]
    raise CrawlError("Invalid API response format")


class ApiCrawler(BaseCrawler):
    """
    Generic crawler for JSON APIs.
    Does a GET on the source URL and maps each record through field fallbacks.
    """

    name = "api"
    priority = 80

    def __init__(
        self,
        fetcher: Optional[Fetcher] = None,
        settings: Optional[CrawlerSettings] = None,
    ):
        self.settings = settings or CrawlerSettings()
        self.fetcher = fetcher or Fetcher.from_settings(self.settings)

    def supports(self, source: Source) -> bool:
        return source.source_type == SourceType.API.value

    def extract(self, source: Source) -> List[Article]:
        logger.info("Starting API crawl (source_id=%s, url=%s)", source.id, source.base_url)
        payload = self.fetcher.get_json(source.base_url)
        items = unwrap_items(payload)

        articles = []
        for item in items:
            if not isinstance(item, dict):
                logger.debug("Skipping non-object API item: %r", item)
                continue
            articles.append(self.to_article(item, source))

        logger.info(
            "API crawl completed (source_id=%s, articles=%d)", source.id, len(articles)
        )
        return articles

    def to_article(self, item: Dict[str, Any], source: Source) -> Article:
        author = _first(item, "author", "byline")
        return self.make_article(
            source,
            title=str(_first(item, "title", "headline") or "Untitled"),
            url=str(_first(item, "url", "link") or source.base_url),
            content=str(_first(item, "content", "body", "description") or ""),
            author=str(author) if author is not None else None,
            published_at=coerce_datetime(_first(item, "publishedAt", "published_at", "date")),
            raw_data=item,
        )
