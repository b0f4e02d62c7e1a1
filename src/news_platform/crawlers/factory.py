from typing import Optional

from news_platform.core.config import CrawlerSettings
from news_platform.core.scraping.fetcher import Fetcher
from news_platform.core.scraping.parser import HtmlParser
from news_platform.crawlers.base_api import ApiCrawler
from news_platform.crawlers.generic_website import GenericWebsiteCrawler
from news_platform.crawlers.registry import CrawlerRegistry
from news_platform.crawlers.rss_feed import FeedCrawler
from news_platform.scrapers import BbcNewsScraper, CnnNewsScraper


def build_default_registry(
    settings: Optional[CrawlerSettings] = None,
    fetcher: Optional[Fetcher] = None,
    parser: Optional[HtmlParser] = None,
) -> CrawlerRegistry:
    """
    Static bootstrap table: every crawler the platform knows, in registration order.
    The orchestrator never needs to know which crawlers exist.
    """
    settings = settings or CrawlerSettings()
    fetcher = fetcher or Fetcher.from_settings(settings)
    parser = parser or HtmlParser.from_settings(settings)

    html_kwargs = {"fetcher": fetcher, "parser": parser, "settings": settings}
    return CrawlerRegistry(
        [
            BbcNewsScraper(**html_kwargs),
            CnnNewsScraper(**html_kwargs),
            FeedCrawler(fetcher=fetcher, settings=settings),
            ApiCrawler(fetcher=fetcher, settings=settings),
            GenericWebsiteCrawler(**html_kwargs),
        ]
    )
