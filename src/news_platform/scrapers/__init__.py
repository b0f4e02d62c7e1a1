"""Site-matched scrapers, one per outlet with hand-tuned selectors.

A scraper claims a source when the source's base URL contains one of its
`domains`; see `news_platform.crawlers.factory` for registration order.
"""

from .base_scraper import SiteScraper
from .bbc_news import BbcNewsScraper
from .cnn_news import CnnNewsScraper

__all__ = ["SiteScraper", "BbcNewsScraper", "CnnNewsScraper"]
