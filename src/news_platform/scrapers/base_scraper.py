"""Base class for site-matched scrapers (one outlet, hand-tuned selectors).

Subclasses declare `domains`; a source is supported when its base URL
contains any of them. Listing -> detail crawls go through `work_list`, which
caps and paces detail fetches.
"""

from __future__ import annotations

import re
import time
from typing import Callable, Iterable, Optional, Sequence

from news_platform.core.config import CrawlerSettings
from news_platform.core.models import Source
from news_platform.core.scraping.fetcher import Fetcher
from news_platform.core.scraping.parser import HtmlParser
from news_platform.core.scraping.throttle import BoundedWorkList, RateLimiter
from news_platform.crawlers.base_html import HtmlCrawler

_BLANK_RUN_RE = re.compile(r"\n{3,}")


class SiteScraper(HtmlCrawler):
    """HTML crawler bound to a set of outlet domains."""

    domains: Sequence[str] = ()
    priority = 100

    def __init__(
        self,
        fetcher: Optional[Fetcher] = None,
        parser: Optional[HtmlParser] = None,
        settings: Optional[CrawlerSettings] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        super().__init__(fetcher=fetcher, parser=parser, settings=settings)
        self._sleep = sleep

    def supports(self, source: Source) -> bool:
        url = (source.base_url or "").lower()
        return any(domain in url for domain in self.domains)

    def work_list(self, urls: Iterable[str]) -> BoundedWorkList[str]:
        limiter = RateLimiter(self.settings.detail_delay_seconds, sleep=self._sleep)
        return BoundedWorkList(urls, self.settings.max_detail_pages, limiter)

    def clean_text(self, text: str) -> str:
        """Trim and squeeze runs of blank lines down to one."""
        return _BLANK_RUN_RE.sub("\n\n", text or "").strip()
