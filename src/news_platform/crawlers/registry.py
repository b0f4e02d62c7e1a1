"""Crawler registry: picks the adapter responsible for a source.

Crawlers are registered once at bootstrap. Resolution filters by
`supports()`, then sorts by descending `priority`; Python's sort is stable,
so on a tie the crawler registered first wins.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from news_platform.core.exceptions import NoAdapterError
from news_platform.core.interfaces import BaseCrawler
from news_platform.core.models import Source

logger = logging.getLogger(__name__)


class CrawlerRegistry:
    def __init__(self, crawlers: Optional[List[BaseCrawler]] = None):
        self._crawlers: List[BaseCrawler] = []
        for crawler in crawlers or []:
            self.register(crawler)

    def register(self, crawler: BaseCrawler) -> BaseCrawler:
        if self.get(crawler.name) is not None:
            raise ValueError(f"Crawler '{crawler.name}' is already registered")
        self._crawlers.append(crawler)
        return crawler

    @property
    def crawlers(self) -> Tuple[BaseCrawler, ...]:
        return tuple(self._crawlers)

    def get(self, name: str) -> Optional[BaseCrawler]:
        for crawler in self._crawlers:
            if crawler.name == name:
                return crawler
        return None

    def candidates(self, source: Source) -> List[BaseCrawler]:
        """Crawlers supporting `source`, best first."""
        matching = [c for c in self._crawlers if c.supports(source)]
        return sorted(matching, key=lambda c: c.priority, reverse=True)

    def resolve(self, source: Source) -> BaseCrawler:
        matching = self.candidates(source)
        if not matching:
            raise NoAdapterError(
                f"No crawler found for source: {source.name} "
                f"(type={source.source_type}, url={source.base_url})"
            )
        chosen = matching[0]
        logger.debug("Resolved %s for source %s", chosen, source.id)
        return chosen

    def summary(self) -> Dict[str, int]:
        return {c.name: c.priority for c in self._crawlers}
