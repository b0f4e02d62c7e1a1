from abc import ABC, abstractmethod
from typing import Any, List, Optional

from news_platform.core.models import Article, Source


class BaseCrawler(ABC):
    """
    Contract every crawler (adapter) must follow.

    The registry only looks at `name`, `priority` and `supports()`, so new
    source families can be added without touching the orchestrator.
    """

    name: str = "base"
    priority: int = 0

    @abstractmethod
    def supports(self, source: Source) -> bool:
        """Whether this crawler knows how to handle `source`."""
        raise NotImplementedError()

    @abstractmethod
    def extract(self, source: Source) -> List[Article]:
        """Fetch the source and return normalized articles.

        Raises FetchError/ParseError/CrawlError when the source itself cannot
        be read. Optional steps (a single detail page, a date) must degrade
        instead of raising.
        """
        raise NotImplementedError()

    def make_article(
        self,
        source: Source,
        title: str,
        url: str,
        content: str = "",
        author: Optional[str] = None,
        published_at=None,
        **metadata: Any,
    ) -> Article:
        """Build an Article stamped with this crawler's name and the source type."""
        meta = {"crawler": self.name, "source_type": source.source_type}
        meta.update(metadata)
        return Article(
            title=title,
            url=url,
            content=content or "",
            author=author or None,
            published_at=published_at,
            metadata=meta,
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r} priority={self.priority}>"
