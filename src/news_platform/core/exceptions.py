"""Error taxonomy shared by the crawling subsystem."""

from __future__ import annotations

from typing import Optional


class NewsPlatformError(Exception):
    """Base class for every error raised by news_platform."""


class FetchError(NewsPlatformError):
    """Non-2xx answer, timeout or network failure while fetching a URL."""

    def __init__(self, message: str, url: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ParseError(NewsPlatformError):
    """Markup or feed that none of the parsers could make sense of."""


class CrawlError(NewsPlatformError):
    """Adapter-level failure (unexpected payload shape, unknown source...)."""


class NoAdapterError(CrawlError):
    """No registered crawler supports the given source."""


class PersistenceError(NewsPlatformError):
    """Raised by storage backends."""


class InvalidTransitionError(NewsPlatformError):
    """A crawl job was asked to move to a state it cannot reach."""
