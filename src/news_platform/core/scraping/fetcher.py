"""HTTP fetcher with retries, timeout and a fixed identifying User-Agent.

Provides a small `Fetcher` object exposing `get`, `get_text` and `get_json`.
Every failure (non-2xx, timeout, connection error) surfaces as `FetchError`.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from news_platform.core.exceptions import FetchError, ParseError

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; NewsBot/1.0)"

logger = logging.getLogger(__name__)


class Fetcher:
    """Small HTTP client with sensible defaults for crawling.

    Usage:
        f = Fetcher(timeout=30)
        html = f.get_text(url)
    """

    def __init__(
        self,
        timeout: float = 30,
        retries: int = 2,
        backoff_factor: float = 0.3,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self.session = requests.Session()
        retry = Retry(
            total=retries,
            status_forcelist=(429, 500, 502, 503, 504),
            allowed_methods=frozenset(["GET"]),
            backoff_factor=backoff_factor,
        )
        adapter = HTTPAdapter(max_retries=retry)
        self.session.mount("https://", adapter)
        self.session.mount("http://", adapter)

    @classmethod
    def from_settings(cls, settings) -> "Fetcher":
        return cls(
            timeout=settings.request_timeout,
            retries=settings.http_retries,
            user_agent=settings.user_agent,
        )

    def _headers(self, headers: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        base = {"User-Agent": self.user_agent}
        if headers:
            base.update(headers)
        return base

    def get(self, url: str, headers: Optional[Dict[str, str]] = None, **kwargs):
        logger.debug("GET %s", url)
        try:
            resp = self.session.get(
                url, headers=self._headers(headers), timeout=self.timeout, **kwargs
            )
        except requests.Timeout as exc:
            raise FetchError(f"Timed out fetching {url}", url=url) from exc
        except requests.RequestException as exc:
            raise FetchError(f"Failed to fetch {url}: {exc}", url=url) from exc

        if not 200 <= resp.status_code < 300:
            raise FetchError(
                f"Failed to fetch URL: {url} - Status: {resp.status_code}",
                url=url,
                status_code=resp.status_code,
            )
        return resp

    def get_text(self, url: str, headers: Optional[Dict[str, str]] = None) -> str:
        return self.get(url, headers=headers).text

    def get_json(self, url: str, headers: Optional[Dict[str, str]] = None) -> Any:
        resp = self.get(url, headers=headers)
        try:
            return resp.json()
        except ValueError as exc:
            raise ParseError(f"Response from {url} is not valid JSON") from exc
