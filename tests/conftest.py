import json

import pytest

from news_platform.core.config import CrawlerSettings
from news_platform.core.exceptions import FetchError
from news_platform.core.models import Article, Source
from news_platform.core.scraping.parser import HtmlParser

# keeps short fixtures above the parser's minimum length
PADDING = "<p>" + "Lorem ipsum dolor sit amet, consectetur adipiscing elit. " * 3 + "</p>"


class FakeFetcher:
    """Serves canned bodies by URL; unknown URLs answer 404."""

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.calls = []

    def get_text(self, url, headers=None):
        self.calls.append(url)
        body = self.responses.get(url)
        if body is None:
            raise FetchError(f"Failed to fetch URL: {url} - Status: 404", url=url, status_code=404)
        if isinstance(body, Exception):
            raise body
        return body

    def get_json(self, url, headers=None):
        body = self.get_text(url, headers=headers)
        return json.loads(body) if isinstance(body, str) else body


class StubCrawler:
    """Minimal crawler double registered in registries under test."""

    def __init__(self, name, priority=0, supports=None, articles=None, error=None):
        self.name = name
        self.priority = priority
        self._supports = supports or (lambda source: True)
        self._articles = articles or []
        self._error = error
        self.calls = 0

    def supports(self, source):
        return self._supports(source)

    def extract(self, source):
        self.calls += 1
        if self._error is not None:
            raise self._error
        return list(self._articles)


@pytest.fixture
def settings():
    return CrawlerSettings()


@pytest.fixture
def parser():
    return HtmlParser()


@pytest.fixture
def make_source():
    def _make(**overrides):
        data = {
            "id": 1,
            "name": "Example",
            "base_url": "https://example.com",
            "source_type": "website",
        }
        data.update(overrides)
        return Source(**data)

    return _make


@pytest.fixture
def sample_articles():
    return [
        Article(title="First", url="https://example.com/1", content="Body one"),
        Article(title="Second", url="https://example.com/2", content="Body two"),
    ]


RSS_SNIPPET = """<?xml version="1.0"?>
<rss version="2.0"><channel><title>Feed</title>
<item><title>Feed headline</title><link>https://www.bbc.com/news/1</link>
<description>Feed summary</description></item>
</channel></rss>
"""
