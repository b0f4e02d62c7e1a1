import pytest

from conftest import FakeFetcher
from news_platform.core.exceptions import CrawlError
from news_platform.crawlers.base_api import ApiCrawler, unwrap_items

URL = "https://api.example.com/v1/articles"


def extract(payload, make_source):
    crawler = ApiCrawler(fetcher=FakeFetcher({URL: payload}))
    return crawler.extract(make_source(base_url=URL, source_type="api"))


def test_results_key_with_minimal_items(make_source):
    (article,) = extract({"results": [{"title": "T", "url": "u"}]}, make_source)

    assert article.title == "T"
    assert article.url == "u"
    assert article.content == ""
    assert article.author is None
    assert article.published_at is None
    assert article.metadata["source_type"] == "api"
    assert article.metadata["raw_data"] == {"title": "T", "url": "u"}


def test_bare_list_with_alternate_field_names(make_source):
    payload = [
        {
            "headline": "H",
            "link": "https://news.example.com/h",
            "body": "Full body",
            "byline": "Reporter",
            "publishedAt": "2024-05-06T07:08:09Z",
        },
        "not an object",
        {},
    ]

    first, empty = extract(payload, make_source)

    assert first.title == "H"
    assert first.url == "https://news.example.com/h"
    assert first.content == "Full body"
    assert first.author == "Reporter"
    assert first.published_at.month == 5
    assert empty.title == "Untitled"
    assert empty.url == URL


@pytest.mark.parametrize("key", ["articles", "results", "data"])
def test_unwrap_known_keys(key):
    assert unwrap_items({key: [{"title": "x"}]}) == [{"title": "x"}]


@pytest.mark.parametrize("payload", [{"items": []}, {"data": {"nested": 1}}, "text", 42])
def test_unexpected_shapes_raise(payload):
    with pytest.raises(CrawlError):
        unwrap_items(payload)
