import pytest
import requests

from news_platform.core.config import CrawlerSettings
from news_platform.core.exceptions import FetchError, ParseError
from news_platform.core.scraping.fetcher import Fetcher


class DummyResponse:
    def __init__(self, status_code=200, text="", payload=None):
        self.status_code = status_code
        self.text = text
        self._payload = payload

    def json(self):
        if self._payload is None:
            raise ValueError("not json")
        return self._payload


def test_get_sends_user_agent_and_timeout(monkeypatch):
    seen = {}

    def fake_get(url, headers=None, timeout=None, **kwargs):
        seen.update(url=url, headers=headers, timeout=timeout)
        return DummyResponse(text="<html></html>")

    f = Fetcher(timeout=30)
    monkeypatch.setattr(f.session, "get", fake_get)

    assert f.get_text("https://example.com") == "<html></html>"
    assert seen["headers"]["User-Agent"] == "Mozilla/5.0 (compatible; NewsBot/1.0)"
    assert seen["timeout"] == 30


def test_non_2xx_raises_fetch_error(monkeypatch):
    f = Fetcher()
    monkeypatch.setattr(f.session, "get", lambda url, **kw: DummyResponse(status_code=503))

    with pytest.raises(FetchError) as exc_info:
        f.get("https://example.com/down")

    assert exc_info.value.status_code == 503
    assert exc_info.value.url == "https://example.com/down"
    assert "Status: 503" in str(exc_info.value)


def test_timeout_raises_fetch_error(monkeypatch):
    def boom(url, **kw):
        raise requests.Timeout("slow")

    f = Fetcher()
    monkeypatch.setattr(f.session, "get", boom)

    with pytest.raises(FetchError) as exc_info:
        f.get("https://example.com/slow")
    assert isinstance(exc_info.value.__cause__, requests.Timeout)


def test_get_json(monkeypatch):
    f = Fetcher()
    monkeypatch.setattr(f.session, "get", lambda url, **kw: DummyResponse(payload={"a": 1}))
    assert f.get_json("https://api.example.com") == {"a": 1}

    monkeypatch.setattr(f.session, "get", lambda url, **kw: DummyResponse(text="nope"))
    with pytest.raises(ParseError):
        f.get_json("https://api.example.com")


def test_from_settings():
    f = Fetcher.from_settings(CrawlerSettings(request_timeout=5, user_agent="TestBot"))
    assert f.timeout == 5
    assert f.user_agent == "TestBot"
