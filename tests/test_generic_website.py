import pytest

from conftest import PADDING, FakeFetcher
from news_platform.core.exceptions import FetchError
from news_platform.core.scraping.parser import HtmlParser
from news_platform.crawlers.generic_website import GenericWebsiteCrawler

BASE = "https://example.com"


def crawler_for(html, parser):
    fetcher = FakeFetcher({BASE: html})
    return GenericWebsiteCrawler(fetcher=fetcher, parser=parser), fetcher


def test_extracts_article_containers(parser, make_source):
    html = f"""
    <html><head><title>Blog</title></head><body>
      <article>
        <h2>First post</h2>
        <a href="/news/first">Read more</a>
        <p>Opening paragraph.</p>
        <p>Second paragraph.</p>
        <span class="author">Jane Doe</span>
        <time datetime="2024-01-02T03:04:05Z">Jan 2</time>
      </article>
      <article><div>no title and no link here</div></article>
      {PADDING}
    </body></html>
    """
    crawler, _ = crawler_for(html, parser)

    articles = crawler.extract(make_source())

    assert len(articles) == 1
    a = articles[0]
    assert a.title == "First post"
    assert a.url == "https://example.com/news/first"
    assert a.content == "Opening paragraph. Second paragraph."
    assert a.author == "Jane Doe"
    assert a.published_at.year == 2024
    assert a.summary == a.content
    assert a.metadata["crawler"] == "generic_website"
    assert a.metadata["source_type"] == "website"
    assert not a.is_fallback


def test_untitled_container_gets_source_title(parser, make_source):
    html = f'<html><body><div class="post"><a href="/p/1">continue</a></div>{PADDING}</body></html>'
    crawler, _ = crawler_for(html, parser)

    (article,) = crawler.extract(make_source(name="My Blog"))

    assert article.title == "Article from My Blog"
    assert article.url == "https://example.com/p/1"
    assert article.content == "continue"


def test_scans_article_links_without_containers(parser, make_source):
    html = f"""
    <html><body>
      <ul><li><a href="/story/abc">Big story</a> teaser text</li></ul>
      <a href="/contact">Contact</a>
      {PADDING}
    </body></html>
    """
    crawler, _ = crawler_for(html, parser)

    (article,) = crawler.extract(make_source())

    assert article.title == "Big story"
    assert article.url == "https://example.com/story/abc"
    assert article.content == "Big story teaser text"
    assert article.metadata["extracted_from"] == "link"


def test_emits_single_fallback_article(parser, make_source):
    html = f"<html><head><title>Hello</title></head><body>{PADDING}</body></html>"
    crawler, _ = crawler_for(html, parser)

    articles = crawler.extract(make_source())

    assert len(articles) == 1
    fallback = articles[0]
    assert fallback.is_fallback
    assert fallback.metadata["reason"] == "no_articles_found"
    assert fallback.title == "Hello"
    assert fallback.url == BASE
    assert fallback.content.startswith("Lorem ipsum")


def test_fetch_failure_propagates(parser, make_source):
    crawler = GenericWebsiteCrawler(fetcher=FakeFetcher(), parser=parser)
    with pytest.raises(FetchError):
        crawler.extract(make_source())


def test_supports_only_website_sources(make_source):
    crawler = GenericWebsiteCrawler(fetcher=FakeFetcher())
    assert crawler.supports(make_source(source_type="website"))
    assert not crawler.supports(make_source(source_type="rss"))


def test_large_malformed_page_goes_through_streaming_backend(make_source):
    seen = []
    parser = HtmlParser(on_select=lambda name, size: seen.append(name))
    blocks = "".join(
        f"<article><h2>Headline {i}</h2><p>Paragraph {i}</article>" for i in range(3)
    )
    html = (
        "<html><head><title>Big</title></head><body>"
        + blocks
        + "<div><span>"
        + "filler " * 100_000
        + "</body>"
    )
    assert len(html.encode("utf-8")) > 600_000
    crawler, _ = crawler_for(html, parser)

    articles = crawler.extract(make_source())

    assert seen == ["streaming"]
    assert [a.title for a in articles] == ["Headline 0", "Headline 1", "Headline 2"]


def test_deeply_nested_large_page_keeps_articles(make_source):
    seen = []
    parser = HtmlParser(on_select=lambda name, size: seen.append(name))
    blocks = "".join(
        f"<article><h2>Headline {i}</h2><p>Paragraph {i}</article>" for i in range(3)
    )
    html = (
        "<html><head><title>Deep</title></head><body>"
        + "<div>" * 300
        + blocks
        + "filler " * 100_000
        + "</body>"
    )
    assert len(html.encode("utf-8")) > 600_000
    crawler, _ = crawler_for(html, parser)

    articles = crawler.extract(make_source())

    assert seen == ["streaming"]
    assert [a.title for a in articles] == ["Headline 0", "Headline 1", "Headline 2"]


def test_large_page_fallback_keeps_page_title(make_source):
    html = (
        "<html><head><title>Big &amp; Busy Front Page</title></head><body><div>"
        + "filler " * 100_000
        + "</body>"
    )
    crawler, _ = crawler_for(html, HtmlParser())

    (article,) = crawler.extract(make_source())

    assert article.is_fallback
    assert article.title == "Big & Busy Front Page"
