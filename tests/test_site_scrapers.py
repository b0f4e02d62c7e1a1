from conftest import PADDING, RSS_SNIPPET, FakeFetcher
from news_platform.core.config import CrawlerSettings
from news_platform.scrapers.bbc_news import BbcNewsScraper
from news_platform.scrapers.cnn_news import CnnNewsScraper

CNN = "https://edition.cnn.com"


def cnn_listing(*hrefs):
    links = "".join(f'<a class="container__link" href="{h}">link</a>' for h in hrefs)
    return f"<html><head><title>CNN Home</title></head><body>{links}{PADDING}</body></html>"


def cnn_article(headline, paragraphs, author="By Jane Doe"):
    body = "".join(f"<p>{p}</p>" for p in paragraphs)
    return f"""
    <html><head><title>{headline} | CNN</title></head><body>
      <h1 class="headline__text">{headline}</h1>
      <div class="byline__authors">{author}</div>
      <div class="article__content">{body}</div>
      {PADDING}
    </body></html>
    """


def cnn_scraper(responses, sleeps, **settings):
    fetcher = FakeFetcher(responses)
    scraper = CnnNewsScraper(
        fetcher=fetcher, settings=CrawlerSettings(**settings), sleep=sleeps.append
    )
    return scraper, fetcher


def test_cnn_follows_listing_links(make_source):
    sleeps = []
    scraper, fetcher = cnn_scraper(
        {
            CNN: cnn_listing("/2024/01/01/a.html", "/2024/01/01/b.html", "/2024/01/01/a.html"),
            f"{CNN}/2024/01/01/a.html": cnn_article(
                "Story A", ["Short.", "The first real paragraph.", "The second real paragraph."]
            ),
            f"{CNN}/2024/01/01/b.html": cnn_article("Story B", ["Another long paragraph."]),
        },
        sleeps,
    )

    articles = scraper.extract(make_source(name="CNN", base_url="edition.cnn.com"))

    assert fetcher.calls[0] == CNN
    assert [a.title for a in articles] == ["Story A", "Story B"]
    first = articles[0]
    assert first.url == f"{CNN}/2024/01/01/a.html"
    assert first.content == "The first real paragraph.\n\nThe second real paragraph."
    assert first.author == "By Jane Doe"
    assert first.metadata["parsed_from"] == "article_page"
    assert first.metadata["crawler"] == "cnn_news"
    assert len(sleeps) == 1
    assert 0 < sleeps[0] <= 0.5


def test_cnn_caps_detail_fetches_and_skips_failures(make_source):
    sleeps = []
    hrefs = [f"/2024/story-{i}.html" for i in range(5)]
    responses = {CNN: cnn_listing(*hrefs)}
    for i in (0, 2):
        responses[f"{CNN}/2024/story-{i}.html"] = cnn_article(f"Story {i}", ["Long enough paragraph."])
    scraper, fetcher = cnn_scraper(responses, sleeps, max_detail_pages=3)

    articles = scraper.extract(make_source(base_url=CNN))

    assert fetcher.calls[1:] == [f"{CNN}/2024/story-{i}.html" for i in range(3)]
    assert [a.title for a in articles] == ["Story 0", "Story 2"]


def test_cnn_fallback_reasons(make_source):
    sleeps = []
    source = make_source(name="CNN", base_url=CNN)

    scraper, _ = cnn_scraper({CNN: cnn_listing()}, sleeps)
    (no_links,) = scraper.extract(source)
    assert no_links.is_fallback
    assert no_links.metadata["reason"] == "no_links_found"
    assert no_links.title == "CNN Home"

    scraper, _ = cnn_scraper({CNN: cnn_listing("/gone.html")}, sleeps)
    (none_created,) = scraper.extract(source)
    assert none_created.metadata["reason"] == "no_articles_created"

    scraper, _ = cnn_scraper({CNN: "<p>tiny</p>"}, sleeps)
    (broken,) = scraper.extract(source)
    assert broken.metadata["reason"] == "parse_error"
    assert "parse_error" in broken.metadata
    assert broken.title == "CNN News - CNN"
    assert broken.content == "tiny"


def test_bbc_prefers_feed(make_source):
    base = "https://www.bbc.com/news"
    fetcher = FakeFetcher({f"{base}/feed": RSS_SNIPPET})
    scraper = BbcNewsScraper(fetcher=fetcher)

    (article,) = scraper.extract(make_source(base_url=base))

    assert fetcher.calls == [f"{base}/feed"]
    assert article.title == "Feed headline"
    assert article.metadata["crawler"] == "bbc_news"
    assert article.metadata["feed_type"] == "rss"


def test_bbc_falls_back_to_website_cards(make_source):
    base = "https://www.bbc.com/news"
    html = f"""
    <html><head><title>BBC News</title></head><body>
      <div data-testid="card">
        <a href="/news/articles/1"><h2 data-testid="card-headline">Card headline</h2></a>
        <p data-testid="card-description">Card summary</p>
      </div>
      {PADDING}
    </body></html>
    """
    fetcher = FakeFetcher({base: html})
    scraper = BbcNewsScraper(fetcher=fetcher)

    (article,) = scraper.extract(make_source(base_url=base))

    assert fetcher.calls == [f"{base}/feed", base]
    assert article.title == "Card headline"
    assert article.url == "https://www.bbc.com/news/articles/1"
    assert article.content == "Card summary"
    assert article.metadata["parsed_from"] == "website"


def test_bbc_fallback_article_when_page_has_no_cards(make_source):
    base = "https://www.bbc.co.uk"
    fetcher = FakeFetcher(
        {base: f"<html><head><title>Home</title></head><body>{PADDING}</body></html>"}
    )

    (article,) = BbcNewsScraper(fetcher=fetcher).extract(make_source(base_url=base))

    assert article.is_fallback
    assert article.title == "Home"
    assert article.url == base


def test_site_scrapers_match_by_domain(make_source):
    bbc = BbcNewsScraper(fetcher=FakeFetcher())
    cnn = CnnNewsScraper(fetcher=FakeFetcher())
    assert bbc.supports(make_source(base_url="https://www.bbc.co.uk/news"))
    assert not bbc.supports(make_source(base_url="https://example.com"))
    assert cnn.supports(make_source(base_url="edition.cnn.com"))
    assert not cnn.supports(make_source(base_url="https://www.cnn.com"))


def test_cnn_listing_links_are_cleaned_and_deduped(parser):
    scraper = CnnNewsScraper(fetcher=FakeFetcher({}), sleep=lambda s: None)
    listing = parser.parse(
        cnn_listing(
            "/2024/a.html?utm_source=homepage",
            "/2024/a.html#comments",
            "mailto:tips@cnn.com",
            "https://edition.cnn.com/2024/b.html",
        )
    )

    links = scraper.collect_links(listing, CNN)

    assert links == [f"{CNN}/2024/a.html", f"{CNN}/2024/b.html"]
