"""Tests for article extraction (selector chain, metadata, quality gate)."""

from __future__ import annotations

from datetime import datetime

from gleaner.scraper.extractor import extract_article, meets_quality_bar, parse_article
from gleaner.scraper.fetcher import FetchError
from gleaner.scraper.models import RawPage

_URL = "https://news.example.com/stories/ocean-currents"

_BODY_TEXT = (
    "Ocean currents move enormous volumes of water across the planet every day, "
    "carrying heat from the equator toward the poles. The Gulf Stream is one of "
    "the strongest of these flows, and it keeps the winters of western Europe "
    "far milder than their latitude suggests."
)

_ARTICLE_HTML = f"""\
<html>
<head><title>Ocean Currents Explained | Tide Weekly</title></head>
<body>
  <header>Tide Weekly</header>
  <nav><a href="/">Home</a></nav>
  <article>
    <h1>Ocean Currents Explained</h1>
    <span class="author">Jane Doe</span>
    <time datetime="2024-03-01T10:00:00">1 March 2024</time>
    <p>{_BODY_TEXT}</p>
  </article>
  <footer>Copyright Tide Weekly</footer>
</body>
</html>
"""


class TestParseArticle:
    def test_extracts_all_fields(self) -> None:
        article = parse_article(_URL, _ARTICLE_HTML)
        assert article is not None
        assert article.title == "Ocean Currents Explained"
        assert article.url == _URL
        assert article.author == "Jane Doe"
        assert article.published_at == datetime(2024, 3, 1, 10, 0)
        assert _BODY_TEXT in article.content
        assert "Copyright" not in article.content
        assert "Home" not in article.content

    def test_title_falls_back_to_title_tag(self) -> None:
        html = f"<html><head><title>Only a title</title></head><body><main><p>{_BODY_TEXT}</p></main></body></html>"
        article = parse_article(_URL, html)
        assert article is not None
        assert article.title == "Only a title"

    def test_missing_title_is_rejected(self) -> None:
        html = f"<html><body><main><p>{_BODY_TEXT}</p></main></body></html>"
        assert parse_article(_URL, html) is None

    def test_short_content_is_rejected(self) -> None:
        html = "<html><body><h1>Teaser</h1><p>Subscribe to read more.</p></body></html>"
        assert parse_article(_URL, html) is None

    def test_strips_sidebars_and_comments(self) -> None:
        html = (
            "<html><body><h1>Currents</h1>"
            f'<div class="post-content"><p>{_BODY_TEXT}</p>'
            '<div class="sidebar">Related links</div>'
            '<div class="comment">First!</div></div>'
            "</body></html>"
        )
        article = parse_article(_URL, html)
        assert article is not None
        assert "Related links" not in article.content
        assert "First!" not in article.content

    def test_small_container_falls_back_to_body(self) -> None:
        html = (
            "<html><body><h1>Currents</h1>"
            "<article><p>A brief standfirst.</p></article>"
            f"<div><p>{_BODY_TEXT}</p></div>"
            "</body></html>"
        )
        article = parse_article(_URL, html)
        assert article is not None
        assert "A brief standfirst." in article.content
        assert _BODY_TEXT in article.content

    def test_unparsable_date_is_none(self) -> None:
        html = (
            '<html><body><h1>Currents</h1><span class="date">sometime soon</span>'
            f"<main><p>{_BODY_TEXT}</p></main></body></html>"
        )
        article = parse_article(_URL, html)
        assert article is not None
        assert article.published_at is None

    def test_date_from_element_text(self) -> None:
        html = (
            '<html><body><h1>Currents</h1><span class="published">2024-05-06</span>'
            f"<main><p>{_BODY_TEXT}</p></main></body></html>"
        )
        article = parse_article(_URL, html)
        assert article is not None
        assert article.published_at == datetime(2024, 5, 6)

    def test_script_variable_metadata(self) -> None:
        html = (
            "<html><head><script>"
            'var nickname = "Tide Watch";\n'
            'var publish_time = "2024-05-06";'
            "</script></head><body>"
            f"<h1>Currents</h1><div><p>{_BODY_TEXT}</p></div></body></html>"
        )
        article = parse_article(_URL, html)
        assert article is not None
        assert article.author == "Tide Watch"
        assert article.published_at == datetime(2024, 5, 6)
        assert "nickname" not in article.content

    def test_unix_timestamp_script_variable(self) -> None:
        html = (
            "<html><head><script>var publish_time = '1714953600';</script></head>"
            f"<body><h1>Currents</h1><div><p>{_BODY_TEXT}</p></div></body></html>"
        )
        article = parse_article(_URL, html)
        assert article is not None
        assert article.published_at == datetime.fromtimestamp(1714953600)

    def test_empty_markup_is_rejected(self) -> None:
        assert parse_article(_URL, "") is None


class TestQualityBar:
    def test_requires_title(self) -> None:
        assert not meets_quality_bar("  ", "x" * 500)

    def test_requires_minimum_length(self) -> None:
        assert not meets_quality_bar("Title", "x" * 99)
        assert meets_quality_bar("Title", "x" * 100)


class TestExtractArticle:
    def test_fetches_and_parses(self) -> None:
        calls = []

        def fetch(url: str) -> RawPage:
            calls.append(url)
            return RawPage(url=url, html=_ARTICLE_HTML, status_code=200)

        article = extract_article(_URL, fetch=fetch)
        assert calls == [_URL]
        assert article is not None
        assert article.title == "Ocean Currents Explained"

    def test_fetch_error_yields_none(self) -> None:
        def fetch(url: str) -> RawPage:
            raise FetchError(url, f"HTTP 404 fetching {url}")

        assert extract_article(_URL, fetch=fetch) is None
