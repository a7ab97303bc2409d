"""Tests for the gleaner CLI.

Each test points the workspace at ``tmp_path`` so the on-disk database is
fresh.  Network-facing functions are monkeypatched.
"""

from __future__ import annotations

import pytest
from typer.testing import CliRunner

from cli.main import app
from gleaner.crawler.pipeline import CrawlOutcome, CrawlSummary
from gleaner.db import get_connection, init_db
from gleaner.db.crawl_logs import append_crawl_log
from gleaner.db.sources import create_source, list_sources
from gleaner.scraper.fetcher import FetchError
from gleaner.scraper.models import ArticleContent, MultiArticleResult, PageType, RawPage

runner = CliRunner()

_ARTICLE_HTML = (
    "<html><body><article><h1>Spring tides</h1>"
    + "<p>The moon and sun line up twice a month.</p>" * 6
    + "</article></body></html>"
)


@pytest.fixture(autouse=True)
def workspace(tmp_path, monkeypatch):
    monkeypatch.setattr("gleaner.config.settings.workspace_dir", tmp_path)
    return tmp_path


def _seed_source():
    conn = get_connection()
    init_db(conn)
    try:
        return create_source(conn, user_id=1, name="Tide Weekly", url="https://tides.example.com")
    finally:
        conn.close()


class TestDbAndSources:
    def test_db_init(self, workspace) -> None:
        result = runner.invoke(app, ["db", "init"])
        assert result.exit_code == 0
        assert "Database ready" in result.output
        assert (workspace / "reading.db").exists()

    def test_source_add_and_list(self) -> None:
        result = runner.invoke(
            app, ["source", "add", "https://tides.example.com/feed.xml", "--name", "Tides", "--type", "rss"]
        )
        assert result.exit_code == 0
        assert "Created source" in result.output

        conn = get_connection()
        try:
            (source,) = list_sources(conn)
        finally:
            conn.close()
        assert source.source_type == "rss"

        result = runner.invoke(app, ["source", "list"])
        assert result.exit_code == 0
        assert "'Tides'" in result.output
        assert "[rss]" in result.output

    def test_source_add_unknown_type(self) -> None:
        result = runner.invoke(app, ["source", "add", "https://x.example.com", "--name", "X", "--type", "ftp"])
        assert result.exit_code == 1
        assert "Unknown source type" in result.output

    def test_source_list_empty(self) -> None:
        result = runner.invoke(app, ["source", "list"])
        assert result.exit_code == 0
        assert "No sources found" in result.output


class TestClassifyAndScrape:
    def test_classify(self, monkeypatch) -> None:
        monkeypatch.setattr(
            "gleaner.scraper.fetch_url",
            lambda url: RawPage(url=url, html=_ARTICLE_HTML, status_code=200),
        )
        result = runner.invoke(app, ["classify", "https://tides.example.com/spring"])
        assert result.exit_code == 0
        assert "article" in result.output
        assert "0.85" in result.output

    def test_classify_fetch_error(self, monkeypatch) -> None:
        def fail(url):
            raise FetchError(url, f"HTTP 500 fetching {url}")

        monkeypatch.setattr("gleaner.scraper.fetch_url", fail)
        result = runner.invoke(app, ["classify", "https://tides.example.com/spring"])
        assert result.exit_code == 1
        assert "HTTP 500" in result.output

    def test_scrape(self, monkeypatch) -> None:
        article = ArticleContent(title="Spring tides", content="Body text", url="https://t.example.com")
        monkeypatch.setattr("gleaner.scraper.extract_article", lambda url: article)
        result = runner.invoke(app, ["scrape", "https://t.example.com"])
        assert result.exit_code == 0
        assert "Spring tides" in result.output
        assert "Body text" in result.output

    def test_scrape_nothing_extracted(self, monkeypatch) -> None:
        monkeypatch.setattr("gleaner.scraper.extract_article", lambda url: None)
        result = runner.invoke(app, ["scrape", "https://t.example.com"])
        assert result.exit_code == 1


class TestCrawl:
    def test_crawl_url(self, monkeypatch) -> None:
        result_obj = MultiArticleResult(
            source_url="https://t.example.com/latest",
            page_type=PageType.LIST,
            articles=[ArticleContent(title="One", content="x", url="https://t.example.com/1")],
            total_found=2,
            processed=1,
        )
        monkeypatch.setattr("gleaner.crawler.smart_crawl", lambda url: result_obj)
        result = runner.invoke(app, ["crawl", "url", "https://t.example.com/latest"])
        assert result.exit_code == 0
        assert "list page: 1/2" in result.output
        assert "https://t.example.com/1" in result.output

    def test_crawl_url_fetch_error(self, monkeypatch) -> None:
        def fail(url):
            raise FetchError(url, f"Timed out fetching {url}")

        monkeypatch.setattr("gleaner.crawler.smart_crawl", fail)
        result = runner.invoke(app, ["crawl", "url", "https://t.example.com"])
        assert result.exit_code == 1
        assert "Timed out" in result.output

    def test_crawl_source(self, monkeypatch) -> None:
        monkeypatch.setattr(
            "gleaner.crawler.crawl_source",
            lambda conn, sid: CrawlOutcome(source_id=sid, articles_found=2, articles_added=2),
        )
        result = runner.invoke(app, ["crawl", "source", "1"])
        assert result.exit_code == 0
        assert "success: 2 found, 2 added" in result.output

    def test_crawl_source_failure_exits_nonzero(self, monkeypatch) -> None:
        monkeypatch.setattr(
            "gleaner.crawler.crawl_source",
            lambda conn, sid: CrawlOutcome(
                source_id=sid, status="failed", error_message=f"Source not found: {sid}"
            ),
        )
        result = runner.invoke(app, ["crawl", "source", "42"])
        assert result.exit_code == 1
        assert "Source not found: 42" in result.output

    def test_crawl_all(self, monkeypatch) -> None:
        seen = []

        def fake_all(conn, due_only=False):
            seen.append(due_only)
            return CrawlSummary(total_sources=2, success_count=2, total_articles_added=5)

        monkeypatch.setattr("gleaner.crawler.crawl_active_sources", fake_all)
        result = runner.invoke(app, ["crawl", "all", "--due-only"])
        assert result.exit_code == 0
        assert seen == [True]
        assert "2 source(s): 2 succeeded" in result.output
        assert "0 skipped" in result.output
        assert "5 article(s) added" in result.output


class TestLogs:
    def test_logs(self) -> None:
        source = _seed_source()
        conn = get_connection()
        try:
            append_crawl_log(conn, source.id, "partial", 3, 0, started_at=100, completed_at=101,
                             error_message="All articles already exist")
        finally:
            conn.close()

        result = runner.invoke(app, ["logs", str(source.id)])
        assert result.exit_code == 0
        assert "partial" in result.output
        assert "All articles already exist" in result.output

    def test_logs_empty(self) -> None:
        source = _seed_source()
        result = runner.invoke(app, ["logs", str(source.id)])
        assert result.exit_code == 0
        assert "No crawls recorded yet" in result.output

    def test_logs_unknown_source(self) -> None:
        result = runner.invoke(app, ["logs", "999"])
        assert result.exit_code == 1
        assert "Source not found" in result.output
