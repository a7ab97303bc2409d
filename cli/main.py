"""Gleaner CLI: entry-point for crawling and source management.

Usage:
    python cli/main.py --help

Command groups:
    db        → database setup
    source    → register and list sources
    classify  → page classification only
    scrape    → single-article extraction preview
    crawl     → smart crawl of a URL, one source, or all active sources
    logs      → crawl history of a source
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from gleaner.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import logging
from typing import Optional

import typer

from gleaner.config import settings
from gleaner.db import get_connection, init_db
from gleaner.db.crawl_logs import list_crawl_logs
from gleaner.db.sources import create_source, get_source, list_sources
from gleaner.scraper.fetcher import FetchError

app = typer.Typer(
    name="gleaner",
    help="Gleaner crawling CLI.",
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level."),
) -> None:
    """Configure logging for every sub-command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _open_db():  # type: ignore[no-untyped-def]
    conn = get_connection()
    init_db(conn)
    return conn


# ---------------------------------------------------------------------------
# DB commands
# ---------------------------------------------------------------------------
db_app = typer.Typer(help="Database operations.", no_args_is_help=True)
app.add_typer(db_app, name="db")


@db_app.command("init")
def db_init() -> None:
    """Initialise the SQLite database (create tables if they do not exist)."""
    conn = _open_db()
    conn.close()
    typer.echo(f"[db init] Database ready at {settings.db_path}")


# ---------------------------------------------------------------------------
# Source commands
# ---------------------------------------------------------------------------
source_app = typer.Typer(help="Manage crawl sources.", no_args_is_help=True)
app.add_typer(source_app, name="source")


@source_app.command("add")
def source_add(
    url: str = typer.Argument(..., help="URL of the site, list page or feed."),
    name: str = typer.Option(..., "--name", help="Display name."),
    source_type: str = typer.Option(
        "website", "--type", help="Source type: website | rss | wechat | zhihu."
    ),
    user_id: int = typer.Option(1, "--user", help="Owning user id."),
    interval: int = typer.Option(3600, "--interval", help="Crawl interval in seconds."),
) -> None:
    """Register a new source."""
    conn = _open_db()
    try:
        source = create_source(
            conn,
            user_id=user_id,
            name=name,
            url=url,
            source_type=source_type,
            crawl_interval=interval,
        )
    except ValueError as exc:
        typer.echo(f"[source add] {exc}")
        raise typer.Exit(1)
    finally:
        conn.close()
    typer.echo(f"[source add] Created source {source.id}  name={source.name!r}  type={source.source_type}")


@source_app.command("list")
def source_list(
    user_id: Optional[int] = typer.Option(None, "--user", help="Filter by user id."),
) -> None:
    """List registered sources."""
    conn = _open_db()
    sources = list_sources(conn, user_id=user_id)
    conn.close()
    if not sources:
        typer.echo("[source list] No sources found.")
        return
    for s in sources:
        state = "active" if s.is_active else "paused"
        typer.echo(f"  {s.id}  [{s.source_type}]  {s.name!r}  {s.url}  ({state})")


# ---------------------------------------------------------------------------
# Classify / scrape commands
# ---------------------------------------------------------------------------
@app.command("classify")
def classify(
    url: str = typer.Argument(..., help="URL to classify."),
) -> None:
    """Fetch a URL and print its page classification."""
    from gleaner.scraper import classify_page, fetch_url

    try:
        raw = fetch_url(url)
    except FetchError as exc:
        typer.echo(f"[classify] {exc}")
        raise typer.Exit(1)

    analysis = classify_page(url, raw.html)
    typer.echo(f"[classify] Type       : {analysis.page_type.value}")
    typer.echo(f"[classify] Confidence : {analysis.confidence:.2f}")
    typer.echo(f"[classify] Reason     : {analysis.reason}")
    for link in analysis.child_links or []:
        typer.echo(f"  → {link}")


@app.command("scrape")
def scrape(
    url: str = typer.Argument(..., help="URL of an article page."),
) -> None:
    """Extract a single article and print it to stdout."""
    from gleaner.scraper import extract_article

    typer.echo(f"[scrape] Fetching {url!r} …")
    article = extract_article(url)
    if article is None:
        typer.echo("[scrape] No article could be extracted.")
        raise typer.Exit(1)

    typer.echo(f"[scrape] Title     : {article.title}")
    typer.echo(f"[scrape] Author    : {article.author or '(none)'}")
    typer.echo(f"[scrape] Published : {article.published_at or '(unknown)'}")
    typer.echo(f"[scrape] Chars     : {len(article.content)}")
    typer.echo("")
    typer.echo(article.content)


# ---------------------------------------------------------------------------
# Crawl commands
# ---------------------------------------------------------------------------
crawl_app = typer.Typer(help="Smart crawling.", no_args_is_help=True)
app.add_typer(crawl_app, name="crawl")


@crawl_app.command("url")
def crawl_url(
    url: str = typer.Argument(..., help="Article or list page to crawl."),
) -> None:
    """Smart-crawl a URL without storing anything."""
    from gleaner.crawler import smart_crawl

    try:
        result = smart_crawl(url)
    except FetchError as exc:
        typer.echo(f"[crawl url] {exc}")
        raise typer.Exit(1)

    typer.echo(
        f"[crawl url] {result.page_type.value} page: "
        f"{result.processed}/{result.total_found} article(s) extracted"
    )
    for article in result.articles:
        typer.echo(f"  {article.title!r}  {article.url}")


@crawl_app.command("source")
def crawl_source_cmd(
    source_id: int = typer.Argument(..., help="Id of the source to crawl."),
) -> None:
    """Crawl one source and store its new articles."""
    from gleaner.crawler import crawl_source

    conn = _open_db()
    try:
        outcome = crawl_source(conn, source_id)
    finally:
        conn.close()

    typer.echo(
        f"[crawl source] {outcome.status}: "
        f"{outcome.articles_found} found, {outcome.articles_added} added"
    )
    if outcome.error_message:
        typer.echo(f"[crawl source] {outcome.error_message}")
    if outcome.status == "failed":
        raise typer.Exit(1)


@crawl_app.command("all")
def crawl_all(
    due_only: bool = typer.Option(False, "--due-only", help="Skip sources crawled within their interval."),
) -> None:
    """Crawl every active source, one after another."""
    from gleaner.crawler import crawl_active_sources

    conn = _open_db()
    try:
        summary = crawl_active_sources(conn, due_only=due_only)
    finally:
        conn.close()

    typer.echo(
        f"[crawl all] {summary.total_sources} source(s): "
        f"{summary.success_count} succeeded, {summary.partial_count} partial, "
        f"{summary.failed_count} failed, {summary.skipped_count} skipped; "
        f"{summary.total_articles_added} article(s) added"
    )


# ---------------------------------------------------------------------------
# Logs
# ---------------------------------------------------------------------------
@app.command("logs")
def logs(
    source_id: int = typer.Argument(..., help="Source id."),
    limit: int = typer.Option(20, "--limit", help="Maximum rows to show."),
) -> None:
    """Show the crawl history of a source, newest first."""
    conn = _open_db()
    try:
        if get_source(conn, source_id) is None:
            typer.echo(f"[logs] Source not found: {source_id}")
            raise typer.Exit(1)
        entries = list_crawl_logs(conn, source_id, limit=limit)
    finally:
        conn.close()

    if not entries:
        typer.echo("[logs] No crawls recorded yet.")
        return
    for log in entries:
        line = (
            f"  {log.started_at}  {log.status:<8}"
            f"  found={log.articles_found}  added={log.articles_added}"
        )
        if log.error_message:
            line += f"  ({log.error_message})"
        typer.echo(line)


if __name__ == "__main__":
    app()
