"""Crawl orchestration for configured sources.

``crawl_source`` drives one source end to end:

    load source → smart crawl (or feed crawl) → for each article:
        fingerprint → skip if known → persist → enrich (if enabled)
    → stamp last crawl → append crawl log → notify

Exactly one crawl-log row is written per invocation, from a ``finally``
block, so even an unexpected failure leaves an audit record.  No exception
escapes: failures end up in the returned :class:`CrawlOutcome`.

Two crawls of the *same* source must not run concurrently; the dedup check
and the insert are not atomic across invocations.  Callers that may overlap
claim the source through ``gleaner.crawler.gate.crawl_gate`` first.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from gleaner.ai.enricher import ContentAnalysis, analyze_content, default_analysis
from gleaner.crawler.dedup import content_fingerprint, is_known
from gleaner.crawler.gate import SingleFlight, crawl_gate
from gleaner.crawler.smart import Fetch, crawl_feed, smart_crawl
from gleaner.db.account_settings import get_account_settings
from gleaner.db.analyses import create_analysis
from gleaner.db.articles import create_article
from gleaner.db.crawl_logs import append_crawl_log
from gleaner.db.models import AccountSettings, Article, Source
from gleaner.db.sources import get_source, list_active_sources, mark_crawled
from gleaner.notify import LogNotifier, Notifier
from gleaner.scraper.models import ArticleContent, PageType

logger = logging.getLogger(__name__)

Enrich = Callable[[str, str], ContentAnalysis]


@dataclass
class CrawlOutcome:
    """Result of one ``crawl_source`` call, mirrored into ``crawl_logs``."""

    source_id: int
    status: str = "success"
    articles_found: int = 0
    articles_added: int = 0
    error_message: Optional[str] = None
    started_at: int = 0
    completed_at: int = 0
    page_type: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status == "success"


@dataclass
class CrawlSummary:
    total_sources: int = 0
    success_count: int = 0
    partial_count: int = 0
    failed_count: int = 0
    skipped_count: int = 0
    total_articles_added: int = 0

    def add(self, outcome: CrawlOutcome) -> None:
        if outcome.status == "success":
            self.success_count += 1
        elif outcome.status == "partial":
            self.partial_count += 1
        else:
            self.failed_count += 1
        self.total_articles_added += outcome.articles_added


# ---------------------------------------------------------------------------
# Per-article steps
# ---------------------------------------------------------------------------

def _timestamp(article: ArticleContent) -> Optional[int]:
    if article.published_at is None:
        return None
    try:
        return int(article.published_at.timestamp())
    except (OverflowError, OSError, ValueError):
        return None


def _enrich(conn: sqlite3.Connection, stored: Article, enrich: Enrich) -> None:
    """Attach an AI analysis to *stored*, substituting a default on failure."""
    try:
        analysis = enrich(stored.title, stored.content_text)
    except Exception as exc:  # noqa: BLE001
        logger.warning("[pipeline] AI analysis failed for %r: %s", stored.title, exc)
        analysis = default_analysis(stored.content_text)

    try:
        create_analysis(
            conn,
            stored.id,
            summary=analysis.summary,
            key_points=analysis.key_points,
            tags=analysis.tags,
            topic=analysis.topic,
        )
    except sqlite3.Error:
        logger.exception("[pipeline] could not store analysis for article %d", stored.id)


def _store_article(
    conn: sqlite3.Connection,
    source: Source,
    page_type: PageType,
    article: ArticleContent,
) -> Optional[Article]:
    """Persist *article* unless its content is already known.

    Returns the stored row, or ``None`` for a duplicate.
    """
    fingerprint = content_fingerprint(article.content)
    if is_known(conn, fingerprint):
        logger.info("[pipeline] already stored: %r", article.title)
        return None

    try:
        return create_article(
            conn,
            source_id=source.id,
            user_id=source.user_id,
            title=article.title,
            original_url=article.url,
            content_text=article.content,
            content_hash=fingerprint,
            page_type=page_type.value,
            author=article.author,
            published_at=_timestamp(article),
        )
    except sqlite3.IntegrityError:
        # Lost a race against another crawl inserting the same content.
        logger.info("[pipeline] already stored: %r", article.title)
        return None


# ---------------------------------------------------------------------------
# Finalisation
# ---------------------------------------------------------------------------

def _record(conn: sqlite3.Connection, outcome: CrawlOutcome) -> None:
    try:
        append_crawl_log(
            conn,
            source_id=outcome.source_id,
            status=outcome.status,
            articles_found=outcome.articles_found,
            articles_added=outcome.articles_added,
            started_at=outcome.started_at,
            completed_at=outcome.completed_at,
            error_message=outcome.error_message,
        )
    except sqlite3.Error:
        logger.exception("[pipeline] could not write crawl log for source %d", outcome.source_id)


def _notify(
    notifier: Notifier,
    source: Optional[Source],
    account: Optional[AccountSettings],
    outcome: CrawlOutcome,
) -> None:
    if account is not None and not account.notification_enabled:
        return
    name = source.name if source is not None else f"#{outcome.source_id}"
    if outcome.status == "success" and outcome.articles_added > 0:
        title = "Crawl succeeded"
        body = f'Source "{name}" added {outcome.articles_added} new article(s)'
    elif outcome.status == "failed":
        title = "Crawl failed"
        body = f'Source "{name}" failed: {outcome.error_message}'
    else:
        return

    try:
        notifier.notify(title, body)
    except Exception as exc:  # noqa: BLE001
        logger.warning("[pipeline] notification dropped: %s", exc)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def crawl_source(
    conn: sqlite3.Connection,
    source_id: int,
    fetch: Optional[Fetch] = None,
    enrich: Optional[Enrich] = None,
    notifier: Optional[Notifier] = None,
    cancel: Optional[threading.Event] = None,
) -> CrawlOutcome:
    """Crawl one source and persist whatever new content it yields.

    Args:
        conn: Open, initialised DB connection.
        source_id: Id of the row in ``sources``.
        fetch: Page fetcher override (tests, custom transports).
        enrich: LLM analysis override; defaults to
            :func:`~gleaner.ai.enricher.analyze_content`.
        notifier: Sink for the completion notification; defaults to
            :class:`~gleaner.notify.LogNotifier`.
        cancel: Optional event that stops a multi-link crawl between links.

    Returns:
        The :class:`CrawlOutcome`; ``status`` is ``failed`` when the source is
        missing, its URL could not be fetched or no article could be stored
        because of an error, ``partial`` when every extracted article was
        already stored, and ``success`` otherwise.
    """
    enrich = enrich or analyze_content
    notifier = notifier or LogNotifier()
    outcome = CrawlOutcome(source_id=source_id, started_at=int(time.time()))
    source: Optional[Source] = None
    account: Optional[AccountSettings] = None

    try:
        source = get_source(conn, source_id)
        if source is None:
            raise LookupError(f"Source not found: {source_id}")
        account = get_account_settings(conn, source.user_id)

        logger.info("[pipeline] crawling %r (%s)", source.name, source.url)
        crawl = crawl_feed if source.source_type == "rss" else smart_crawl
        result = crawl(source.url, fetch=fetch, cancel=cancel)
        outcome.page_type = result.page_type.value
        outcome.articles_found = len(result.articles)

        duplicates = 0
        failures = 0
        last_error = ""
        for article in result.articles:
            try:
                stored = _store_article(conn, source, result.page_type, article)
            except Exception as exc:  # noqa: BLE001
                logger.exception("[pipeline] could not store %s", article.url)
                failures += 1
                last_error = str(exc) or exc.__class__.__name__
                continue
            if stored is None:
                duplicates += 1
                continue
            outcome.articles_added += 1
            if account.ai_enabled:
                _enrich(conn, stored, enrich)

        mark_crawled(conn, source_id)

        if failures:
            if outcome.articles_added == 0:
                outcome.status = "failed"
            outcome.error_message = f"{failures} article(s) could not be stored: {last_error}"
        elif outcome.articles_found > 0 and duplicates == outcome.articles_found:
            outcome.status = "partial"
            outcome.error_message = "All articles already exist"
    except Exception as exc:  # noqa: BLE001
        logger.error("[pipeline] crawl of source %d failed: %s", source_id, exc)
        outcome.status = "failed"
        outcome.error_message = str(exc) or exc.__class__.__name__
    finally:
        outcome.completed_at = int(time.time())
        _record(conn, outcome)

    logger.info(
        "[pipeline] source %d: %s, %d found, %d added",
        source_id,
        outcome.status,
        outcome.articles_found,
        outcome.articles_added,
    )
    _notify(notifier, source, account, outcome)
    return outcome


def is_due(source: Source, now: Optional[int] = None) -> bool:
    """Return ``True`` if *source* has never been crawled or its interval elapsed."""
    if source.last_crawled_at is None:
        return True
    now = int(time.time()) if now is None else now
    return now - source.last_crawled_at >= source.crawl_interval


def crawl_active_sources(
    conn: sqlite3.Connection,
    due_only: bool = False,
    gate: Optional[SingleFlight] = None,
    **kwargs,
) -> CrawlSummary:
    """Crawl every active source once, one after another.

    A source already being crawled elsewhere in this process is skipped and
    counted in ``skipped_count``; no crawl log is written for it.

    Args:
        conn: Open, initialised DB connection.
        due_only: Skip sources whose ``crawl_interval`` has not yet elapsed.
        gate: Single-flight gate to claim each source through; defaults to
            the process-wide :data:`~gleaner.crawler.gate.crawl_gate`.
        **kwargs: Forwarded to :func:`crawl_source`.
    """
    gate = gate or crawl_gate
    sources = list_active_sources(conn)
    if due_only:
        sources = [s for s in sources if is_due(s)]

    summary = CrawlSummary(total_sources=len(sources))
    for source in sources:
        with gate.hold(source.id) as acquired:
            if not acquired:
                logger.info("[pipeline] source %d is already being crawled; skipped", source.id)
                summary.skipped_count += 1
                continue
            summary.add(crawl_source(conn, source.id, **kwargs))
    return summary
