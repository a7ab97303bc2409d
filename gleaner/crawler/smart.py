"""Smart crawling of a single URL: article page, list page, or feed.

``smart_crawl`` runs:

    fetch → classify → extract the page itself | extract each child link

List pages are followed exactly one level deep and child links are fetched
strictly one after another with ``settings.crawl_delay`` seconds between
requests.  Nothing here touches the database.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, List, Optional

from gleaner.config import settings
from gleaner.scraper.classifier import classify_page
from gleaner.scraper.extractor import extract_article, meets_quality_bar, parse_article
from gleaner.scraper.feeds import parse_feed
from gleaner.scraper.fetcher import fetch_url
from gleaner.scraper.models import ArticleContent, MultiArticleResult, PageType, RawPage

logger = logging.getLogger(__name__)

Fetch = Callable[[str], RawPage]


def _extract_sequentially(
    urls: List[str],
    fetch: Fetch,
    cancel: Optional[threading.Event],
) -> List[ArticleContent]:
    """Extract *urls* one at a time, pausing between requests.

    A URL that cannot be fetched or fails the quality gate contributes
    nothing; the remaining URLs are still attempted.
    """
    articles: List[ArticleContent] = []
    for index, url in enumerate(urls):
        if cancel is not None and cancel.is_set():
            logger.info("[smart crawl] cancelled with %d link(s) left", len(urls) - index)
            break
        if index > 0:
            time.sleep(settings.crawl_delay)
        article = extract_article(url, fetch=fetch)
        if article is not None:
            logger.info("[smart crawl] extracted %r", article.title)
            articles.append(article)
    return articles


def smart_crawl(
    url: str,
    fetch: Optional[Fetch] = None,
    cancel: Optional[threading.Event] = None,
) -> MultiArticleResult:
    """Crawl *url*, following child links when it is a list page.

    Args:
        url: The page to crawl.
        fetch: Page fetcher; defaults to :func:`~gleaner.scraper.fetcher.fetch_url`.
        cancel: Optional event; once set, no further child links are fetched.

    Returns:
        A :class:`MultiArticleResult`.  ``total_found`` is the number of child
        links for list pages and 1 otherwise.

    Raises:
        FetchError: If *url* itself cannot be fetched.
    """
    fetch = fetch or fetch_url
    raw = fetch(url)
    analysis = classify_page(url, raw.html)
    logger.info(
        "[smart crawl] %s → %s (%.2f): %s",
        url,
        analysis.page_type.value,
        analysis.confidence,
        analysis.reason,
    )

    if analysis.page_type is PageType.LIST and analysis.child_links:
        logger.info("[smart crawl] following %d child link(s)", len(analysis.child_links))
        articles = _extract_sequentially(analysis.child_links, fetch, cancel)
        total_found = len(analysis.child_links)
    else:
        # Article and unknown verdicts are both extracted directly; the page
        # has already been fetched, so its markup is reused.
        article = parse_article(url, raw.html)
        articles = [article] if article is not None else []
        total_found = 1

    return MultiArticleResult(
        source_url=url,
        page_type=analysis.page_type,
        articles=articles,
        total_found=total_found,
        processed=len(articles),
    )


def crawl_feed(
    url: str,
    fetch: Optional[Fetch] = None,
    cancel: Optional[threading.Event] = None,
) -> MultiArticleResult:
    """Crawl an RSS/Atom feed.

    Entries that carry enough text are used as-is.  Entries with only a stub
    summary are fetched and extracted from their link instead, bounded to
    ``settings.max_child_links`` fetches.

    Raises:
        FetchError: If the feed itself cannot be fetched.
    """
    fetch = fetch or fetch_url
    raw = fetch(url)
    # Raw bytes keep the encoding declared in the XML prolog.
    entries = parse_feed(url, raw.content or raw.html, max_entries=settings.max_feed_entries)
    logger.info("[feed] %s → %d entr(y/ies)", url, len(entries))

    articles: List[ArticleContent] = []
    stub_links: List[str] = []
    for entry in entries:
        if meets_quality_bar(entry.title, entry.content):
            articles.append(entry.to_article())
        elif entry.link != url and entry.link not in stub_links:
            stub_links.append(entry.link)

    if stub_links:
        articles.extend(
            _extract_sequentially(stub_links[: settings.max_child_links], fetch, cancel)
        )

    return MultiArticleResult(
        source_url=url,
        page_type=PageType.LIST,
        articles=articles,
        total_found=len(entries),
        processed=len(articles),
    )
