"""Article extraction: turns a fetched page into an :class:`ArticleContent`."""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Callable, Optional

from bs4 import BeautifulSoup
from dateutil import parser as date_parser

from gleaner.scraper.classifier import normalized_text, strip_chrome
from gleaner.scraper.fetcher import FetchError, fetch_url
from gleaner.scraper.models import ArticleContent, RawPage

logger = logging.getLogger(__name__)

MIN_CONTENT_LENGTH = 100
MIN_CONTAINER_LENGTH = 200

_AUTHOR_SELECTOR = '[class*="author"], [class*="byline"], [rel="author"]'
_DATE_SELECTOR = 'time, [class*="date"], [class*="published"]'

_NON_CONTENT_TAGS = ["script", "style", "nav", "header", "footer", "aside"]
_NON_CONTENT_SELECTOR = ".sidebar, .comment, .ad, .advertisement"

_CONTENT_SELECTORS = [
    "article",
    ".post-content",
    ".entry-content",
    ".content",
    "main",
    "#content",
    ".article-body",
]

# Semi-structured sites (e.g. WeChat official accounts) expose metadata only
# through inline script variables.
_SCRIPT_VAR_RE = r"var\s+{name}\s*=\s*[\"']([^\"']+)[\"']"


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _script_var(html: str, name: str) -> str:
    match = re.search(_SCRIPT_VAR_RE.format(name=name), html, re.IGNORECASE)
    return match.group(1).strip() if match else ""


def _parse_date(value: str) -> Optional[datetime]:
    """Parse a free-form date string; unparsable values give ``None``."""
    value = value.strip()
    if not value:
        return None
    if value.isdigit() and len(value) >= 9:
        # Unix timestamp, as emitted by some script-variable metadata.
        try:
            return datetime.fromtimestamp(int(value))
        except (OverflowError, OSError, ValueError):
            return None
    try:
        return date_parser.parse(value)
    except (ValueError, OverflowError):
        return None


def _extract_title(soup: BeautifulSoup) -> str:
    h1 = soup.find("h1")
    title = normalized_text(h1)
    if not title and soup.title is not None:
        title = normalized_text(soup.title)
    return title


def _extract_author(soup: BeautifulSoup, html: str) -> Optional[str]:
    author = normalized_text(soup.select_one(_AUTHOR_SELECTOR))
    return author or _script_var(html, "nickname") or None


def _extract_published_at(soup: BeautifulSoup, html: str) -> Optional[datetime]:
    element = soup.select_one(_DATE_SELECTOR)
    raw = ""
    if element is not None:
        datetime_attr = element.get("datetime")
        if isinstance(datetime_attr, str) and datetime_attr.strip():
            raw = datetime_attr
        else:
            raw = normalized_text(element)
    if not raw:
        raw = _script_var(html, "publish_time")
    return _parse_date(raw) if raw else None


def _extract_main_text(soup: BeautifulSoup) -> str:
    """Return the best main-content block, falling back to the whole body."""
    strip_chrome(soup, _NON_CONTENT_TAGS)
    for tag in soup.select(_NON_CONTENT_SELECTOR):
        tag.decompose()

    for selector in _CONTENT_SELECTORS:
        text = normalized_text(soup.select_one(selector))
        if len(text) > MIN_CONTAINER_LENGTH:
            return text

    return normalized_text(soup.body or soup)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def meets_quality_bar(title: str, content: str) -> bool:
    """Return ``True`` when an article has a title and enough body text."""
    return bool(title.strip()) and len(content) >= MIN_CONTENT_LENGTH


def parse_article(url: str, html: str) -> Optional[ArticleContent]:
    """Extract an article from already-fetched *html*.

    Title, author and date are read before any markup is stripped.  Returns
    ``None`` when the page has no title or fewer than ``MIN_CONTENT_LENGTH``
    characters of content, which rejects chrome-only and paywalled stubs.
    """
    try:
        soup = BeautifulSoup(html or "", "html.parser")
        title = _extract_title(soup)
        author = _extract_author(soup, html or "")
        published_at = _extract_published_at(soup, html or "")
        content = _extract_main_text(soup)
    except Exception as exc:  # noqa: BLE001
        logger.warning("[extract] could not parse %s: %s", url, exc)
        return None

    if not meets_quality_bar(title, content):
        logger.debug(
            "[extract] rejected %s (title=%r, %d chars)", url, title, len(content)
        )
        return None

    return ArticleContent(
        title=title,
        content=content,
        url=url,
        author=author,
        published_at=published_at,
    )


def extract_article(
    url: str,
    fetch: Optional[Callable[[str], RawPage]] = None,
) -> Optional[ArticleContent]:
    """Fetch *url* and extract its article.

    Transport errors are logged and reported as ``None``; they never
    propagate to the caller.
    """
    try:
        raw = (fetch or fetch_url)(url)
    except FetchError as exc:
        logger.warning("[extract] %s", exc)
        return None
    return parse_article(url, raw.html)
