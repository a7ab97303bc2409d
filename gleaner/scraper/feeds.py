"""RSS 2.0 / Atom feed parsing."""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Union

import feedparser
from bs4 import BeautifulSoup

from gleaner.scraper.classifier import normalized_text
from gleaner.scraper.models import ArticleContent

logger = logging.getLogger(__name__)


@dataclass
class FeedEntry:
    """One feed item, before the article quality gate is applied."""

    title: str
    link: str
    content: str
    author: Optional[str] = None
    published_at: Optional[datetime] = None

    def to_article(self) -> ArticleContent:
        return ArticleContent(
            title=self.title,
            content=self.content,
            url=self.link,
            author=self.author,
            published_at=self.published_at,
        )


def _html_to_text(fragment: str) -> str:
    if not fragment:
        return ""
    return normalized_text(BeautifulSoup(fragment, "html.parser"))


def _entry_date(entry) -> Optional[datetime]:  # type: ignore[no-untyped-def]
    for key in ("published_parsed", "updated_parsed"):
        parsed = entry.get(key)
        if parsed:
            try:
                return datetime(*parsed[:6])
            except (TypeError, ValueError):
                continue
    return None


def _entry_body(entry) -> str:  # type: ignore[no-untyped-def]
    contents = entry.get("content") or []
    if contents:
        return contents[0].get("value", "")
    return entry.get("summary", "") or entry.get("description", "")


def parse_feed(
    url: str, document: Union[str, bytes], max_entries: int = 20
) -> List[FeedEntry]:
    """Parse a feed document into at most *max_entries* :class:`FeedEntry` items.

    Entry titles fall back to ``"Untitled"`` and links fall back to the feed
    URL itself.  A document that feedparser cannot make sense of yields an
    empty list rather than raising.

    *document* is always parsed as feed markup; it is handed to feedparser as
    a stream so a body that looks like a path or URL is never opened.
    """
    data = document.encode("utf-8") if isinstance(document, str) else document
    feed = feedparser.parse(io.BytesIO(data))
    if feed.bozo and not feed.entries:
        logger.warning("[feed] %s is not a parsable feed: %s", url, feed.get("bozo_exception"))
        return []

    entries: List[FeedEntry] = []
    for entry in feed.entries[:max_entries]:
        author = (entry.get("author") or "").strip() or None
        entries.append(
            FeedEntry(
                title=(entry.get("title") or "").strip() or "Untitled",
                link=(entry.get("link") or "").strip() or url,
                content=_html_to_text(_entry_body(entry)),
                author=author,
                published_at=_entry_date(entry),
            )
        )
    return entries
