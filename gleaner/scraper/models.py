"""Data models for the scraper pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class PageType(str, Enum):
    """Verdict emitted by the page classifier."""

    ARTICLE = "article"
    LIST = "list"
    UNKNOWN = "unknown"


@dataclass
class RawPage:
    """The raw HTTP response for a single URL fetch."""

    url: str
    html: str
    status_code: int
    content: bytes = b""


@dataclass(frozen=True)
class PageAnalysis:
    """Classification of a fetched page.

    ``child_links`` is only populated for ``list`` verdicts where at least one
    candidate link survived filtering.
    """

    page_type: PageType
    confidence: float
    reason: str
    child_links: Optional[List[str]] = None


@dataclass
class ArticleContent:
    """A single extracted article, ready for dedup and persistence."""

    title: str
    content: str
    url: str
    author: Optional[str] = None
    published_at: Optional[datetime] = None


@dataclass
class MultiArticleResult:
    """Everything one smart crawl of a URL produced."""

    source_url: str
    page_type: PageType
    articles: List[ArticleContent] = field(default_factory=list)
    total_found: int = 0
    processed: int = 0
