"""Dataclass models representing DB rows.

These are plain Python objects, not ORM models.  The DB layer serialises /
deserialises to and from these types.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Source:
    id: int
    user_id: int
    name: str
    source_type: str
    url: str
    description: str | None
    is_active: bool
    last_crawled_at: int | None
    crawl_interval: int
    created_at: int
    updated_at: int


@dataclass
class Article:
    id: int
    source_id: int
    user_id: int
    page_type: str
    title: str
    author: str | None
    original_url: str
    content_text: str
    content_hash: str
    published_at: int | None
    crawled_at: int
    status: str = "unread"
    is_favorite: bool = False


@dataclass
class AiAnalysis:
    id: int
    article_id: int
    summary: str
    key_points: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    topic: str = "Other"
    created_at: int = 0


@dataclass
class CrawlLog:
    id: int
    source_id: int
    status: str
    articles_found: int
    articles_added: int
    error_message: str | None
    started_at: int
    completed_at: int


@dataclass
class AccountSettings:
    user_id: int
    ai_enabled: bool = True
    notification_enabled: bool = True
    default_crawl_interval: int = 3600
