"""Crawl endpoints that are not tied to a single source.

Routes
------
POST /crawl/preview   Body: {"url": "https://..."}   → smart_crawl (nothing stored)
POST /crawl/all       Body: {"due_only": false}      → crawl_active_sources
GET  /crawl/logs      Recent crawl logs across all sources
"""

from __future__ import annotations

import sqlite3
from dataclasses import asdict
from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, HttpUrl

from gleaner.api.deps import get_db
from gleaner.api.routers.sources import CrawlLogResponse
from gleaner.crawler.pipeline import crawl_active_sources
from gleaner.crawler.smart import smart_crawl
from gleaner.db.crawl_logs import recent_crawl_logs
from gleaner.scraper.fetcher import FetchError

router = APIRouter()


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------

class PreviewRequest(BaseModel):
    url: HttpUrl


class ArticlePreview(BaseModel):
    title: str
    author: Optional[str]
    url: str
    published_at: Optional[datetime]
    content: str


class PreviewResponse(BaseModel):
    source_url: str
    page_type: str
    total_found: int
    processed: int
    articles: list[ArticlePreview]


class CrawlAllRequest(BaseModel):
    due_only: bool = False


class CrawlSummaryResponse(BaseModel):
    total_sources: int
    success_count: int
    partial_count: int
    failed_count: int
    skipped_count: int
    total_articles_added: int


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post("/preview", response_model=PreviewResponse)
def preview_endpoint(body: PreviewRequest) -> dict[str, Any]:
    """Classify and extract a URL without persisting anything."""
    try:
        result = smart_crawl(str(body.url))
    except FetchError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return {
        "source_url": result.source_url,
        "page_type": result.page_type.value,
        "total_found": result.total_found,
        "processed": result.processed,
        "articles": [asdict(a) for a in result.articles],
    }


@router.post("/all", response_model=CrawlSummaryResponse)
def crawl_all_endpoint(
    body: CrawlAllRequest, conn: sqlite3.Connection = Depends(get_db)
) -> dict[str, Any]:
    """Crawl every active source once, sequentially.

    Sources already being crawled through ``/sources/{id}/crawl`` are
    skipped and counted in ``skipped_count``.
    """
    summary = crawl_active_sources(conn, due_only=body.due_only)
    return asdict(summary)


@router.get("/logs", response_model=list[CrawlLogResponse])
def recent_logs_endpoint(
    limit: int = 100, conn: sqlite3.Connection = Depends(get_db)
) -> list[dict[str, Any]]:
    """Return the most recent crawl logs across all sources."""
    return [asdict(log) for log in recent_crawl_logs(conn, limit=limit)]
