"""Source endpoints.

Routes
------
POST /sources                    Body: SourceCreate          → create_source
GET  /sources?user_id=           List sources
POST /sources/{id}/crawl         Run one crawl now           → crawl_source
GET  /sources/{id}/logs?limit=   Crawl history of a source
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from dataclasses import asdict
from typing import Any, Iterator, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, HttpUrl

from gleaner.api.deps import get_db
from gleaner.crawler.gate import crawl_gate
from gleaner.crawler.pipeline import crawl_source
from gleaner.db.crawl_logs import list_crawl_logs
from gleaner.db.sources import create_source, get_source, list_sources

router = APIRouter()


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------

class SourceCreate(BaseModel):
    user_id: int
    name: str = Field(min_length=1)
    url: HttpUrl
    source_type: str = "website"
    description: Optional[str] = None
    crawl_interval: int = Field(default=3600, gt=0)


class SourceResponse(BaseModel):
    id: int
    user_id: int
    name: str
    source_type: str
    url: str
    description: Optional[str]
    is_active: bool
    last_crawled_at: Optional[int]
    crawl_interval: int


class CrawlOutcomeResponse(BaseModel):
    source_id: int
    status: str
    articles_found: int
    articles_added: int
    error_message: Optional[str]
    started_at: int
    completed_at: int
    page_type: Optional[str]


class CrawlLogResponse(BaseModel):
    id: int
    source_id: int
    status: str
    articles_found: int
    articles_added: int
    error_message: Optional[str]
    started_at: int
    completed_at: int


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

@contextmanager
def _single_flight(source_id: int) -> Iterator[None]:
    with crawl_gate.hold(source_id) as acquired:
        if not acquired:
            raise HTTPException(
                status_code=409, detail=f"Source {source_id} is already being crawled."
            )
        yield


def _source_response(source) -> dict[str, Any]:  # type: ignore[no-untyped-def]
    data = asdict(source)
    data.pop("created_at", None)
    data.pop("updated_at", None)
    return data


def _require_source(conn: sqlite3.Connection, source_id: int):  # type: ignore[no-untyped-def]
    source = get_source(conn, source_id)
    if source is None:
        raise HTTPException(status_code=404, detail=f"Source not found: {source_id}")
    return source


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post("", response_model=SourceResponse, status_code=201)
def create_source_endpoint(
    body: SourceCreate, conn: sqlite3.Connection = Depends(get_db)
) -> dict[str, Any]:
    """Register a new source to crawl."""
    try:
        source = create_source(
            conn,
            user_id=body.user_id,
            name=body.name,
            url=str(body.url),
            source_type=body.source_type,
            description=body.description,
            crawl_interval=body.crawl_interval,
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return _source_response(source)


@router.get("", response_model=list[SourceResponse])
def list_sources_endpoint(
    user_id: Optional[int] = None, conn: sqlite3.Connection = Depends(get_db)
) -> list[dict[str, Any]]:
    """List sources, newest first."""
    return [_source_response(s) for s in list_sources(conn, user_id=user_id)]


@router.post("/{source_id}/crawl", response_model=CrawlOutcomeResponse)
def crawl_source_endpoint(
    source_id: int, conn: sqlite3.Connection = Depends(get_db)
) -> dict[str, Any]:
    """Crawl one source synchronously and return the outcome.

    A crawl that fails still answers 200; the failure is in ``status`` and
    ``error_message``, exactly as recorded in the crawl log.  A source that
    is already being crawled, here or by crawl-all, answers 409.
    """
    _require_source(conn, source_id)
    with _single_flight(source_id):
        outcome = crawl_source(conn, source_id)
    return asdict(outcome)


@router.get("/{source_id}/logs", response_model=list[CrawlLogResponse])
def source_logs_endpoint(
    source_id: int, limit: int = 50, conn: sqlite3.Connection = Depends(get_db)
) -> list[dict[str, Any]]:
    """Return the crawl history of a source, newest first."""
    _require_source(conn, source_id)
    return [asdict(log) for log in list_crawl_logs(conn, source_id, limit=limit)]
