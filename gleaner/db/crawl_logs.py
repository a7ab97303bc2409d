"""Append-only crawl audit log."""

from __future__ import annotations

import sqlite3
from typing import Optional

from gleaner.db.models import CrawlLog

CRAWL_STATUSES = ("success", "partial", "failed")


def _row_to_log(row: sqlite3.Row) -> CrawlLog:
    return CrawlLog(
        id=row["id"],
        source_id=row["source_id"],
        status=row["status"],
        articles_found=row["articles_found"],
        articles_added=row["articles_added"],
        error_message=row["error_message"],
        started_at=row["started_at"],
        completed_at=row["completed_at"],
    )


def append_crawl_log(
    conn: sqlite3.Connection,
    source_id: int,
    status: str,
    articles_found: int,
    articles_added: int,
    started_at: int,
    completed_at: int,
    error_message: Optional[str] = None,
) -> CrawlLog:
    """Record the outcome of one crawl invocation.

    Raises:
        ValueError: If ``status`` is not one of :data:`CRAWL_STATUSES`.
    """
    if status not in CRAWL_STATUSES:
        raise ValueError(f"Unknown crawl status {status!r}")

    with conn:
        cursor = conn.execute(
            """
            INSERT INTO crawl_logs (source_id, status, articles_found, articles_added,
                                    error_message, started_at, completed_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                source_id,
                status,
                articles_found,
                articles_added,
                error_message,
                started_at,
                completed_at,
            ),
        )
    row = conn.execute(
        "SELECT * FROM crawl_logs WHERE id = ?", (cursor.lastrowid,)
    ).fetchone()
    return _row_to_log(row)


def list_crawl_logs(
    conn: sqlite3.Connection, source_id: int, limit: int = 50
) -> list[CrawlLog]:
    """Return the crawl history of one source, newest first."""
    rows = conn.execute(
        "SELECT * FROM crawl_logs WHERE source_id = ? "
        "ORDER BY started_at DESC, id DESC LIMIT ?",
        (source_id, limit),
    ).fetchall()
    return [_row_to_log(r) for r in rows]


def recent_crawl_logs(conn: sqlite3.Connection, limit: int = 100) -> list[CrawlLog]:
    """Return the latest crawl logs across all sources."""
    rows = conn.execute(
        "SELECT * FROM crawl_logs ORDER BY started_at DESC, id DESC LIMIT ?",
        (limit,),
    ).fetchall()
    return [_row_to_log(r) for r in rows]
