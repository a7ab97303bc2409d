"""Operations on the ``sources`` table.

Only what the crawler needs: create, look up, list, and stamp the last crawl
time.  Editing and deleting sources belongs to the surrounding application.
"""

from __future__ import annotations

import sqlite3
from time import time
from typing import Optional

from gleaner.db.models import Source

SOURCE_TYPES = ("website", "rss", "wechat", "zhihu")


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _row_to_source(row: sqlite3.Row) -> Source:
    return Source(
        id=row["id"],
        user_id=row["user_id"],
        name=row["name"],
        source_type=row["source_type"],
        url=row["url"],
        description=row["description"],
        is_active=bool(row["is_active"]),
        last_crawled_at=row["last_crawled_at"],
        crawl_interval=row["crawl_interval"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def create_source(
    conn: sqlite3.Connection,
    user_id: int,
    name: str,
    url: str,
    source_type: str = "website",
    description: Optional[str] = None,
    crawl_interval: int = 3600,
) -> Source:
    """Insert a new source and return it.

    Raises:
        ValueError: If ``source_type`` is not one of :data:`SOURCE_TYPES`.
    """
    if source_type not in SOURCE_TYPES:
        raise ValueError(f"Unknown source type {source_type!r}")

    now = int(time())
    with conn:
        cursor = conn.execute(
            """
            INSERT INTO sources (user_id, name, source_type, url, description,
                                 crawl_interval, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (user_id, name, source_type, url, description, crawl_interval, now, now),
        )
    return get_source(conn, cursor.lastrowid)  # type: ignore[arg-type, return-value]


def get_source(conn: sqlite3.Connection, source_id: int) -> Optional[Source]:
    """Fetch a single source by id.  Returns ``None`` if not found."""
    row = conn.execute("SELECT * FROM sources WHERE id = ?", (source_id,)).fetchone()
    return _row_to_source(row) if row else None


def list_sources(conn: sqlite3.Connection, user_id: Optional[int] = None) -> list[Source]:
    """Return all sources, newest first, optionally for one user."""
    if user_id is not None:
        rows = conn.execute(
            "SELECT * FROM sources WHERE user_id = ? ORDER BY created_at DESC, id DESC",
            (user_id,),
        ).fetchall()
    else:
        rows = conn.execute(
            "SELECT * FROM sources ORDER BY created_at DESC, id DESC"
        ).fetchall()
    return [_row_to_source(r) for r in rows]


def list_active_sources(conn: sqlite3.Connection) -> list[Source]:
    """Return every source with ``is_active`` set, oldest id first."""
    rows = conn.execute(
        "SELECT * FROM sources WHERE is_active = 1 ORDER BY id"
    ).fetchall()
    return [_row_to_source(r) for r in rows]


def mark_crawled(
    conn: sqlite3.Connection,
    source_id: int,
    crawled_at: Optional[int] = None,
) -> None:
    """Stamp ``last_crawled_at`` (defaults to now) on a source."""
    ts = int(time()) if crawled_at is None else crawled_at
    with conn:
        conn.execute(
            "UPDATE sources SET last_crawled_at = ?, updated_at = ? WHERE id = ?",
            (ts, ts, source_id),
        )
