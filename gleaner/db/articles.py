"""Operations on the ``articles`` table."""

from __future__ import annotations

import sqlite3
from time import time
from typing import Optional

from gleaner.db.models import Article


def _row_to_article(row: sqlite3.Row) -> Article:
    return Article(
        id=row["id"],
        source_id=row["source_id"],
        user_id=row["user_id"],
        page_type=row["page_type"],
        title=row["title"],
        author=row["author"],
        original_url=row["original_url"],
        content_text=row["content_text"],
        content_hash=row["content_hash"],
        published_at=row["published_at"],
        crawled_at=row["crawled_at"],
        status=row["status"],
        is_favorite=bool(row["is_favorite"]),
    )


def create_article(
    conn: sqlite3.Connection,
    source_id: int,
    user_id: int,
    title: str,
    original_url: str,
    content_text: str,
    content_hash: str,
    page_type: str = "article",
    author: Optional[str] = None,
    published_at: Optional[int] = None,
) -> Article:
    """Insert an unread article and return it with its generated id.

    Raises:
        sqlite3.IntegrityError: If an article with ``content_hash`` exists.
    """
    now = int(time())
    with conn:
        cursor = conn.execute(
            """
            INSERT INTO articles (source_id, user_id, page_type, title, author,
                                  original_url, content_text, content_hash,
                                  published_at, crawled_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                source_id,
                user_id,
                page_type,
                title,
                author,
                original_url,
                content_text,
                content_hash,
                published_at,
                now,
            ),
        )
    return get_article(conn, cursor.lastrowid)  # type: ignore[arg-type, return-value]


def get_article(conn: sqlite3.Connection, article_id: int) -> Optional[Article]:
    row = conn.execute("SELECT * FROM articles WHERE id = ?", (article_id,)).fetchone()
    return _row_to_article(row) if row else None


def get_article_by_hash(conn: sqlite3.Connection, content_hash: str) -> Optional[Article]:
    """Return the article carrying *content_hash*, across all sources."""
    row = conn.execute(
        "SELECT * FROM articles WHERE content_hash = ? LIMIT 1", (content_hash,)
    ).fetchone()
    return _row_to_article(row) if row else None


def list_articles(
    conn: sqlite3.Connection,
    source_id: Optional[int] = None,
    limit: int = 50,
) -> list[Article]:
    """Return the most recently crawled articles, optionally for one source."""
    if source_id is not None:
        rows = conn.execute(
            "SELECT * FROM articles WHERE source_id = ? "
            "ORDER BY crawled_at DESC, id DESC LIMIT ?",
            (source_id, limit),
        ).fetchall()
    else:
        rows = conn.execute(
            "SELECT * FROM articles ORDER BY crawled_at DESC, id DESC LIMIT ?",
            (limit,),
        ).fetchall()
    return [_row_to_article(r) for r in rows]
