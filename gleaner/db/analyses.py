"""Operations on the ``ai_analysis`` table.

``key_points`` and ``tags`` are stored as JSON arrays.
"""

from __future__ import annotations

import json
import sqlite3
from time import time
from typing import Optional

from gleaner.db.models import AiAnalysis


def _row_to_analysis(row: sqlite3.Row) -> AiAnalysis:
    return AiAnalysis(
        id=row["id"],
        article_id=row["article_id"],
        summary=row["summary"] or "",
        key_points=json.loads(row["key_points"] or "[]"),
        tags=json.loads(row["tags"] or "[]"),
        topic=row["topic"] or "Other",
        created_at=row["created_at"],
    )


def create_analysis(
    conn: sqlite3.Connection,
    article_id: int,
    summary: str,
    key_points: list[str],
    tags: list[str],
    topic: str,
) -> AiAnalysis:
    """Attach an enrichment record to *article_id* and return it."""
    now = int(time())
    with conn:
        conn.execute(
            """
            INSERT INTO ai_analysis (article_id, summary, key_points, tags, topic, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (article_id, summary, json.dumps(key_points), json.dumps(tags), topic, now),
        )
    return get_analysis(conn, article_id)  # type: ignore[return-value]


def get_analysis(conn: sqlite3.Connection, article_id: int) -> Optional[AiAnalysis]:
    """Return the analysis for *article_id*, or ``None``."""
    row = conn.execute(
        "SELECT * FROM ai_analysis WHERE article_id = ?", (article_id,)
    ).fetchone()
    return _row_to_analysis(row) if row else None
