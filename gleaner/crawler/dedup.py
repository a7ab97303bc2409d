"""Content fingerprints for global, cross-source deduplication."""

from __future__ import annotations

import hashlib
import sqlite3

from gleaner.db.articles import get_article_by_hash


def content_fingerprint(content: str) -> str:
    """Return the SHA-256 hex digest of *content* with outer whitespace trimmed.

    Only the body counts: the same text under a different title, URL or
    source yields the same fingerprint.
    """
    return hashlib.sha256(content.strip().encode("utf-8")).hexdigest()


def is_known(conn: sqlite3.Connection, fingerprint: str) -> bool:
    """Return ``True`` if any stored article already carries *fingerprint*."""
    return get_article_by_hash(conn, fingerprint) is not None
