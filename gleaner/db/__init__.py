"""Database layer package.

Public re-exports so callers can write::

    from gleaner.db import get_connection, init_db
    from gleaner.db import articles, sources
"""

from gleaner.db.connection import get_connection
from gleaner.db.migrations import init_db
from gleaner.db import account_settings, analyses, articles, crawl_logs, sources

__all__ = [
    "get_connection",
    "init_db",
    "account_settings",
    "analyses",
    "articles",
    "crawl_logs",
    "sources",
]
