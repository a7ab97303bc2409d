"""Request-scoped dependencies shared by the routers."""

from __future__ import annotations

import sqlite3
from typing import Iterator

from fastapi import Request

from gleaner.db import get_connection


def get_db(request: Request) -> Iterator[sqlite3.Connection]:
    """Open a connection for one request and close it when the request ends.

    Each request gets its own connection, so a long crawl never shares a
    transaction with concurrent requests.
    """
    conn = get_connection(request.app.state.db_path)
    try:
        yield conn
    finally:
        conn.close()
