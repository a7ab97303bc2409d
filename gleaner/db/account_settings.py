"""Read access to per-account settings.

Settings are written by the surrounding application; the crawler only reads
them.  An account without a row gets the schema defaults.
"""

from __future__ import annotations

import sqlite3

from gleaner.db.models import AccountSettings


def get_account_settings(conn: sqlite3.Connection, user_id: int) -> AccountSettings:
    """Return the settings for *user_id*, or defaults if none are stored."""
    row = conn.execute(
        "SELECT * FROM account_settings WHERE user_id = ?", (user_id,)
    ).fetchone()
    if row is None:
        return AccountSettings(user_id=user_id)
    return AccountSettings(
        user_id=row["user_id"],
        ai_enabled=bool(row["ai_enabled"]),
        notification_enabled=bool(row["notification_enabled"]),
        default_crawl_interval=row["default_crawl_interval"],
    )
