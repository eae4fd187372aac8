"""Schema setup for the result store.

``init_db`` runs ``schema.sql`` (every statement there is ``IF NOT EXISTS``)
and then whichever numbered entries of :data:`UPGRADES` the database has not
recorded in ``schema_version`` yet.
"""

from __future__ import annotations

import sqlite3

from websift.config import settings
from websift.models import now_ms

# ``(version, sql)`` pairs in ascending order.  Released entries never change.
UPGRADES: list[tuple[int, str]] = []


def init_db(conn: sqlite3.Connection) -> None:
    """Create the result-store tables on *conn* and apply pending upgrades.

    Safe to call on every start-up.
    """
    conn.executescript(settings.schema_path.read_text(encoding="utf-8"))
    migrate(conn)


def current_version(conn: sqlite3.Connection) -> int:
    """Highest recorded upgrade, or 0 for a database straight from ``schema.sql``."""
    row = conn.execute("SELECT MAX(version) FROM schema_version").fetchone()
    return row[0] or 0


def migrate(conn: sqlite3.Connection) -> int:
    """Apply upgrades newer than :func:`current_version`; returns how many ran."""
    start = current_version(conn)
    ran = 0
    for version, sql in UPGRADES:
        if version <= start:
            continue
        with conn:
            conn.execute(sql)
            conn.execute(
                "INSERT INTO schema_version (version, applied_at) VALUES (?, ?)",
                (version, now_ms()),
            )
        print(f"[DB] Applied schema upgrade {version}.")
        ran += 1
    return ran
