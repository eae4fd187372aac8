"""Tiny JSON key/value table for process-wide state (e.g. pending updates)."""

from __future__ import annotations

import json
import sqlite3
from typing import Any, Optional

from websift.models import now_ms


def set_value(conn: sqlite3.Connection, key: str, value: Any) -> None:
    with conn:
        conn.execute(
            """
            INSERT INTO kv (key, value, updated_at) VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
            """,
            (key, json.dumps(value), now_ms()),
        )


def get_value(conn: sqlite3.Connection, key: str, default: Optional[Any] = None) -> Any:
    row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
    return json.loads(row["value"]) if row else default
