"""Persistence for :class:`~websift.models.SearchResult` records.

Stored results are short-lived: anything older than ``settings.result_expiry``
is removed by :func:`purge_expired`, which the API runs on a periodic sweep
(see :func:`run_sweeper`).
"""

from __future__ import annotations

import asyncio
import json
import sqlite3
from typing import Optional

from websift.config import settings
from websift.models import SearchResult, now_ms


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _row_to_result(row: sqlite3.Row) -> SearchResult:
    return SearchResult.from_dict(json.loads(row["payload"]))


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def save_result(conn: sqlite3.Connection, result: SearchResult) -> None:
    """Insert or replace the stored copy of *result*."""
    with conn:
        conn.execute(
            """
            INSERT INTO search_results (request_id, query, status, timestamp, completed_at, payload)
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(request_id) DO UPDATE SET
                query = excluded.query,
                status = excluded.status,
                timestamp = excluded.timestamp,
                completed_at = excluded.completed_at,
                payload = excluded.payload
            """,
            (
                result.request_id,
                result.query,
                result.status.value,
                result.timestamp,
                result.completed_at,
                json.dumps(result.to_dict()),
            ),
        )


def get_result(conn: sqlite3.Connection, request_id: str) -> Optional[SearchResult]:
    """Fetch a stored result by request id.  Returns ``None`` if not found."""
    row = conn.execute(
        "SELECT payload FROM search_results WHERE request_id = ?", (request_id,)
    ).fetchone()
    return _row_to_result(row) if row else None


def list_results(conn: sqlite3.Connection, limit: int = 50) -> list[SearchResult]:
    """Most recent results first."""
    rows = conn.execute(
        "SELECT payload FROM search_results ORDER BY timestamp DESC LIMIT ?", (limit,)
    ).fetchall()
    return [_row_to_result(r) for r in rows]


def delete_result(conn: sqlite3.Connection, request_id: str) -> bool:
    with conn:
        cur = conn.execute(
            "DELETE FROM search_results WHERE request_id = ?", (request_id,)
        )
    return cur.rowcount > 0


def purge_expired(
    conn: sqlite3.Connection,
    max_age_ms: Optional[int] = None,
    now: Optional[int] = None,
) -> int:
    """Delete results whose age since ``timestamp`` exceeds *max_age_ms*.

    Returns the number of rows removed.
    """
    if max_age_ms is None:
        max_age_ms = int(settings.result_expiry * 1000)
    cutoff = (now if now is not None else now_ms()) - max_age_ms
    with conn:
        cur = conn.execute(
            "DELETE FROM search_results WHERE timestamp < ?", (cutoff,)
        )
    return cur.rowcount


async def run_sweeper(
    conn: sqlite3.Connection,
    interval: Optional[float] = None,
    max_age_ms: Optional[int] = None,
) -> None:
    """Purge expired results every *interval* seconds until cancelled."""
    interval = settings.result_sweep_interval if interval is None else interval
    while True:
        await asyncio.sleep(interval)
        try:
            purged = purge_expired(conn, max_age_ms=max_age_ms)
        except Exception as exc:
            print(f"[Sweeper] ✗ Purge failed, retrying next sweep: {exc!r:.120}")
            continue
        if purged:
            print(f"[Sweeper] Purged {purged} expired result(s).")
