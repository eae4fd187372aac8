"""Update-notification side channel.

Polls a JSON manifest shaped ``[{"id": "edgeai-v1.2", "url": "..."}, ...]``
and records the first entry whose id contains the configured keyword as the
pending update.  Desktop notifications are out of scope; a detected update
is logged and stored under the ``pending_update`` key for the API / CLI.
"""

from __future__ import annotations

import asyncio
import sqlite3
from dataclasses import asdict, dataclass
from typing import Any, Optional

import httpx

from websift.config import settings
from websift.db.kv import get_value, set_value
from websift.models import now_ms

PENDING_UPDATE_KEY = "pending_update"


@dataclass
class PendingUpdate:
    id: str
    url: str
    detected_at: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def find_matching_update(updates: Any, keyword: str) -> Optional[dict[str, Any]]:
    """Return the first manifest entry whose ``id`` contains *keyword* (case-insensitive)."""
    if not isinstance(updates, list):
        return None
    needle = keyword.lower()
    for entry in updates:
        if isinstance(entry, dict) and isinstance(entry.get("id"), str):
            if needle in entry["id"].lower():
                return entry
    return None


async def check_for_updates(
    conn: Optional[sqlite3.Connection] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> Optional[PendingUpdate]:
    """Fetch the manifest once.  Returns the matching update, or ``None``.

    Network, HTTP and JSON failures are logged and reported as ``None``.
    """
    print("[Updater] Checking for updates …")
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=settings.search_provider_timeout) as own:
                resp = await own.get(settings.update_api_url)
        else:
            resp = await client.get(settings.update_api_url)
        if not resp.is_success:
            print(f"[Updater] API response not OK: {resp.status_code}")
            return None
        updates = resp.json()
    except Exception as exc:
        print(f"[Updater] Check failed: {exc!r:.120}")
        return None

    match = find_matching_update(updates, settings.update_match_keyword)
    if match is None:
        print("[Updater] No matching updates found.")
        return None

    update = PendingUpdate(id=match["id"], url=str(match.get("url") or ""), detected_at=now_ms())
    print(f"[Updater] New version available: {update.id} → {update.url}")
    if conn is not None:
        set_value(conn, PENDING_UPDATE_KEY, update.to_dict())
    return update


def get_pending_update(conn: sqlite3.Connection) -> Optional[PendingUpdate]:
    data = get_value(conn, PENDING_UPDATE_KEY)
    return PendingUpdate(**data) if data else None


async def run_update_checker(
    conn: sqlite3.Connection, interval: Optional[float] = None
) -> None:
    """Check immediately, then every *interval* seconds until cancelled."""
    interval = settings.update_check_interval if interval is None else interval
    while True:
        try:
            await check_for_updates(conn)
        except Exception as exc:
            print(f"[Updater] ✗ Check crashed, retrying next interval: {exc!r:.120}")
        await asyncio.sleep(interval)
