"""Stored search results.

Routes
------
GET    /results                 Most recent results (``?limit=50``)
GET    /results/{request_id}    One stored result, 404 if unknown or expired
DELETE /results/expired         Run the expiry purge now
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Request

from websift.db.results import get_result, list_results, purge_expired

router = APIRouter()


@router.get("")
def list_stored(request: Request, limit: int = 50) -> list[dict[str, Any]]:
    return [r.to_dict() for r in list_results(request.app.state.db, limit=limit)]


@router.delete("/expired")
def purge(request: Request) -> dict[str, int]:
    """Delete every result older than the configured expiry window."""
    return {"purged": purge_expired(request.app.state.db)}


@router.get("/{request_id}")
def get_stored(request_id: str, request: Request) -> dict[str, Any]:
    result = get_result(request.app.state.db, request_id)
    if result is None:
        raise HTTPException(status_code=404, detail=f"No result for {request_id!r}.")
    return result.to_dict()
