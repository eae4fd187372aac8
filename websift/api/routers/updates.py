"""Update-check endpoints.

Routes
------
GET  /updates         Pending update (or ``null``)
POST /updates/check   Check the manifest now
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Request

from websift.updates import check_for_updates, get_pending_update

router = APIRouter()


@router.get("")
def pending(request: Request) -> Optional[dict[str, Any]]:
    update = get_pending_update(request.app.state.db)
    return update.to_dict() if update else None


@router.post("/check")
async def check(request: Request) -> Optional[dict[str, Any]]:
    update = await check_for_updates(request.app.state.db)
    return update.to_dict() if update else None
