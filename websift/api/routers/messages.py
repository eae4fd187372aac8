"""Raw message endpoint.

Routes
------
POST /messages    Body: {"type": "SEARCH_AND_EXTRACT" | ..., ...}

Always answers 200 with the reply envelope; failures are reported through
``success: false`` rather than HTTP status codes.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Request

router = APIRouter()


@router.post("")
async def post_message(request: Request, payload: Any = Body(...)) -> dict[str, Any]:
    """Dispatch one inbound message and return its single reply."""
    return await request.app.state.dispatcher.handle(payload)
