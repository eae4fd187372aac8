"""Search endpoints.

Routes
------
POST /search              Body: {"query": "...", "request_id"?: "...", "page_budget"?: 3}
GET  /search/discover?q=  Discovery only: candidate URLs with provenance, no page loads
"""

from __future__ import annotations

import uuid
from typing import Any, Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

router = APIRouter()


class SearchBody(BaseModel):
    query: str
    request_id: Optional[str] = None
    page_budget: Optional[int] = Field(default=None, ge=1)


@router.post("")
async def search_and_extract(body: SearchBody, request: Request) -> dict[str, Any]:
    """Search both backends, harvest the top pages and return the result envelope."""
    message: dict[str, Any] = {
        "type": "SEARCH_AND_EXTRACT",
        "query": body.query,
        "request_id": body.request_id or str(uuid.uuid4()),
    }
    if body.page_budget is not None:
        message["page_budget"] = body.page_budget
    return await request.app.state.dispatcher.handle(message)


@router.get("/discover")
async def discover(request: Request, q: str, request_id: Optional[str] = None) -> dict[str, Any]:
    """Return the deduplicated candidate URLs without loading any page."""
    return await request.app.state.dispatcher.handle(
        {"type": "SEARCH_ONLY", "query": q, "request_id": request_id or str(uuid.uuid4())}
    )
