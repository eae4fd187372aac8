"""Extraction endpoint.

Routes
------
POST /extract    Body: {"urls": ["https://..."], "request_id"?: "..."}
"""

from __future__ import annotations

import uuid
from typing import Any, Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel

router = APIRouter()


class ExtractBody(BaseModel):
    urls: list[str]
    request_id: Optional[str] = None


@router.post("")
async def extract_urls(body: ExtractBody, request: Request) -> dict[str, Any]:
    """Harvest each URL in its own browsing context; failed pages are left out."""
    return await request.app.state.dispatcher.handle(
        {
            "type": "EXTRACT_URLS",
            "urls": body.urls,
            "request_id": body.request_id or str(uuid.uuid4()),
        }
    )
