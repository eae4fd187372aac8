"""Inbound request messages and their dispatch.

Host applications talk to WebSift with small JSON messages tagged by
``type``::

    {"type": "SEARCH_AND_EXTRACT", "query": "...", "requestId": "r1"}
    {"type": "SEARCH_ONLY", "query": "...", "requestId": "r2"}
    {"type": "EXTRACT_URLS", "urls": ["https://..."], "requestId": "r3"}
    {"type": "GET_RESULTS", "requestId": "r1"}
    {"type": "PING"}

Every message gets exactly one reply of the form::

    {"success": bool, "requestId": str, "resultCount"?: int,
     "results"?: ..., "error"?: str}

:meth:`MessageDispatcher.handle` never raises: malformed messages and
request-level failures come back as ``{"success": False, "error": ...}``.
A search that finds nothing is still a success.
"""

from __future__ import annotations

import sqlite3
from typing import Annotated, Any, Awaitable, Callable, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, Field, TypeAdapter, ValidationError

from websift.db.results import get_result
from websift.orchestrator import SearchOrchestrator

_REQUEST_ID = AliasChoices("request_id", "requestId", "searchId")


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class _Message(BaseModel):
    request_id: str = Field(default="", validation_alias=_REQUEST_ID)


class PingMessage(_Message):
    type: Literal["PING"]


class SearchAndExtractMessage(_Message):
    type: Literal["SEARCH_AND_EXTRACT"]
    query: str = Field(min_length=1)
    page_budget: Optional[int] = Field(
        default=None, ge=1, validation_alias=AliasChoices("page_budget", "pageBudget")
    )


class SearchOnlyMessage(_Message):
    type: Literal["SEARCH_ONLY"]
    query: str = Field(min_length=1)


class ExtractUrlsMessage(_Message):
    type: Literal["EXTRACT_URLS"]
    urls: list[str]


class GetResultsMessage(_Message):
    type: Literal["GET_RESULTS"]
    request_id: str = Field(min_length=1, validation_alias=_REQUEST_ID)


InboundMessage = Annotated[
    Union[
        PingMessage,
        SearchAndExtractMessage,
        SearchOnlyMessage,
        ExtractUrlsMessage,
        GetResultsMessage,
    ],
    Field(discriminator="type"),
]

_message_adapter: TypeAdapter[Any] = TypeAdapter(InboundMessage)


def parse_message(payload: Any) -> Any:
    """Validate *payload* into one of the message models.

    Raises:
        pydantic.ValidationError: Unknown ``type`` or missing/invalid fields.
    """
    return _message_adapter.validate_python(payload)


# ---------------------------------------------------------------------------
# Reply helpers
# ---------------------------------------------------------------------------

def ok(request_id: str, **fields: Any) -> dict[str, Any]:
    return {"success": True, "requestId": request_id, **fields}


def error(request_id: str, message: str) -> dict[str, Any]:
    return {"success": False, "requestId": request_id, "error": message}


def _describe(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return "invalid request: " + "; ".join(parts)


# ---------------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------------

class MessageDispatcher:
    """Route inbound messages to the orchestrator and wrap the reply."""

    def __init__(
        self, orchestrator: SearchOrchestrator, conn: Optional[sqlite3.Connection] = None
    ) -> None:
        self._orchestrator = orchestrator
        self._conn = conn
        self._handlers: dict[type, Callable[[Any], Awaitable[dict[str, Any]]]] = {
            PingMessage: self._ping,
            SearchAndExtractMessage: self._search_and_extract,
            SearchOnlyMessage: self._search_only,
            ExtractUrlsMessage: self._extract_urls,
            GetResultsMessage: self._get_results,
        }

    async def handle(self, payload: Any) -> dict[str, Any]:
        request_id = ""
        if isinstance(payload, dict):
            request_id = str(
                payload.get("requestId") or payload.get("request_id") or payload.get("searchId") or ""
            )

        try:
            message = parse_message(payload)
        except ValidationError as exc:
            return error(request_id, _describe(exc))

        try:
            return await self._handlers[type(message)](message)
        except Exception as exc:
            print(f"[DISPATCH] ✗ {message.type} failed (ID: {message.request_id}): {exc}")
            return error(message.request_id, str(exc) or type(exc).__name__)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------
    async def _ping(self, message: PingMessage) -> dict[str, Any]:
        return ok(message.request_id, message="WebSift is running")

    async def _search_and_extract(self, message: SearchAndExtractMessage) -> dict[str, Any]:
        result = await self._orchestrator.run(
            message.query, message.request_id, page_budget=message.page_budget
        )
        return ok(
            message.request_id,
            resultCount=len(result.sources),
            results=result.to_dict(),
        )

    async def _search_only(self, message: SearchOnlyMessage) -> dict[str, Any]:
        candidates = await self._orchestrator.discover(message.query)
        return ok(
            message.request_id,
            resultCount=len(candidates),
            results=[c.to_dict() for c in candidates],
        )

    async def _extract_urls(self, message: ExtractUrlsMessage) -> dict[str, Any]:
        sources = await self._orchestrator.extract(message.urls, message.request_id)
        return ok(
            message.request_id,
            resultCount=len(sources),
            results={"sources": [s.to_dict() for s in sources]},
        )

    async def _get_results(self, message: GetResultsMessage) -> dict[str, Any]:
        if self._conn is None:
            raise RuntimeError("no result store configured")
        result = get_result(self._conn, message.request_id)
        return ok(message.request_id, results=result.to_dict() if result else None)
