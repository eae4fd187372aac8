"""Request / result models shared by the orchestrator, the store and the API.

These are plain dataclasses.  Timestamps are integer milliseconds since the
epoch so that stored payloads stay compatible with browser-side callers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from websift.scraper.models import HarvestOutcome, now_ms

DISCOVERY_SNIPPET = "Source found via web search"


@dataclass(frozen=True)
class SearchRequest:
    query: str
    request_id: str
    page_budget: int = 3

    def __post_init__(self) -> None:
        if not isinstance(self.page_budget, int) or self.page_budget < 1:
            raise ValueError(f"page_budget must be a positive integer, got {self.page_budget!r}")


@dataclass(frozen=True)
class CandidateURL:
    """A discovered URL plus the backend that produced it."""

    url: str
    source: str

    def to_dict(self) -> dict[str, Any]:
        """Discovery-only shape; titles are not known before harvesting."""
        return {
            "title": self.url,
            "url": self.url,
            "snippet": DISCOVERY_SNIPPET,
            "source": self.source,
        }


class SearchStatus(str, Enum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class SearchResult:
    request_id: str
    query: str
    timestamp: int = field(default_factory=now_ms)
    status: SearchStatus = SearchStatus.PROCESSING
    sources: list[HarvestOutcome] = field(default_factory=list)
    completed_at: Optional[int] = None

    # ------------------------------------------------------------------
    # Mutation (only while processing)
    # ------------------------------------------------------------------
    @property
    def is_final(self) -> bool:
        return self.status is not SearchStatus.PROCESSING

    def _check_open(self) -> None:
        if self.is_final:
            raise RuntimeError(
                f"search result {self.request_id!r} is already {self.status.value}"
            )

    def add_source(self, outcome: HarvestOutcome) -> None:
        """Append a harvested source; duplicate URLs are ignored."""
        self._check_open()
        if any(s.url == outcome.url for s in self.sources):
            return
        self.sources.append(outcome)

    def finalize(self, status: SearchStatus = SearchStatus.COMPLETED) -> None:
        self._check_open()
        self.status = status
        self.completed_at = now_ms()

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------
    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "requestId": self.request_id,
            "query": self.query,
            "timestamp": self.timestamp,
            "status": self.status.value,
            "sources": [s.to_dict() for s in self.sources],
        }
        if self.completed_at is not None:
            data["completedAt"] = self.completed_at
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SearchResult:
        return cls(
            request_id=data["requestId"],
            query=data.get("query", ""),
            timestamp=int(data["timestamp"]),
            status=SearchStatus(data.get("status", "processing")),
            sources=[HarvestOutcome.from_dict(s) for s in data.get("sources", [])],
            completed_at=data.get("completedAt"),
        )
