"""Data models for the harvesting pipeline."""

from __future__ import annotations

import time
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Union


def now_ms() -> int:
    """Current wall-clock time in milliseconds since the epoch."""
    return int(time.time() * 1000)


@dataclass
class PageExtract:
    """What the extractor running inside a browsing context reports back."""

    title: str
    url: str
    content: str = ""
    word_count: int = 0
    extracted_at: int = 0


@dataclass
class HarvestOutcome:
    """A successfully harvested page."""

    url: str
    title: str
    content: str
    word_count: int
    extracted_at: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "title": self.title,
            "content": self.content,
            "wordCount": self.word_count,
            "extractedAt": self.extracted_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HarvestOutcome:
        return cls(
            url=data["url"],
            title=data.get("title", ""),
            content=data.get("content", ""),
            word_count=int(data.get("wordCount", 0)),
            extracted_at=int(data.get("extractedAt", 0)),
        )


class FailureReason(str, Enum):
    TIMEOUT = "timeout"
    NAVIGATION = "navigation"
    EXTRACTION = "extraction"


@dataclass
class HarvestFailure:
    """A harvest attempt that produced no source."""

    url: str
    reason: FailureReason
    cause: str = ""

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["reason"] = self.reason.value
        return data


HarvestResult = Union[HarvestOutcome, HarvestFailure]
