"""Merge per-backend URL lists into one deduplicated, budget-capped list.

There is no scoring: the order in which backends were called, then the order
each backend returned its URLs, is the only ranking signal.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from websift.models import CandidateURL


def merge_urls(*sequences: Sequence[str], budget: Optional[int] = None) -> list[str]:
    """Concatenate *sequences*, keep the first occurrence of each URL, cap at *budget*."""
    seen: set[str] = set()
    merged: list[str] = []
    for seq in sequences:
        for url in seq:
            if url not in seen:
                seen.add(url)
                merged.append(url)
    if budget is not None:
        merged = merged[: max(budget, 0)]
    return merged


def tag_candidates(
    tagged: Iterable[tuple[str, Sequence[str]]], budget: Optional[int] = None
) -> list[CandidateURL]:
    """Like :func:`merge_urls` but keeps the provenance tag of each first occurrence."""
    seen: set[str] = set()
    candidates: list[CandidateURL] = []
    for source, urls in tagged:
        for url in urls:
            if url not in seen:
                seen.add(url)
                candidates.append(CandidateURL(url=url, source=source))
    if budget is not None:
        candidates = candidates[: max(budget, 0)]
    return candidates
