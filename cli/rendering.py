"""Plain-text rendering of reply envelopes for the CLI."""

from __future__ import annotations

import textwrap
from typing import Any

_PREVIEW_CHARS = 300


def render_sources(sources: list[dict[str, Any]], preview: int = _PREVIEW_CHARS) -> str:
    """One block per harvested source: title, URL, word count and a text preview."""
    if not sources:
        return "(no sources)"
    blocks = []
    for i, src in enumerate(sources, start=1):
        content = src.get("content", "")
        snippet = content[:preview] + ("…" if len(content) > preview else "")
        lines = [
            f"{i}. {src.get('title') or '(untitled)'}",
            f"   {src.get('url', '')}",
            f"   {src.get('wordCount', 0)} words",
        ]
        if snippet:
            lines.append(textwrap.indent(textwrap.fill(snippet, width=76), "   "))
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def render_candidates(candidates: list[dict[str, Any]]) -> str:
    if not candidates:
        return "(no URLs found)"
    return "\n".join(f"  [{c.get('source', '?')}]  {c.get('url', '')}" for c in candidates)


def render_result(result: dict[str, Any]) -> str:
    """Header line for a stored or freshly finished search result."""
    header = (
        f"{result.get('requestId', '')}  {result.get('query', '')!r}  "
        f"status={result.get('status', '?')}  sources={len(result.get('sources', []))}"
    )
    return header + "\n\n" + render_sources(result.get("sources", []))
