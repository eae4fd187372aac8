"""Content extraction: turns a rendered page snapshot into a :class:`PageExtract`.

The browsing context serialises the live DOM after tagging every element whose
computed style hides it (see ``SNAPSHOT_SCRIPT`` in
:mod:`websift.scraper.browser`), so visibility decisions made here match what
the page actually rendered.
"""

from __future__ import annotations

import copy
import re
from typing import Optional
from urllib.parse import urlparse

from bs4 import BeautifulSoup
from bs4.element import PreformattedString, Tag

from websift.scraper.models import PageExtract, now_ms

# Attribute set by the in-page snapshot script on computed-hidden elements.
HIDDEN_MARKER = "data-websift-hidden"

# A content container must yield at least this many characters to be trusted.
MIN_CONTENT_CHARS = 500

CONTENT_SELECTORS = [
    "main",
    "article",
    '[role="main"]',
    ".main-content",
    "#main-content",
    "#content",
    ".content",
    ".article-content",
    ".post-content",
]

WIKIPEDIA_CONTENT_SELECTOR = "#mw-content-text"

NON_CONTENT_SELECTORS = [
    "script", "style", "nav", "header", "footer", "aside",
    ".navigation", ".nav", ".menu", ".sidebar", ".ads",
    ".advertisement", ".social-share", ".comments", ".related-posts",
    '[role="navigation"]', '[role="complementary"]',
    '[role="banner"]', '[role="contentinfo"]',
]

_SKIP_PARENTS = {"script", "style", "noscript"}

_INLINE_HIDDEN_RE = re.compile(
    r"(?:^|;)\s*(?:display\s*:\s*none|visibility\s*:\s*hidden)\b", re.IGNORECASE
)
_CONTROL_RE = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
_WHITESPACE_RE = re.compile(r"\s+")
_SPACES_RE = re.compile(r" {2,}")


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------

def clean_text(text: str) -> str:
    """Collapse whitespace, trim, and drop non-printable control characters.

    Control characters are removed before whitespace is collapsed so that
    ``clean_text(clean_text(x)) == clean_text(x)``.
    """
    text = _CONTROL_RE.sub("", text)
    text = _WHITESPACE_RE.sub(" ", text)
    text = _SPACES_RE.sub(" ", text)
    return text.strip()


def count_words(text: str) -> int:
    return len(text.split())


def _is_hidden(tag: Tag) -> bool:
    if tag.has_attr(HIDDEN_MARKER) or tag.has_attr("hidden"):
        return True
    style = tag.get("style")
    return bool(style and _INLINE_HIDDEN_RE.search(style))


def visible_text(root: Tag) -> str:
    """Join every visible, non-blank text node under *root* with single spaces.

    Only the nearest parent element is consulted for visibility, mirroring
    a DOM tree-walker filter.
    """
    parts: list[str] = []
    for node in root.find_all(string=True):
        if isinstance(node, PreformattedString):  # comments, doctype, CDATA
            continue
        parent = node.parent
        if parent is None or parent.name in _SKIP_PARENTS or _is_hidden(parent):
            continue
        text = node.strip()
        if text:
            parts.append(text)
    return " ".join(parts)


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

def _from_content_containers(soup: BeautifulSoup) -> Optional[str]:
    for selector in CONTENT_SELECTORS:
        element = soup.select_one(selector)
        if element is None:
            continue
        text = visible_text(element)
        if len(text) >= MIN_CONTENT_CHARS:
            return text
    return None


def _from_wikipedia(soup: BeautifulSoup, url: str) -> Optional[str]:
    host = urlparse(url).hostname or ""
    if "wikipedia.org" not in host:
        return None
    element = soup.select_one(WIKIPEDIA_CONTENT_SELECTOR)
    if element is None:
        return None
    return visible_text(element)


def _from_stripped_body(soup: BeautifulSoup) -> str:
    body = copy.copy(soup.body) if soup.body is not None else copy.copy(soup)
    for selector in NON_CONTENT_SELECTORS:
        for element in body.select(selector):
            element.extract()
    return visible_text(body)


def extract_main_content(soup: BeautifulSoup, url: str) -> str:
    """Pick the page's main text using the first strategy that succeeds."""
    text = _from_content_containers(soup)
    if text is not None:
        return text
    text = _from_wikipedia(soup, url)
    if text is not None:
        return text
    return _from_stripped_body(soup)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_page(html: str, url: str, title: Optional[str] = None) -> PageExtract:
    """Extract clean readable text from a rendered page snapshot.

    Never raises: a malformed document degrades to an empty-content record
    with ``word_count == 0``.
    """
    result = PageExtract(title=title or "", url=url, extracted_at=now_ms())
    try:
        soup = BeautifulSoup(html, "html.parser")
        if title is None and soup.title is not None:
            result.title = soup.title.get_text(strip=True)
        result.content = clean_text(extract_main_content(soup, url))
        result.word_count = count_words(result.content)
    except Exception as exc:
        print(f"[EXTRACT] ✗ extraction error on {url!r}: {exc!r:.120}")
        result.content = ""
        result.word_count = 0
        return result

    print(f"[EXTRACT] {result.word_count} words from {url}")
    return result
