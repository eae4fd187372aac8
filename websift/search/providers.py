"""Web search backends that turn a query into candidate page URLs.

Two providers are queried side by side (not as a failover chain):
  1. Wikipedia — the MediaWiki OpenSearch JSON API.
  2. DuckDuckGo — the no-JS "lite" HTML results page, scraped.

All providers share a common interface: ``await search(query) -> list[str]``.
A provider never raises; network, HTTP and parse failures are logged and
surface as an empty list so a dead backend can never abort a search run.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import Any, Optional
from urllib.parse import unquote

import httpx
from bs4 import BeautifulSoup

from websift.config import settings
from websift.search.aggregate import merge_urls

WIKIPEDIA_API_URL = "https://en.wikipedia.org/w/api.php"
DUCKDUCKGO_LITE_URL = "https://lite.duckduckgo.com/lite/"

# Each backend contributes at most this many URLs.
MAX_RESULTS_PER_PROVIDER = 3

_BROWSER_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/122.0.0.0 Safari/537.36"
)

_UDDG_RE = re.compile(r"uddg=([^&\"']+)", re.IGNORECASE)
_SELF_DOMAIN = "duckduckgo.com"
_NAVIGATION_MARKERS = ("/?q=", "/lite/")


def _normalise_query(query: str) -> str:
    """Strip surrounding double-quotes; some engines return nothing for them."""
    q = query.strip()
    if q.startswith('"') and q.endswith('"') and len(q) > 2:
        q = q[1:-1].strip()
    return q


# ---------------------------------------------------------------------------
# Abstract base
# ---------------------------------------------------------------------------

class SearchProvider(ABC):
    """Abstract base class for a single search provider."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable provider name."""

    @property
    @abstractmethod
    def source(self) -> str:
        """Provenance tag attached to every URL this provider returns."""

    @abstractmethod
    async def search(self, query: str) -> list[str]:
        """Return a list of URLs.  Must return ``[]`` (not raise) on failure."""

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=settings.search_provider_timeout,
            follow_redirects=True,
            headers={"User-Agent": _BROWSER_UA},
        )


# ---------------------------------------------------------------------------
# Wikipedia OpenSearch provider
# ---------------------------------------------------------------------------

class WikipediaProvider(SearchProvider):
    """MediaWiki OpenSearch API.

    The response is a 4-element array ``[query, titles, descriptions, urls]``;
    only the last element is used.
    """

    @property
    def name(self) -> str:
        return "Wikipedia"

    @property
    def source(self) -> str:
        return "wikipedia"

    async def search(self, query: str) -> list[str]:
        query = _normalise_query(query)
        try:
            async with self._client() as client:
                resp = await client.get(
                    WIKIPEDIA_API_URL,
                    params={
                        "action": "opensearch",
                        "search": query,
                        "limit": MAX_RESULTS_PER_PROVIDER,
                        "format": "json",
                    },
                    headers={"Accept": "application/json"},
                )
                resp.raise_for_status()
                data = resp.json()
        except Exception as exc:
            print(f"[Wikipedia] request failed: {exc!r:.120}")
            return []

        urls = _opensearch_urls(data)
        print(f"[Wikipedia] found {len(urls)} result(s).")
        return urls


def _opensearch_urls(data: Any) -> list[str]:
    """Pull the URL column out of an OpenSearch payload; ``[]`` if malformed."""
    if not isinstance(data, list) or len(data) < 4:
        return []
    urls = data[3]
    if not isinstance(urls, list):
        return []
    return [u for u in urls if isinstance(u, str) and u]


# ---------------------------------------------------------------------------
# DuckDuckGo Lite provider (HTML scrape)
# ---------------------------------------------------------------------------

class DuckDuckGoLiteProvider(SearchProvider):
    """Scrape the DuckDuckGo Lite results page.

    The lite page wraps every result in a ``//duckduckgo.com/l/?uddg=<url>``
    redirect, which is far more stable than its markup; see
    :func:`extract_urls_from_lite_html`.
    """

    @property
    def name(self) -> str:
        return "DuckDuckGo"

    @property
    def source(self) -> str:
        return "duckduckgo"

    async def search(self, query: str) -> list[str]:
        query = _normalise_query(query)
        try:
            async with self._client() as client:
                resp = await client.get(DUCKDUCKGO_LITE_URL, params={"q": query})
                if not resp.is_success:
                    print(f"[DuckDuckGo] fetch failed: HTTP {resp.status_code}")
                    return []
                html = resp.text
            urls = extract_urls_from_lite_html(html)
        except Exception as exc:
            print(f"[DuckDuckGo] search error: {exc!r:.120}")
            return []

        print(f"[DuckDuckGo] found {len(urls)} result(s) in {len(html)} chars of HTML.")
        return urls


def _uddg_urls(html: str) -> list[str]:
    urls: list[str] = []
    for match in _UDDG_RE.finditer(html):
        decoded = unquote(match.group(1))
        if decoded.startswith("http") and _SELF_DOMAIN not in decoded:
            urls.append(decoded)
    return urls


def _anchor_urls(html: str) -> list[str]:
    soup = BeautifulSoup(html, "html.parser")
    urls: list[str] = []
    for anchor in soup.find_all("a", href=True):
        # BeautifulSoup has already decoded &amp; / &quot; / &#39; entities.
        href = anchor["href"].strip()
        if not href.startswith("http") or _SELF_DOMAIN in href:
            continue
        if any(marker in href for marker in _NAVIGATION_MARKERS):
            continue
        urls.append(href)
    return urls


def extract_urls_from_lite_html(
    html: str, limit: Optional[int] = MAX_RESULTS_PER_PROVIDER
) -> list[str]:
    """Recover result URLs from a DuckDuckGo Lite HTML page.

    Tier 1 decodes every ``uddg=`` redirect parameter in the raw body.  Only
    when that yields nothing does tier 2 fall back to plain anchor ``href``s,
    skipping DuckDuckGo's own navigation links.  The result is deduplicated
    (first occurrence wins) and truncated to *limit* entries.
    """
    urls = _uddg_urls(html)
    if not urls:
        urls = _anchor_urls(html)
    return merge_urls(urls, budget=limit)


# ---------------------------------------------------------------------------
# Default provider set
# ---------------------------------------------------------------------------

def build_default_providers() -> list[SearchProvider]:
    """Wikipedia first, then DuckDuckGo; this order is the aggregation order."""
    return [WikipediaProvider(), DuckDuckGoLiteProvider()]
