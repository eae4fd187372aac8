"""Search orchestrator: query → candidate URLs → harvested sources.

``SearchOrchestrator.run`` is the full pipeline.  ``discover`` and ``extract``
are the two reduced entry points built from the same primitives: discovery
stops after aggregation, extraction skips the search backends and harvests a
caller-supplied URL list.

Everything runs on one event loop.  Both backends are awaited before their
URLs are merged, and every harvest is awaited before a run is finalised; a
failed or timed-out harvest only means one source fewer.
"""

from __future__ import annotations

import asyncio
import sqlite3
from typing import Optional, Sequence

from websift.config import settings
from websift.db.results import save_result
from websift.models import CandidateURL, SearchRequest, SearchResult, SearchStatus
from websift.scraper.harvester import PageHarvester
from websift.scraper.models import HarvestOutcome, HarvestResult
from websift.search.aggregate import merge_urls, tag_candidates
from websift.search.providers import SearchProvider, build_default_providers


class SearchOrchestrator:
    """Coordinates search backends and the page harvester for each request.

    Args:
        harvester: Harvester used for every page load.
        providers: Search backends, in aggregation order.  Defaults to
            :func:`~websift.search.providers.build_default_providers`.
        conn: Optional DB connection; when given, each run's result is
            stored as it starts and again when it is finalised.
        page_budget: Default number of pages harvested per query.
    """

    def __init__(
        self,
        harvester: PageHarvester,
        providers: Optional[Sequence[SearchProvider]] = None,
        conn: Optional[sqlite3.Connection] = None,
        page_budget: Optional[int] = None,
    ) -> None:
        self._harvester = harvester
        self._providers = list(providers) if providers is not None else build_default_providers()
        self._conn = conn
        self._page_budget = settings.page_budget if page_budget is None else page_budget

    @property
    def page_budget(self) -> int:
        return self._page_budget

    # ------------------------------------------------------------------
    # Primitives
    # ------------------------------------------------------------------
    async def _search_backends(self, query: str) -> list[tuple[str, list[str]]]:
        """Query every backend concurrently; returns ``(source, urls)`` per backend."""
        found = await asyncio.gather(*(p.search(query) for p in self._providers))
        return [(p.source, list(urls)) for p, urls in zip(self._providers, found)]

    async def _harvest_all(self, urls: Sequence[str], request_id: str) -> list[HarvestResult]:
        """Harvest *urls* concurrently and wait for every attempt to settle."""
        return list(
            await asyncio.gather(*(self._harvester.harvest(u, request_id) for u in urls))
        )

    def _store(self, result: SearchResult) -> None:
        if self._conn is not None:
            save_result(self._conn, result)

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------
    async def run(
        self, query: str, request_id: str, page_budget: Optional[int] = None
    ) -> SearchResult:
        """Search, harvest up to *page_budget* pages, and return the finished result.

        Raises:
            ValueError: *page_budget* is not a positive integer.
        """
        request = SearchRequest(
            query=query,
            request_id=request_id,
            page_budget=self._page_budget if page_budget is None else page_budget,
        )
        result = SearchResult(request_id=request.request_id, query=request.query)
        self._store(result)
        print(f"[SEARCH] Starting search for {request.query!r} (ID: {request.request_id})")

        try:
            per_backend = await self._search_backends(request.query)
            all_urls = merge_urls(*(urls for _, urls in per_backend))
            to_open = all_urls[: request.page_budget]
            print(f"[SEARCH] Found {len(all_urls)} URL(s), opening top {len(to_open)}.")

            outcomes = await self._harvest_all(to_open, request.request_id)
        except Exception:
            result.finalize(SearchStatus.FAILED)
            self._store(result)
            raise

        for outcome in outcomes:
            if isinstance(outcome, HarvestOutcome):
                result.add_source(outcome)

        result.finalize(SearchStatus.COMPLETED)
        self._store(result)
        print(f"[SEARCH] Completed with {len(result.sources)} source(s).")
        return result

    async def discover(self, query: str) -> list[CandidateURL]:
        """Search only: every deduplicated URL, tagged with the backend that found it."""
        print(f"[SEARCH] Discovery-only search for {query!r}")
        per_backend = await self._search_backends(query)
        candidates = tag_candidates(per_backend)
        print(f"[SEARCH] Discovered {len(candidates)} URL(s).")
        return candidates

    async def extract(self, urls: Sequence[str], request_id: str) -> list[HarvestOutcome]:
        """Harvest caller-supplied *urls*; returns the successful harvests in input order."""
        unique = merge_urls(urls)
        print(f"[SEARCH] Extracting {len(unique)} URL(s) (ID: {request_id})")
        outcomes = await self._harvest_all(unique, request_id)
        return [o for o in outcomes if isinstance(o, HarvestOutcome)]
