"""Tests for SearchOrchestrator: the full pipeline, discovery and extraction."""

from __future__ import annotations

import pytest

from websift.db.results import get_result
from websift.models import SearchStatus
from websift.orchestrator import SearchOrchestrator
from websift.scraper.harvester import PageHarvester

from fakes import FakeContextProvider, StaticProvider

WIKI_URLS = [
    "https://en.wikipedia.org/wiki/Machine_learning",
    "https://en.wikipedia.org/wiki/Outline_of_machine_learning",
    "https://en.wikipedia.org/wiki/Machine_learning_control",
]
DDG_URLS = [
    "https://en.wikipedia.org/wiki/Machine_learning",
    "https://www.ibm.com/topics/machine-learning",
    "https://developers.google.com/machine-learning/crash-course",
]


def _orchestrator(provider: FakeContextProvider, conn=None, timeout: float = 1.0, **kw):
    backends = [StaticProvider("wikipedia", WIKI_URLS), StaticProvider("duckduckgo", DDG_URLS)]
    return SearchOrchestrator(
        PageHarvester(provider, timeout=timeout), providers=backends, conn=conn, **kw
    )


class _ExplodingProvider:
    source = "broken"
    name = "Broken"

    async def search(self, query: str) -> list[str]:
        raise RuntimeError("backend crashed")


# ===========================================================================
# run()
# ===========================================================================

class TestRun:
    async def test_harvests_top_three_merged_urls(self) -> None:
        provider = FakeContextProvider()
        result = await _orchestrator(provider).run("machine learning fundamentals", "req-1")

        assert result.status is SearchStatus.COMPLETED
        assert result.completed_at is not None
        assert [s.url for s in result.sources] == WIKI_URLS
        assert provider.opened == provider.closed == 3

    async def test_budget_limits_pages_opened(self) -> None:
        provider = FakeContextProvider()
        result = await _orchestrator(provider).run("q", "req-1", page_budget=5)

        # Five unique URLs exist after the shared Wikipedia link is merged.
        assert len(result.sources) == 5
        assert len({s.url for s in result.sources}) == 5
        assert provider.opened == 5

    async def test_default_budget_from_constructor(self) -> None:
        provider = FakeContextProvider()
        result = await _orchestrator(provider, page_budget=1).run("q", "req-1")
        assert [s.url for s in result.sources] == WIKI_URLS[:1]

    async def test_partial_failures_reduce_source_count(self) -> None:
        provider = FakeContextProvider(
            hang=[WIKI_URLS[1]], nav_fail=[WIKI_URLS[2]], delays={WIKI_URLS[0]: 0.01}
        )
        result = await _orchestrator(provider, timeout=0.1).run("q", "req-1")

        assert result.status is SearchStatus.COMPLETED
        assert [s.url for s in result.sources] == [WIKI_URLS[0]]
        assert provider.opened == provider.closed == 3

    async def test_all_failures_still_complete_with_zero_sources(self) -> None:
        provider = FakeContextProvider(nav_fail=WIKI_URLS)
        result = await _orchestrator(provider).run("q", "req-1")

        assert result.status is SearchStatus.COMPLETED
        assert result.sources == []

    async def test_sources_follow_aggregation_order_not_completion_order(self) -> None:
        provider = FakeContextProvider(delays={WIKI_URLS[0]: 0.05, WIKI_URLS[1]: 0.02})
        result = await _orchestrator(provider).run("q", "req-1")
        assert [s.url for s in result.sources] == WIKI_URLS

    async def test_no_urls_found(self) -> None:
        provider = FakeContextProvider()
        orchestrator = SearchOrchestrator(
            PageHarvester(provider, timeout=1.0),
            providers=[StaticProvider("wikipedia", []), StaticProvider("duckduckgo", [])],
        )
        result = await orchestrator.run("zzzz", "req-1")

        assert result.status is SearchStatus.COMPLETED
        assert result.sources == []
        assert provider.opened == 0

    async def test_backends_receive_query(self) -> None:
        wiki = StaticProvider("wikipedia", WIKI_URLS)
        orchestrator = SearchOrchestrator(
            PageHarvester(FakeContextProvider(), timeout=1.0), providers=[wiki]
        )
        await orchestrator.run("solid state batteries", "req-1")
        assert wiki.queries == ["solid state batteries"]

    async def test_invalid_budget_raises(self) -> None:
        with pytest.raises(ValueError):
            await _orchestrator(FakeContextProvider()).run("q", "req-1", page_budget=0)

    async def test_persists_final_result(self, conn) -> None:
        result = await _orchestrator(FakeContextProvider(), conn=conn).run("q", "req-42")

        stored = get_result(conn, "req-42")
        assert stored is not None
        assert stored.status is SearchStatus.COMPLETED
        assert [s.url for s in stored.sources] == [s.url for s in result.sources]

    async def test_backend_crash_marks_failed_and_reraises(self, conn) -> None:
        orchestrator = SearchOrchestrator(
            PageHarvester(FakeContextProvider(), timeout=1.0),
            providers=[_ExplodingProvider()],
            conn=conn,
        )
        with pytest.raises(RuntimeError, match="backend crashed"):
            await orchestrator.run("q", "req-bad")

        stored = get_result(conn, "req-bad")
        assert stored is not None
        assert stored.status is SearchStatus.FAILED
        assert stored.completed_at is not None


# ===========================================================================
# discover() / extract()
# ===========================================================================

class TestDiscover:
    async def test_tags_each_url_with_its_backend(self) -> None:
        provider = FakeContextProvider()
        candidates = await _orchestrator(provider).discover("machine learning")

        assert [c.url for c in candidates] == WIKI_URLS + DDG_URLS[1:]
        assert [c.source for c in candidates] == ["wikipedia"] * 3 + ["duckduckgo"] * 2
        assert provider.opened == 0


class TestExtract:
    async def test_returns_successes_in_input_order(self) -> None:
        urls = ["https://a.example/", "https://b.example/", "https://c.example/"]
        provider = FakeContextProvider(nav_fail=[urls[1]], delays={urls[0]: 0.02})
        sources = await _orchestrator(provider).extract(urls, "req-x")

        assert [s.url for s in sources] == [urls[0], urls[2]]
        assert provider.opened == provider.closed == 3

    async def test_duplicate_urls_are_harvested_once(self) -> None:
        provider = FakeContextProvider()
        sources = await _orchestrator(provider).extract(
            ["https://a.example/", "https://a.example/"], "req-x"
        )
        assert len(sources) == 1
        assert provider.opened == 1

    async def test_empty_list(self) -> None:
        provider = FakeContextProvider()
        assert await _orchestrator(provider).extract([], "req-x") == []
        assert provider.opened == 0
