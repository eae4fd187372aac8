"""WebSift — query fan-out, isolated page harvesting and clean-text extraction.

Public API::

    from websift import SearchOrchestrator, PageHarvester, PlaywrightContextProvider

    async with PlaywrightContextProvider() as provider:
        orchestrator = SearchOrchestrator(PageHarvester(provider))
        result = await orchestrator.run("machine learning fundamentals", "req-1")
"""

from websift.models import CandidateURL, SearchRequest, SearchResult, SearchStatus
from websift.orchestrator import SearchOrchestrator
from websift.scraper import PageHarvester, PlaywrightContextProvider

__all__ = [
    "SearchOrchestrator",
    "PageHarvester",
    "PlaywrightContextProvider",
    "SearchRequest",
    "SearchResult",
    "SearchStatus",
    "CandidateURL",
]
