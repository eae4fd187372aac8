"""Scraper package — isolated page loading & content extraction."""

from websift.scraper.browser import (
    BrowsingContext,
    ContextProvider,
    PlaywrightContextProvider,
)
from websift.scraper.extractor import clean_text, count_words, extract_page
from websift.scraper.harvester import PageHarvester
from websift.scraper.models import (
    FailureReason,
    HarvestFailure,
    HarvestOutcome,
    PageExtract,
)

__all__ = [
    "BrowsingContext",
    "ContextProvider",
    "PlaywrightContextProvider",
    "PageHarvester",
    "extract_page",
    "clean_text",
    "count_words",
    "PageExtract",
    "HarvestOutcome",
    "HarvestFailure",
    "FailureReason",
]
