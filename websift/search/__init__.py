"""Search package — backend adapters and URL aggregation."""

from websift.search.aggregate import merge_urls, tag_candidates
from websift.search.providers import (
    DuckDuckGoLiteProvider,
    SearchProvider,
    WikipediaProvider,
    build_default_providers,
)

__all__ = [
    "SearchProvider",
    "WikipediaProvider",
    "DuckDuckGoLiteProvider",
    "build_default_providers",
    "merge_urls",
    "tag_candidates",
]
