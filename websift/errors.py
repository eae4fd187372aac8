"""Exception types raised inside the harvesting pipeline.

None of these cross the public boundary: the harvester maps them onto
:class:`~websift.scraper.models.HarvestFailure` records and the message
dispatcher maps anything else onto ``{"success": False, "error": ...}``.
"""

from __future__ import annotations


class WebSiftError(Exception):
    """Base class for all WebSift errors."""


class NavigationError(WebSiftError):
    """A browsing context could not be opened or could not load its URL."""


class ExtractionError(WebSiftError):
    """The loaded page could not be snapshotted for extraction."""

