"""Page harvester: load one URL in isolation and collect its extracted text."""

from __future__ import annotations

import asyncio
from typing import Optional

from websift.config import settings
from websift.errors import ExtractionError
from websift.scraper.browser import BrowsingContext, ContextProvider
from websift.scraper.models import (
    FailureReason,
    HarvestFailure,
    HarvestOutcome,
    HarvestResult,
    PageExtract,
    now_ms,
)


class PageHarvester:
    """Single-attempt, timeout-bounded harvest of one URL at a time.

    Every call opens exactly one browsing context through *provider* and
    discards exactly that context before returning, whatever the outcome.
    """

    def __init__(self, provider: ContextProvider, timeout: Optional[float] = None) -> None:
        self._provider = provider
        self._timeout = settings.harvest_timeout if timeout is None else timeout

    @property
    def timeout(self) -> float:
        return self._timeout

    async def harvest(self, url: str, request_id: str = "") -> HarvestResult:
        """Harvest *url*.  Never raises; failures come back as :class:`HarvestFailure`."""
        signal: asyncio.Future[PageExtract] = asyncio.get_running_loop().create_future()
        tag = f"[HARVEST {request_id}]" if request_id else "[HARVEST]"
        print(f"{tag} Opening {url}")

        try:
            context = await self._provider.open(url, signal)
        except Exception as exc:
            print(f"{tag} ✗ Navigation failed for {url!r}: {exc}")
            return HarvestFailure(url=url, reason=FailureReason.NAVIGATION, cause=str(exc))

        try:
            extract = await asyncio.wait_for(signal, timeout=self._timeout)
        except asyncio.TimeoutError:
            print(f"{tag} ✗ Timed out after {self._timeout:g}s: {url}")
            return HarvestFailure(
                url=url,
                reason=FailureReason.TIMEOUT,
                cause=f"no extraction signal within {self._timeout:g}s",
            )
        except ExtractionError as exc:
            print(f"{tag} ✗ Extraction failed for {url!r}: {exc}")
            return HarvestFailure(url=url, reason=FailureReason.EXTRACTION, cause=str(exc))
        except Exception as exc:
            print(f"{tag} ✗ Navigation failed for {url!r}: {exc}")
            return HarvestFailure(url=url, reason=FailureReason.NAVIGATION, cause=str(exc))
        finally:
            await self._discard(context, tag)

        print(f"{tag} ✓ {extract.word_count} words from {url}")
        return HarvestOutcome(
            url=url,
            title=extract.title,
            content=extract.content,
            word_count=extract.word_count,
            extracted_at=now_ms(),
        )

    @staticmethod
    async def _discard(context: BrowsingContext, tag: str) -> None:
        try:
            await context.close()
        except Exception as exc:
            print(f"{tag} closing browsing context failed: {exc!r:.120}")
