"""Isolated browsing contexts for page harvesting.

A :class:`ContextProvider` opens one fresh, non-foregrounded browsing context
per harvest and wires it to a per-attempt ``asyncio.Future`` (the *signal*).
Once the page has loaded, the extractor running against that context resolves
the signal with a :class:`~websift.scraper.models.PageExtract`, or fails it
with :class:`~websift.errors.NavigationError` /
:class:`~websift.errors.ExtractionError`.

The production provider drives headless Chromium through async Playwright;
tests substitute an in-memory provider.
"""

from __future__ import annotations

import asyncio
import contextlib
from abc import ABC, abstractmethod
from typing import Any, Optional

from websift.config import settings
from websift.errors import ExtractionError, NavigationError
from websift.scraper.extractor import HIDDEN_MARKER, extract_page
from websift.scraper.models import PageExtract

# Runs inside the loaded page: tag computed-hidden elements, then serialise.
SNAPSHOT_SCRIPT = """(marker) => {
  for (const el of document.querySelectorAll('*')) {
    const style = window.getComputedStyle(el);
    if (style.display === 'none' || style.visibility === 'hidden') {
      el.setAttribute(marker, '1');
    }
  }
  return {
    title: document.title,
    url: window.location.href,
    html: document.documentElement.outerHTML,
  };
}"""


def resolve_signal(signal: asyncio.Future, extract: PageExtract) -> None:
    """Deliver *extract* unless the harvester already gave up on *signal*."""
    if not signal.done():
        signal.set_result(extract)


def fail_signal(signal: asyncio.Future, exc: BaseException) -> None:
    if not signal.done():
        signal.set_exception(exc)


# ---------------------------------------------------------------------------
# Abstract interfaces
# ---------------------------------------------------------------------------

class BrowsingContext(ABC):
    """Handle to one open browsing context.  Owned by a single harvester."""

    @abstractmethod
    async def close(self) -> None:
        """Discard the context.  Safe to call more than once."""


class ContextProvider(ABC):
    """Factory for isolated browsing contexts."""

    @abstractmethod
    async def open(self, url: str, signal: asyncio.Future) -> BrowsingContext:
        """Open a background context on *url* that will settle *signal*.

        Raises:
            NavigationError: The context could not be created.  Anything
                created part-way has already been released.
        """


# ---------------------------------------------------------------------------
# Playwright implementation
# ---------------------------------------------------------------------------

class PlaywrightBrowsingContext(BrowsingContext):
    def __init__(self, context: Any, task: Optional[asyncio.Task] = None) -> None:
        self._context = context
        self._task = task
        self._closed = False

    def attach(self, task: asyncio.Task) -> None:
        self._task = task

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._task is not None and not self._task.done():
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
        await self._context.close()


class PlaywrightContextProvider(ContextProvider):
    """Open each harvest in its own Chromium ``BrowserContext``.

    The browser is launched lazily on first use and shared by every context;
    contexts share no cookies or storage with each other.  Playwright is
    imported lazily so the rest of the package imports without a browser
    installed.
    """

    def __init__(
        self,
        headless: Optional[bool] = None,
        settle_delay: Optional[float] = None,
        navigation_timeout: Optional[float] = None,
    ) -> None:
        self._headless = settings.browser_headless if headless is None else headless
        self._settle_delay = (
            settings.page_settle_delay if settle_delay is None else settle_delay
        )
        self._navigation_timeout = (
            settings.harvest_timeout if navigation_timeout is None else navigation_timeout
        )
        self._playwright: Any = None
        self._browser: Any = None
        self._lock = asyncio.Lock()

    async def start(self) -> None:
        async with self._lock:
            if self._browser is not None:
                return
            from playwright.async_api import async_playwright  # noqa: PLC0415

            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(headless=self._headless)
            print("[BROWSER] Chromium launched.")

    async def stop(self) -> None:
        async with self._lock:
            if self._browser is not None:
                await self._browser.close()
                self._browser = None
            if self._playwright is not None:
                await self._playwright.stop()
                self._playwright = None

    async def __aenter__(self) -> PlaywrightContextProvider:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.stop()

    async def open(self, url: str, signal: asyncio.Future) -> BrowsingContext:
        try:
            await self.start()
            context = await self._browser.new_context()
        except Exception as exc:
            raise NavigationError(f"could not create browsing context: {exc}") from exc

        handle = PlaywrightBrowsingContext(context)
        try:
            page = await context.new_page()
        except Exception as exc:
            await handle.close()
            raise NavigationError(f"could not open page: {exc}") from exc

        handle.attach(asyncio.create_task(self._load_and_extract(page, url, signal)))
        return handle

    async def _load_and_extract(self, page: Any, url: str, signal: asyncio.Future) -> None:
        try:
            await page.goto(
                url,
                timeout=int(self._navigation_timeout * 1000),
                wait_until="domcontentloaded",
            )
        except Exception as exc:
            fail_signal(signal, NavigationError(f"could not load {url}: {exc}"))
            return

        # Give client-side rendering a moment before reading the DOM.
        await asyncio.sleep(self._settle_delay)

        try:
            snapshot = await page.evaluate(SNAPSHOT_SCRIPT, HIDDEN_MARKER)
            extract = extract_page(
                snapshot.get("html", ""),
                snapshot.get("url") or url,
                snapshot.get("title") or "",
            )
        except Exception as exc:
            fail_signal(signal, ExtractionError(f"could not snapshot {url}: {exc}"))
            return

        resolve_signal(signal, extract)
