"""FastAPI application factory.

Lifespan
--------
On startup the app opens a single SQLite connection (shared across all
requests via ``request.app.state.db``), builds the harvesting pipeline and
starts two background loops: the expired-result sweeper and the update
checker.  On shutdown it cancels the loops, closes the browser and closes the
connection.

Routers
-------
    /messages  — tagged inbound messages (PING, SEARCH_AND_EXTRACT, ...)
    /search    — search + extract, and discovery-only search
    /extract   — harvest a caller-supplied URL list
    /results   — stored results and the expiry purge
    /updates   — pending update / manual update check
"""

from __future__ import annotations

import asyncio
import contextlib
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from websift.db import get_connection, init_db
from websift.db.results import run_sweeper
from websift.messages import MessageDispatcher
from websift.orchestrator import SearchOrchestrator
from websift.scraper.browser import PlaywrightContextProvider
from websift.scraper.harvester import PageHarvester
from websift.updates import run_update_checker

from websift.api.routers import extract as extract_router
from websift.api.routers import messages as messages_router
from websift.api.routers import results as results_router
from websift.api.routers import search as search_router
from websift.api.routers import updates as updates_router


def create_app(background_tasks: bool = True) -> FastAPI:
    """Return a fully-configured FastAPI application instance.

    Args:
        background_tasks: Start the sweeper and update-checker loops.  Tests
            turn this off so no timers or network calls run.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        conn = get_connection()
        init_db(conn)
        provider = PlaywrightContextProvider()
        orchestrator = SearchOrchestrator(PageHarvester(provider), conn=conn)

        app.state.db = conn
        app.state.orchestrator = orchestrator
        app.state.dispatcher = MessageDispatcher(orchestrator, conn=conn)

        tasks: list[asyncio.Task] = []
        if background_tasks:
            tasks.append(asyncio.create_task(run_sweeper(conn)))
            tasks.append(asyncio.create_task(run_update_checker(conn)))
        try:
            yield
        finally:
            for task in tasks:
                task.cancel()
            try:
                for task in tasks:
                    with contextlib.suppress(asyncio.CancelledError, Exception):
                        await task
                await provider.stop()
            finally:
                conn.close()

    app = FastAPI(
        title="WebSift API",
        description=(
            "Web research service: fans a query out to Wikipedia and DuckDuckGo, "
            "loads the top pages in isolated headless browser contexts and "
            "returns their cleaned text."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )

    # Allow browser frontends on any origin (tighten for production).
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(messages_router.router, prefix="/messages", tags=["messages"])
    app.include_router(search_router.router, prefix="/search", tags=["search"])
    app.include_router(extract_router.router, prefix="/extract", tags=["extract"])
    app.include_router(results_router.router, prefix="/results", tags=["results"])
    app.include_router(updates_router.router, prefix="/updates", tags=["updates"])

    return app


# Module-level instance used by uvicorn:
#   uvicorn websift.api.app:app --reload
app = create_app()
