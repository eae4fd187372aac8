"""WebSift CLI — entry-point for search, extraction and result maintenance.

Usage:
    python cli/main.py --help

Commands:
    search    → search both backends and harvest the top pages
    discover  → search only, list candidate URLs with their backend
    extract   → harvest explicit URLs
    results   → stored results (show / list / purge)
    updates   → update manifest check
    db        → database maintenance
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from websift.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import asyncio
import json
import sqlite3
import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, List, Optional

import typer

from websift.config import settings
from websift.db import get_connection, init_db
from websift.messages import MessageDispatcher, error
from websift.orchestrator import SearchOrchestrator
from websift.scraper.browser import PlaywrightContextProvider
from websift.scraper.harvester import PageHarvester

from cli.commands.results import results_app
from cli.commands.updates import updates_app
from cli.rendering import render_candidates, render_result, render_sources

app = typer.Typer(
    name="websift",
    help="WebSift web research CLI.",
    no_args_is_help=True,
)
app.add_typer(results_app, name="results")
app.add_typer(updates_app, name="updates")


# ---------------------------------------------------------------------------
# Pipeline helpers
# ---------------------------------------------------------------------------

@asynccontextmanager
async def open_orchestrator(conn: sqlite3.Connection) -> AsyncIterator[SearchOrchestrator]:
    """Yield an orchestrator for the duration of a command.

    Chromium is only launched by the first harvest, so discovery never needs a
    browser; it is stopped again on exit if it was started.
    """
    provider = PlaywrightContextProvider()
    try:
        yield SearchOrchestrator(PageHarvester(provider), conn=conn)
    finally:
        await provider.stop()


def _dispatch(message: dict[str, Any]) -> dict[str, Any]:
    """Run one message through a fresh pipeline and return the reply envelope."""

    async def _run(conn: sqlite3.Connection) -> dict[str, Any]:
        try:
            async with open_orchestrator(conn) as orchestrator:
                return await MessageDispatcher(orchestrator, conn=conn).handle(message)
        except Exception as exc:
            return error(str(message.get("request_id", "")), str(exc) or type(exc).__name__)

    conn = get_connection()
    init_db(conn)
    try:
        return asyncio.run(_run(conn))
    finally:
        conn.close()


def _fail_if_unsuccessful(command: str, response: dict[str, Any]) -> None:
    if not response.get("success"):
        typer.echo(f"[{command}] ✗ {response.get('error', 'unknown error')}")
        raise typer.Exit(code=1)


# ---------------------------------------------------------------------------
# DB commands
# ---------------------------------------------------------------------------
db_app = typer.Typer(help="Database operations.", no_args_is_help=True)
app.add_typer(db_app, name="db")


@db_app.command("init")
def db_init() -> None:
    """Initialise the SQLite database (create tables if they do not exist)."""
    conn = get_connection()
    init_db(conn)
    conn.close()
    typer.echo(f"[db init] Database ready at {settings.db_path}")


# ---------------------------------------------------------------------------
# Search / extract commands
# ---------------------------------------------------------------------------
@app.command("search")
def search(
    query: str = typer.Option(..., help="Search query."),
    budget: int = typer.Option(settings.page_budget, help="Maximum pages to harvest."),
    request_id: Optional[str] = typer.Option(None, "--id", help="Request id (random if omitted)."),
    as_json: bool = typer.Option(False, "--json", help="Print the raw reply envelope."),
) -> None:
    """Search Wikipedia and DuckDuckGo, then extract text from the top pages."""
    rid = request_id or str(uuid.uuid4())
    typer.echo(f"[search] {query!r}  (budget={budget}, id={rid})", err=as_json)
    response = _dispatch(
        {"type": "SEARCH_AND_EXTRACT", "query": query, "request_id": rid, "page_budget": budget}
    )
    if as_json:
        typer.echo(json.dumps(response, indent=2))
        return
    _fail_if_unsuccessful("search", response)
    typer.echo(render_result(response["results"]))


@app.command("discover")
def discover(
    query: str = typer.Option(..., help="Search query."),
    as_json: bool = typer.Option(False, "--json", help="Print the raw reply envelope."),
) -> None:
    """List candidate URLs from both backends without loading any page."""
    response = _dispatch(
        {"type": "SEARCH_ONLY", "query": query, "request_id": str(uuid.uuid4())}
    )
    if as_json:
        typer.echo(json.dumps(response, indent=2))
        return
    _fail_if_unsuccessful("discover", response)
    typer.echo(f"[discover] {response['resultCount']} URL(s) for {query!r}:")
    typer.echo(render_candidates(response["results"]))


@app.command("extract")
def extract(
    url: List[str] = typer.Option(..., "--url", help="URL to harvest (repeatable)."),
    as_json: bool = typer.Option(False, "--json", help="Print the raw reply envelope."),
) -> None:
    """Load each URL in an isolated browser context and print its clean text."""
    response = _dispatch(
        {"type": "EXTRACT_URLS", "urls": list(url), "request_id": str(uuid.uuid4())}
    )
    if as_json:
        typer.echo(json.dumps(response, indent=2))
        return
    _fail_if_unsuccessful("extract", response)
    typer.echo(f"[extract] {response['resultCount']} of {len(url)} page(s) extracted.")
    typer.echo(render_sources(response["results"]["sources"]))


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
