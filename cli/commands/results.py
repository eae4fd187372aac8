"""Commands for inspecting and expiring stored search results."""

from __future__ import annotations

import json

import typer

from websift.db import get_connection, init_db
from websift.db.results import get_result, list_results, purge_expired

from cli.rendering import render_result

results_app = typer.Typer(help="Inspect stored search results.", no_args_is_help=True)


@results_app.command("show")
def results_show(
    request_id: str = typer.Argument(..., help="Request id of the search."),
    as_json: bool = typer.Option(False, "--json", help="Print the raw JSON result."),
) -> None:
    """Show a stored search result."""
    conn = get_connection()
    init_db(conn)
    try:
        result = get_result(conn, request_id)
    finally:
        conn.close()
    if result is None:
        typer.echo(f"[results show] No result for {request_id!r}.")
        raise typer.Exit(code=1)
    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2))
    else:
        typer.echo(render_result(result.to_dict()))


@results_app.command("list")
def results_list(
    limit: int = typer.Option(20, help="Maximum number of results to list."),
) -> None:
    """List the most recent stored results."""
    conn = get_connection()
    init_db(conn)
    try:
        results = list_results(conn, limit=limit)
    finally:
        conn.close()
    if not results:
        typer.echo("[results list] No stored results.")
        return
    for r in results:
        typer.echo(f"  {r.request_id}  [{r.status.value}]  {r.query!r}  ({len(r.sources)} sources)")


@results_app.command("purge")
def results_purge() -> None:
    """Delete results older than the expiry window."""
    conn = get_connection()
    init_db(conn)
    try:
        purged = purge_expired(conn)
    finally:
        conn.close()
    typer.echo(f"[results purge] Removed {purged} expired result(s).")
