"""Update-check commands."""

from __future__ import annotations

import asyncio

import typer

from websift.db import get_connection, init_db
from websift.updates import check_for_updates, get_pending_update

updates_app = typer.Typer(help="Check for new releases.", no_args_is_help=True)


@updates_app.command("check")
def updates_check() -> None:
    """Fetch the update manifest now."""
    conn = get_connection()
    init_db(conn)
    try:
        update = asyncio.run(check_for_updates(conn))
    finally:
        conn.close()
    if update is None:
        typer.echo("[updates check] No updates available.")
        return
    typer.echo(f"[updates check] Update found: {update.id}")
    typer.echo(f"[updates check] Download: {update.url}")


@updates_app.command("show")
def updates_show() -> None:
    """Show the last detected pending update."""
    conn = get_connection()
    init_db(conn)
    try:
        update = get_pending_update(conn)
    finally:
        conn.close()
    if update is None:
        typer.echo("[updates show] No pending update.")
        return
    typer.echo(f"[updates show] {update.id}  {update.url}")
