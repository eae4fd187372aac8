"""Shared fixtures: an isolated workspace and an in-memory result store."""

from __future__ import annotations

import sqlite3
from typing import Generator

import pytest

from websift.config import settings
from websift.db.connection import get_connection
from websift.db.migrations import init_db


@pytest.fixture(autouse=True)
def isolated_workspace(tmp_path, monkeypatch) -> None:
    """Point the workspace (and therefore the on-disk DB) at a temp dir."""
    monkeypatch.setattr(settings, "workspace_dir", tmp_path / "workspace")


@pytest.fixture()
def conn() -> Generator[sqlite3.Connection, None, None]:
    """In-memory connection with the schema initialised."""
    connection = get_connection(db_path=":memory:")
    init_db(connection)
    yield connection
    connection.close()
