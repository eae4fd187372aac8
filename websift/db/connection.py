"""Opening the WebSift SQLite database.

    from websift.db.connection import get_connection

    conn = get_connection()              # settings.db_path, workspace created
    scratch = get_connection(":memory:")  # tests
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Optional, Union

from websift.config import settings


def get_connection(db_path: Optional[Union[Path, str]] = None) -> sqlite3.Connection:
    """Return a connection with ``sqlite3.Row`` rows and WAL journaling.

    WAL lets the API's expiry sweeper delete rows while request handlers
    read.  The connection may be used from the threads FastAPI runs sync
    routes on.
    """
    path = db_path or settings.db_path
    if str(path) != ":memory:":
        settings.ensure_workspace()

    conn = sqlite3.connect(str(path), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode = WAL")
    return conn
