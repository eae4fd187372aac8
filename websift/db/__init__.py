"""Database layer package.

Public re-exports so callers can write::

    from websift.db import get_connection, init_db
    from websift.db import results
"""

from websift.db.connection import get_connection
from websift.db.migrations import init_db
from websift.db import kv, results

__all__ = ["get_connection", "init_db", "kv", "results"]
