"""FastAPI HTTP layer package.

Public re-export so callers can write::

    from websift.api import app

    uvicorn websift.api:app --reload
"""

from websift.api.app import app

__all__ = ["app"]
