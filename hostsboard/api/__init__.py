"""FastAPI HTTP layer package.

Public re-export so callers can write::

    from hostsboard.api import app

    uvicorn hostsboard.api:app --reload
"""

from hostsboard.api.app import app

__all__ = ["app"]
