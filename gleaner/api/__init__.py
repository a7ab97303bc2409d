"""FastAPI HTTP layer package.

Public re-export so callers can write::

    from gleaner.api import app

    uvicorn gleaner.api:app --reload
"""

from gleaner.api.app import app

__all__ = ["app"]
