"""FastAPI application factory.

Lifespan
--------
On startup the app initialises the schema and stores the database path in
``app.state.db_path``.  Each request then opens its own connection through
:func:`gleaner.api.deps.get_db`, closed when the request ends.

Routers
-------
    /sources   : register sources, trigger a crawl, read crawl history
    /crawl     : dry-run preview, crawl-all, recent crawl logs
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gleaner.config import settings
from gleaner.db import get_connection, init_db

from gleaner.api.routers import crawl as crawl_router
from gleaner.api.routers import sources as sources_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Initialise the schema on startup and remember where the DB lives."""
    conn = get_connection()
    try:
        init_db(conn)
    finally:
        conn.close()
    app.state.db_path = settings.db_path
    yield


def create_app() -> FastAPI:
    """Return a fully-configured FastAPI application instance."""
    app = FastAPI(
        title="Gleaner API",
        description=(
            "REST interface for the Gleaner reading store. Exposes source "
            "registration, on-demand smart crawls with per-source crawl "
            "history, and a dry-run crawl preview."
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

    app.include_router(sources_router.router, prefix="/sources", tags=["sources"])
    app.include_router(crawl_router.router, prefix="/crawl", tags=["crawl"])

    return app


# Module-level instance used by uvicorn:
#   uvicorn gleaner.api.app:app --reload
app = create_app()
