"""FastAPI application factory.

Lifespan
--------
On startup the app opens the JSON store (shared across all requests via
``request.app.state.store``) and wires its write hook to
:func:`invalidate_views`, which bumps ``app.state.revision``.  The
``GET /hosts`` ETag is a hash of the collection itself, so it also changes
when another process rewrites the file.

Routers
-------
    /categories — category vocabulary
    /types      — type vocabulary
    /hosts      — host groups and their entries
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from functools import partial
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hostsboard import __version__
from hostsboard.config import settings
from hostsboard.db.errors import StoreError
from hostsboard.db.store import Store, get_store
from hostsboard.logging_config import configure_logging

from hostsboard.api.routers import hosts as hosts_router
from hostsboard.api.routers import vocabulary as vocabulary_router

logger = logging.getLogger(__name__)


def invalidate_views(app: FastAPI) -> None:
    """Mark cached views of the host collection as stale."""
    app.state.revision += 1
    logger.debug("Views invalidated (revision %d)", app.state.revision)


def create_app(store: Optional[Store] = None) -> FastAPI:
    """Return a fully-configured FastAPI application instance.

    Args:
        store: Use this store instead of opening ``settings.db_path``.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Open the store on startup."""
        hook = partial(invalidate_views, app)
        if store is None:
            app.state.store = get_store(on_write=hook)
        else:
            store.on_write = hook
            app.state.store = store
        logger.info("Serving hosts document from %r", app.state.store)
        yield

    configure_logging(settings.log_level)

    app = FastAPI(
        title="hostsboard API",
        description=(
            "Admin interface for grouped hosts-file entries: category and "
            "type vocabularies, host groups, and their entries."
        ),
        version=__version__,
        lifespan=lifespan,
    )
    app.state.revision = 0

    # Allow browser frontends on any origin (tighten for production).
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
        logger.exception("Store failure on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    app.include_router(
        vocabulary_router.categories_router, prefix="/categories", tags=["categories"]
    )
    app.include_router(vocabulary_router.types_router, prefix="/types", tags=["types"])
    app.include_router(hosts_router.router, prefix="/hosts", tags=["hosts"])

    return app


# Module-level instance used by uvicorn:
#   uvicorn hostsboard.api.app:app --reload
app = create_app()
