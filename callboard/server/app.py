"""
FastAPI application factory for the callboard dashboard API.

Creates the app with all routes and lifespan management of the shared
database connection.
"""

import logging
from contextlib import asynccontextmanager

import aiosqlite
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from callboard.charts.errors import RemoteStoreError
from callboard.config.loader import load_config, get_database_path
from callboard.models.schema import ensure_database, get_connection

logger = logging.getLogger("callboard.server")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage database connection lifecycle."""
    config = app.state.config if hasattr(app.state, "config") else load_config()
    app.state.config = config

    db_path = get_database_path(config)

    # Ensure schema is up to date using sync connection
    sync_conn = get_connection(db_path)
    ensure_database(sync_conn)
    sync_conn.close()

    db = await aiosqlite.connect(str(db_path))
    db.row_factory = aiosqlite.Row

    # Match PRAGMAs from callboard/models/schema.py
    await db.execute("PRAGMA journal_mode=WAL")
    await db.execute("PRAGMA synchronous=NORMAL")
    await db.execute("PRAGMA foreign_keys=ON")
    await db.execute("PRAGMA busy_timeout=5000")

    app.state.db = db
    logger.info("Serving chart data from %s", db_path)

    yield

    await db.close()


def create_app(config: dict = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Callboard API",
        description="Voice agent call analytics with per-user editable charts",
        version="1.0.0",
        lifespan=lifespan,
    )

    if config:
        app.state.config = config

    @app.exception_handler(RemoteStoreError)
    async def remote_store_exception_handler(request: Request, exc: RemoteStoreError):
        logger.error("Store failure on %s %s: %s", request.method, request.url.path, exc.__cause__)
        return JSONResponse(
            status_code=503,
            content={"error": exc.message, "detail": str(exc.__cause__ or exc)},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "detail": str(exc)},
        )

    from callboard.server.routes.health import router as health_router
    from callboard.server.routes.analytics import router as analytics_router

    app.include_router(health_router)
    app.include_router(analytics_router)

    return app
