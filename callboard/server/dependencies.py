"""FastAPI dependency injection for the database and remote store."""

import aiosqlite
from fastapi import Request

from callboard.charts.remote import SqliteRemoteStore


async def get_db(request: Request) -> aiosqlite.Connection:
    """Get the shared aiosqlite connection from app state."""
    return request.app.state.db


async def get_remote_store(request: Request) -> SqliteRemoteStore:
    """Remote store over the shared connection."""
    return SqliteRemoteStore(request.app.state.db)
