"""Health check endpoint."""

import time
from fastapi import APIRouter, Depends

import aiosqlite

from callboard.models.schema import TABLE_NAME
from callboard.server.dependencies import get_db

router = APIRouter(prefix="/api", tags=["health"])

_start_time = time.time()


@router.get("/health")
async def health_check(db: aiosqlite.Connection = Depends(get_db)):
    """Health check: returns status, uptime, database health and row count."""
    uptime = int(time.time() - _start_time)

    db_status = "ok"
    users = 0
    try:
        cursor = await db.execute(f"SELECT COUNT(*) FROM {TABLE_NAME}")
        row = await cursor.fetchone()
        users = row[0] if row else 0
    except aiosqlite.Error:
        db_status = "error"

    return {
        "status": "ok",
        "uptime_seconds": uptime,
        "database": db_status,
        "users": users,
        "version": "1.0.0",
    }
