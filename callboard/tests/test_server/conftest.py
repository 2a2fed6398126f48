"""Test fixtures for server tests.

Creates a deterministic test database with known rows for testing API
endpoints and the remote store clients.
"""

import json

import pytest
import pytest_asyncio
import aiosqlite
from httpx import ASGITransport, AsyncClient

from callboard.models.schema import get_connection, ensure_database, TABLE_NAME
from callboard.server.app import create_app

SAD_PATH_ROWS = [
    {"name": "Caller Identification", "value": 10},
    {"name": "Unsupported Language", "value": 40},
    {"name": "User Refused Identity", "value": 20},
    {"name": "Incorrect Identity Provided", "value": 20},
    {"name": "Customer Hostility", "value": 10},
]

DURATION_ROWS = [
    {"day": "1 Jan 2025", "value": 120},
    {"day": "1 Feb 2025", "value": 180},
]


@pytest.fixture
def test_db_path(tmp_path):
    """Create a temporary database path."""
    return tmp_path / "test_server.db"


@pytest.fixture
def populated_db(test_db_path):
    """Create and populate a test database with deterministic data."""
    conn = get_connection(test_db_path)
    ensure_database(conn)
    _populate_test_data(conn)
    conn.close()
    return test_db_path


def _populate_test_data(conn):
    """Insert deterministic test data.

    Creates:
    - outcomes@example.com with sad path data only
    - both@example.com with both charts
    - empty@example.com with an empty sad path array
    """
    conn.execute(f"""
        INSERT INTO {TABLE_NAME} (user_email, call_duration_data, sad_path_data, created_at, updated_at)
        VALUES
            ('outcomes@example.com', NULL, ?, '2025-03-01 10:00:00', '2025-03-01 10:00:00'),
            ('both@example.com', ?, ?, '2025-03-02 10:00:00', '2025-03-02 10:00:00'),
            ('empty@example.com', NULL, '[]', '2025-03-03 10:00:00', '2025-03-03 10:00:00')
    """, (
        json.dumps(SAD_PATH_ROWS),
        json.dumps(DURATION_ROWS), json.dumps(SAD_PATH_ROWS),
    ))
    conn.commit()


@pytest_asyncio.fixture
async def async_db(populated_db):
    """Open an aiosqlite connection to the populated test database."""
    db = await aiosqlite.connect(str(populated_db))
    db.row_factory = aiosqlite.Row
    cursor = await db.execute("PRAGMA journal_mode=WAL")
    await cursor.close()
    yield db
    await db.close()


@pytest_asyncio.fixture
async def client(populated_db, tmp_path):
    """Create an async test client with the populated database."""
    config = {
        "database_path": str(populated_db),
        "state_path": str(tmp_path / "state.json"),
        "api_url": None,
        "request_timeout": 5.0,
        "server": {"host": "127.0.0.1", "port": 8080},
    }

    app = create_app(config=config)

    # Override lifespan by manually setting up the database
    db = await aiosqlite.connect(str(populated_db))
    db.row_factory = aiosqlite.Row
    await db.execute("PRAGMA journal_mode=WAL")
    app.state.db = db
    app.state.config = config

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    await db.close()
