"""
SQLite database schema definition, migrations, and connection management.

This module defines the single-table schema for callboard and implements
versioned migrations using PRAGMA user_version.
"""

import sqlite3
from pathlib import Path

# Current schema version - increment when adding migrations
CURRENT_SCHEMA_VERSION = 2

TABLE_NAME = "voice_agent_analytics"


def get_connection(db_path: Path) -> sqlite3.Connection:
    """
    Get a database connection with proper configuration.

    Configures:
    - WAL mode for concurrent reads
    - NORMAL synchronous for balance of safety/speed
    - Row factory for dict-like access
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row

    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA synchronous=NORMAL")
    conn.execute("PRAGMA foreign_keys=ON")

    return conn


def get_schema_version(conn: sqlite3.Connection) -> int:
    """Get current schema version from PRAGMA user_version."""
    cursor = conn.execute("PRAGMA user_version")
    return cursor.fetchone()[0]


def set_schema_version(conn: sqlite3.Connection, version: int) -> None:
    """Set schema version using PRAGMA user_version."""
    conn.execute(f"PRAGMA user_version = {version}")


def ensure_database(conn: sqlite3.Connection) -> None:
    """
    Ensure database has correct schema, running migrations if needed.

    Creates the analytics table if it doesn't exist,
    then runs any pending migrations.
    """
    current_version = get_schema_version(conn)

    if current_version < 1:
        _create_initial_schema(conn)
        set_schema_version(conn, 1)
        conn.commit()

    # Migration v1 -> v2: Track row creation/update times
    if current_version < 2:
        _migrate_v1_to_v2(conn)
        set_schema_version(conn, 2)
        conn.commit()


def _create_initial_schema(conn: sqlite3.Connection) -> None:
    """Create the initial schema (version 1)."""

    # One row per normalized email; each chart column holds a JSON array
    conn.execute(f"""
        CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
            user_email TEXT PRIMARY KEY,
            call_duration_data TEXT,
            sad_path_data TEXT
        )
    """)


def _migrate_v1_to_v2(conn: sqlite3.Connection) -> None:
    """Add created_at/updated_at columns."""
    cursor = conn.execute(f"PRAGMA table_info({TABLE_NAME})")
    columns = {row[1] for row in cursor.fetchall()}

    # SQLite rejects non-constant defaults in ALTER TABLE, so backfill instead
    if "created_at" not in columns:
        conn.execute(f"ALTER TABLE {TABLE_NAME} ADD COLUMN created_at TEXT")
        conn.execute(f"UPDATE {TABLE_NAME} SET created_at = datetime('now') WHERE created_at IS NULL")
    if "updated_at" not in columns:
        conn.execute(f"ALTER TABLE {TABLE_NAME} ADD COLUMN updated_at TEXT")
        conn.execute(f"UPDATE {TABLE_NAME} SET updated_at = datetime('now') WHERE updated_at IS NULL")


def drop_all_tables(conn: sqlite3.Connection) -> None:
    """Drop all tables (for testing or rebuild)."""
    conn.execute(f"DROP TABLE IF EXISTS {TABLE_NAME}")
    set_schema_version(conn, 0)
    conn.commit()
