"""Queries for the per-user voice agent analytics table."""

import json
from typing import Any, Dict, List, Optional

import aiosqlite

from callboard.charts.identity import normalize_email
from callboard.models.entities import ChartField
from callboard.models.schema import TABLE_NAME


def _encode_series(data: List[Dict[str, Any]]) -> str:
    return json.dumps(data or [], separators=(",", ":"))


def _decode_series(raw: Optional[str]) -> List[Dict[str, Any]]:
    if not raw:
        return []
    try:
        decoded = json.loads(raw)
        return decoded if isinstance(decoded, list) else []
    except Exception:
        return []


async def get_user_analytics(
    db: aiosqlite.Connection,
    email: str,
) -> Optional[Dict[str, Any]]:
    """Fetch the row for ``email``, or None when the user has never saved."""
    cursor = await db.execute(f"""
        SELECT user_email, call_duration_data, sad_path_data, updated_at
        FROM {TABLE_NAME}
        WHERE user_email = ?
    """, (normalize_email(email),))
    row = await cursor.fetchone()
    if row is None:
        return None
    return {
        "user_email": str(row[0]),
        "call_duration_data": _decode_series(row[1]),
        "sad_path_data": _decode_series(row[2]),
        "updated_at": row[3],
    }


async def has_data(
    db: aiosqlite.Connection,
    email: str,
    chart: ChartField,
) -> bool:
    """True when a non-empty array is stored for ``chart`` under ``email``."""
    cursor = await db.execute(f"""
        SELECT {chart.column}
        FROM {TABLE_NAME}
        WHERE user_email = ?
    """, (normalize_email(email),))
    row = await cursor.fetchone()
    if row is None:
        return False
    return len(_decode_series(row[0])) > 0


async def save_chart_data(
    db: aiosqlite.Connection,
    email: str,
    chart: ChartField,
    data: List[Dict[str, Any]],
) -> Dict[str, str]:
    """Create the user's row or replace only ``chart``'s column."""
    normalized = normalize_email(email)
    column = chart.column
    await db.execute(f"""
        INSERT INTO {TABLE_NAME} (user_email, {column}, created_at, updated_at)
        VALUES (?, ?, datetime('now'), datetime('now'))
        ON CONFLICT(user_email) DO UPDATE SET
            {column} = excluded.{column},
            updated_at = excluded.updated_at
    """, (normalized, _encode_series(data)))
    await db.commit()
    return {"email": normalized}
