"""Models package - database schema and entities."""

from .schema import get_connection, ensure_database, get_schema_version, TABLE_NAME
from .entities import (
    ChartField,
    DurationPoint,
    OutcomeSlice,
    AnalyticsRecord,
    default_series,
)

__all__ = [
    "get_connection",
    "ensure_database",
    "get_schema_version",
    "TABLE_NAME",
    "ChartField",
    "DurationPoint",
    "OutcomeSlice",
    "AnalyticsRecord",
    "default_series",
]
