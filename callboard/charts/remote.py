"""
Remote store clients for per-user chart data.

The store is a single table keyed by normalized email with one JSON array
column per chart. Two clients are provided: one talking to the SQLite
database directly and one talking to a running callboard server over HTTP.
Both raise RemoteStoreError for any failure so the save workflow can treat
them the same way.
"""

import logging
from typing import Any, Dict, List, Optional, Protocol, Sequence
from urllib.parse import quote

import aiosqlite
import httpx

from callboard.charts.errors import RemoteStoreError
from callboard.charts.identity import normalize_email
from callboard.charts.sanitizer import sanitize
from callboard.models.entities import (
    AnalyticsRecord,
    ChartField,
    Point,
    series_from_list,
    series_to_list,
)
from callboard.server.queries import analytics_queries

logger = logging.getLogger(__name__)


class RemoteStore(Protocol):
    """Key-value style collaborator the save workflow persists through."""

    async def exists(self, identity: str, chart: ChartField) -> bool:
        ...

    async def fetch(self, identity: str) -> Optional[AnalyticsRecord]:
        ...

    async def upsert(self, identity: str, chart: ChartField, series: Sequence[Point]) -> str:
        ...


def record_from_row(row: Dict[str, Any]) -> AnalyticsRecord:
    """Build a sanitized record from a row/JSON dict."""
    return AnalyticsRecord(
        identity=normalize_email(row.get("user_email", "")),
        call_duration=sanitize(series_from_list(ChartField.CALL_DURATION, row.get("call_duration_data"))),
        sad_path=sanitize(series_from_list(ChartField.SAD_PATH, row.get("sad_path_data"))),
        updated_at=row.get("updated_at"),
    )


class SqliteRemoteStore:
    """Remote store backed by a shared aiosqlite connection."""

    def __init__(self, db: aiosqlite.Connection):
        self.db = db

    async def exists(self, identity: str, chart: ChartField) -> bool:
        try:
            return await analytics_queries.has_data(self.db, identity, chart)
        except aiosqlite.Error as exc:
            raise RemoteStoreError() from exc

    async def fetch(self, identity: str) -> Optional[AnalyticsRecord]:
        try:
            row = await analytics_queries.get_user_analytics(self.db, identity)
        except aiosqlite.Error as exc:
            raise RemoteStoreError() from exc
        return record_from_row(row) if row else None

    async def upsert(self, identity: str, chart: ChartField, series: Sequence[Point]) -> str:
        data = series_to_list(sanitize(series))
        try:
            result = await analytics_queries.save_chart_data(self.db, identity, chart, data)
        except aiosqlite.Error as exc:
            raise RemoteStoreError() from exc
        return result["email"]


class HttpRemoteStore:
    """Remote store reached through the callboard JSON API."""

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    @classmethod
    def from_url(cls, base_url: str, timeout: float = 10.0) -> "HttpRemoteStore":
        return cls(httpx.AsyncClient(base_url=base_url, timeout=timeout))

    async def aclose(self) -> None:
        await self.client.aclose()

    @staticmethod
    def _path(identity: str, *parts: str) -> str:
        segments = [quote(normalize_email(identity), safe="")] + list(parts)
        return "/api/analytics/" + "/".join(segments)

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            response = await self.client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("Remote store %s %s failed: %s", method, url, exc)
            raise RemoteStoreError() from exc
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Dict[str, Any]:
        try:
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPStatusError, ValueError) as exc:
            raise RemoteStoreError() from exc
        if not isinstance(body, dict):
            logger.warning("Remote store returned %s instead of an object", type(body).__name__)
            raise RemoteStoreError()
        return body

    async def exists(self, identity: str, chart: ChartField) -> bool:
        response = await self._request(
            "GET", self._path(identity, "exists"), params={"chart": chart.value}
        )
        return bool(self._json(response).get("exists"))

    async def fetch(self, identity: str) -> Optional[AnalyticsRecord]:
        response = await self._request("GET", self._path(identity))
        if response.status_code == 404:
            return None
        return record_from_row(self._json(response))

    async def upsert(self, identity: str, chart: ChartField, series: Sequence[Point]) -> str:
        payload: Dict[str, List[Dict[str, Any]]] = {"data": series_to_list(sanitize(series))}
        response = await self._request(
            "PUT", self._path(identity, chart.value), json=payload
        )
        return str(self._json(response).get("email", normalize_email(identity)))
