"""Shared fixtures for chart workflow tests.

FakeRemoteStore keeps records in memory and records every call so tests
can assert exactly which remote operations a workflow performed. Setting
``gate`` to an asyncio.Event holds exists/upsert calls open until it is set,
and ``fetch_gate`` does the same for fetch. This lets tests interleave
editor actions with an in-flight save.
"""

import asyncio
from typing import Dict, List, Optional

import pytest

from callboard.charts.errors import RemoteStoreError
from callboard.charts.sanitizer import sanitize
from callboard.charts.store import ChartStore, IdentityPersistence
from callboard.models.entities import AnalyticsRecord, ChartField


class FakeRemoteStore:
    """In-memory stand-in for the remote analytics table."""

    def __init__(self):
        self.records: Dict[str, Dict[ChartField, list]] = {}
        self.calls: List[tuple] = []
        self.fail_exists = False
        self.fail_fetch = False
        self.fail_upsert = False
        self.gate: Optional[asyncio.Event] = None
        self.fetch_gate: Optional[asyncio.Event] = None

    def call_names(self) -> List[str]:
        return [call[0] for call in self.calls]

    async def _wait_for_gate(self):
        if self.gate is not None:
            await self.gate.wait()

    async def exists(self, identity, chart):
        self.calls.append(("exists", identity, chart))
        await self._wait_for_gate()
        if self.fail_exists:
            raise RemoteStoreError()
        return bool(self.records.get(identity, {}).get(chart))

    async def fetch(self, identity):
        self.calls.append(("fetch", identity))
        if self.fail_fetch:
            raise RemoteStoreError()
        row = self.records.get(identity)
        record = None if row is None else AnalyticsRecord(
            identity=identity,
            call_duration=list(row.get(ChartField.CALL_DURATION, [])),
            sad_path=list(row.get(ChartField.SAD_PATH, [])),
        )
        # The response reflects the row as it was when the request was made
        if self.fetch_gate is not None:
            await self.fetch_gate.wait()
        return record

    async def upsert(self, identity, chart, series):
        self.calls.append(("upsert", identity, chart))
        await self._wait_for_gate()
        if self.fail_upsert:
            raise RemoteStoreError()
        self.records.setdefault(identity, {})[chart] = sanitize(series)
        return identity


@pytest.fixture
def remote():
    return FakeRemoteStore()


@pytest.fixture
def state_path(tmp_path):
    return tmp_path / "state.json"


@pytest.fixture
def store(state_path):
    return ChartStore(IdentityPersistence(state_path))
