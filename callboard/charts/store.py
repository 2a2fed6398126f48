"""
Client-side chart state.

Holds the committed series for each chart, their rollback snapshots, the
edit-mode flags and the known identity. Only the identity survives between
sessions; chart data is re-fetched from the remote store once the identity
is known.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from callboard.charts.errors import RemoteStoreError
from callboard.charts.identity import normalize_email
from callboard.charts.remote import RemoteStore
from callboard.charts.sanitizer import copy_series, sanitize
from callboard.models.entities import (
    ChartField,
    OutcomeSlice,
    Point,
    default_series,
    series_to_list,
)
from callboard.output.formatter import leading_outcome

logger = logging.getLogger(__name__)

STATE_KEY = "callboard-chart-store"


class IdentityPersistence:
    """Reads and writes the remembered identity as a small JSON file."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> Optional[str]:
        if not self.path.exists():
            return None
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Could not read client state %s: %s", self.path, e)
            return None

        state = data.get(STATE_KEY) if isinstance(data, dict) else None
        identity = state.get("identity") if isinstance(state, dict) else None
        if not isinstance(identity, str):
            return None
        return normalize_email(identity) or None

    def save(self, identity: Optional[str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump({STATE_KEY: {"identity": identity}}, f, indent=2)


@dataclass
class SeriesState:
    """Committed series of one chart plus its rollback snapshot."""
    current: List[Point] = field(default_factory=list)
    initial: List[Point] = field(default_factory=list)
    editing: bool = False
    revision: int = 0  # bumped on every commit


class ChartStore:
    """Shared state container passed explicitly to each save workflow."""

    def __init__(self, persistence: Optional[IdentityPersistence] = None):
        self.persistence = persistence
        self._charts: Dict[ChartField, SeriesState] = {}
        for chart in ChartField:
            seed = default_series(chart)
            self._charts[chart] = SeriesState(current=seed, initial=copy_series(seed))
        self._identity: Optional[str] = persistence.load() if persistence else None

    # Series

    def series(self, chart: ChartField) -> List[Point]:
        return self._charts[chart].current

    def initial(self, chart: ChartField) -> List[Point]:
        return self._charts[chart].initial

    def set_series(self, chart: ChartField, series: Sequence[Point]) -> None:
        self._charts[chart].current = sanitize(series)

    def set_initial(self, chart: ChartField, series: Sequence[Point]) -> None:
        self._charts[chart].initial = sanitize(series)

    def commit(self, chart: ChartField, series: Sequence[Point]) -> None:
        """Make ``series`` both the displayed data and the rollback target."""
        self.set_series(chart, series)
        self.set_initial(chart, series)
        self._charts[chart].revision += 1

    @property
    def call_duration(self) -> List[Point]:
        return self.series(ChartField.CALL_DURATION)

    @property
    def call_outcomes(self) -> List[Point]:
        return self.series(ChartField.SAD_PATH)

    # Edit mode

    def is_editing(self, chart: ChartField) -> bool:
        return self._charts[chart].editing

    def set_editing(self, chart: ChartField, editing: bool) -> None:
        self._charts[chart].editing = bool(editing)

    # Identity

    @property
    def identity(self) -> Optional[str]:
        return self._identity

    def set_identity(self, raw: Optional[str]) -> None:
        """Normalize and remember ``raw``; blank or None forgets the identity."""
        identity = normalize_email(raw) if raw else ""
        self._identity = identity or None
        if self.persistence:
            self.persistence.save(self._identity)

    async def load_user_data(self, remote: RemoteStore, identity: Optional[str] = None) -> bool:
        """
        Replace committed data with the remote record for the known identity.

        Each chart is replaced only when the stored series is non-empty.
        Returns True if any chart was replaced. Remote failures are logged
        and leave the current data in place.

        The fetch result is stale once the identity changes or a chart is
        committed while it is in flight: a changed identity drops the whole
        record, a newer commit keeps that chart as it is.
        """
        target = normalize_email(identity or self._identity or "")
        if not target:
            return False

        identity_before = self._identity
        revisions = {chart: state.revision for chart, state in self._charts.items()}
        try:
            record = await remote.fetch(target)
        except RemoteStoreError:
            logger.exception("Failed to load chart data for %s", target)
            return False

        if record is None:
            return False
        if self._identity != identity_before:
            logger.debug("Identity changed while loading %s, dropping result", target)
            return False

        loaded = False
        for chart in ChartField:
            if self._charts[chart].revision != revisions[chart]:
                logger.debug("%s committed while loading %s, keeping it", chart.value, target)
                continue
            series = record.series(chart)
            if series:
                self.commit(chart, series)
                loaded = True
        return loaded

    # Derived

    def leading_outcome(self) -> Optional[OutcomeSlice]:
        return leading_outcome(self.call_outcomes)

    def save_payload(self, chart: ChartField) -> Dict[str, Any]:
        return {
            "chartKey": chart.chart_key,
            "data": series_to_list(self.series(chart)),
            "updatedAt": datetime.now(timezone.utc).isoformat(),
        }
