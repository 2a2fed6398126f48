"""
Data structures (entities) for callboard.

Uses dataclasses for clean, typed data structures.
Named 'entities' instead of 'dataclasses' to avoid stdlib import confusion.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class ChartField(str, Enum):
    """The two independently stored chart datasets of a user's record."""
    CALL_DURATION = "call_duration"
    SAD_PATH = "sad_path"

    @property
    def column(self) -> str:
        """Storage column holding this field's JSON array."""
        return f"{self.value}_data"

    @property
    def key_attr(self) -> str:
        """Attribute that identifies a point within the series."""
        return "day" if self is ChartField.CALL_DURATION else "name"

    @property
    def chart_key(self) -> str:
        """Chart key used in save payloads."""
        return "call_duration_trend" if self is ChartField.CALL_DURATION else "sad_path_distribution"


@dataclass
class DurationPoint:
    """Average handle time (seconds) at the start of a month."""
    day: str  # calendar-month label, e.g. "1 Jan 2024"
    value: float = 0.0

    @property
    def key(self) -> str:
        return self.day

    def to_dict(self) -> Dict[str, Any]:
        return {"day": self.day, "value": self.value}


@dataclass
class OutcomeSlice:
    """Share of automated calls that failed or exited for one reason."""
    name: str
    value: float = 0.0

    @property
    def key(self) -> str:
        return self.name

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "value": self.value}


Point = Union[DurationPoint, OutcomeSlice]


@dataclass
class AnalyticsRecord:
    """One persisted row: both chart series stored under a single identity."""
    identity: str
    call_duration: List[DurationPoint] = field(default_factory=list)
    sad_path: List[OutcomeSlice] = field(default_factory=list)
    updated_at: Optional[str] = None

    def series(self, chart: ChartField) -> List[Point]:
        if chart is ChartField.CALL_DURATION:
            return self.call_duration
        return self.sad_path


def point_from_dict(chart: ChartField, raw: Dict[str, Any]) -> Point:
    """Build the point type for ``chart`` from a decoded JSON object."""
    value = raw.get("value", 0)
    if chart is ChartField.CALL_DURATION:
        return DurationPoint(day=str(raw.get("day", "")), value=value)
    return OutcomeSlice(name=str(raw.get("name", "")), value=value)


def series_from_list(chart: ChartField, raw: Any) -> List[Point]:
    """Decode a stored JSON array; anything that is not a list of objects is empty."""
    if not isinstance(raw, list):
        return []
    return [point_from_dict(chart, item) for item in raw if isinstance(item, dict)]


def series_to_list(series: List[Point]) -> List[Dict[str, Any]]:
    return [point.to_dict() for point in series]


DEFAULT_CALL_DURATION: List[DurationPoint] = [
    DurationPoint("1 Jan 2024", 242),
    DurationPoint("1 Feb 2024", 255),
    DurationPoint("1 Mar 2024", 236),
    DurationPoint("1 Apr 2024", 274),
    DurationPoint("1 May 2024", 288),
    DurationPoint("1 Jun 2024", 261),
    DurationPoint("1 Jul 2024", 307),
    DurationPoint("1 Aug 2024", 292),
    DurationPoint("1 Sep 2024", 278),
    DurationPoint("1 Oct 2024", 303),
    DurationPoint("1 Nov 2024", 286),
    DurationPoint("1 Dec 2024", 318),
]

DEFAULT_SAD_PATH: List[OutcomeSlice] = [
    OutcomeSlice("Caller Identification", 34),
    OutcomeSlice("Unsupported Language", 22),
    OutcomeSlice("User Refused Identity", 16),
    OutcomeSlice("Incorrect Identity Provided", 14),
    OutcomeSlice("Customer Hostility", 14),
]


def default_series(chart: ChartField) -> List[Point]:
    """Fresh copies of the seed data for ``chart``."""
    source = DEFAULT_CALL_DURATION if chart is ChartField.CALL_DURATION else DEFAULT_SAD_PATH
    return [type(point)(point.key, point.value) for point in source]
