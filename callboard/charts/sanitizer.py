"""Numeric clean-up for editable chart points."""

import dataclasses
import math
from typing import Any, List, Sequence

from callboard.models.entities import Point


def sanitize_value(value: Any) -> float:
    """Return ``value`` as a finite, non-negative number; anything else becomes 0."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number if number > 0 else 0.0


def parse_value(raw: str) -> float:
    """Parse editor input. Blank or unparsable text is 0."""
    if raw is None or not str(raw).strip():
        return 0.0
    return sanitize_value(str(raw).strip())


def sanitize(series: Sequence[Point]) -> List[Point]:
    """Copy ``series`` with every value sanitized. The input is left untouched."""
    return [
        dataclasses.replace(point, value=sanitize_value(point.value))
        for point in series
    ]


def copy_series(series: Sequence[Point]) -> List[Point]:
    return [dataclasses.replace(point) for point in series]
