"""Pydantic models for the per-user chart data API."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from callboard.charts.sanitizer import sanitize_value


class DurationPointModel(BaseModel):
    day: str
    value: float = 0

    @field_validator("value", mode="before")
    @classmethod
    def clamp_value(cls, v):
        return sanitize_value(v)


class OutcomeSliceModel(BaseModel):
    name: str
    value: float = 0

    @field_validator("value", mode="before")
    @classmethod
    def clamp_value(cls, v):
        return sanitize_value(v)


class AnalyticsRowResponse(BaseModel):
    """Stored chart data for one email."""
    user_email: str
    call_duration_data: List[DurationPointModel] = Field(default_factory=list)
    sad_path_data: List[OutcomeSliceModel] = Field(default_factory=list)
    updated_at: Optional[str] = None


class ChartExistsResponse(BaseModel):
    email: str
    chart: str
    exists: bool


class ChartSaveRequest(BaseModel):
    """Replacement series for one chart; the whole column is overwritten."""
    data: List[Dict[str, Any]] = Field(default_factory=list)


class ChartSaveResponse(BaseModel):
    email: str


class DashboardResponse(BaseModel):
    """Both charts as displayed, falling back to seed data."""
    email: Optional[str] = None
    call_duration: List[DurationPointModel] = Field(default_factory=list)
    sad_path: List[OutcomeSliceModel] = Field(default_factory=list)
    footer: str = ""
