"""Per-user chart data API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import ValidationError

from callboard.charts.errors import IdentityValidationError
from callboard.charts.identity import validate_email
from callboard.charts.remote import SqliteRemoteStore
from callboard.charts.store import ChartStore
from callboard.models.entities import ChartField, series_from_list, series_to_list
from callboard.output.formatter import outcome_footer
from callboard.server.dependencies import get_remote_store
from callboard.server.models.analytics import (
    AnalyticsRowResponse,
    ChartExistsResponse,
    ChartSaveRequest,
    ChartSaveResponse,
    DashboardResponse,
    DurationPointModel,
    OutcomeSliceModel,
)

router = APIRouter(prefix="/api", tags=["analytics"])


def _require_email(email: str) -> str:
    try:
        return validate_email(email)
    except IdentityValidationError as exc:
        raise HTTPException(status_code=400, detail=exc.message) from exc


@router.get("/analytics/{email}", response_model=AnalyticsRowResponse)
async def get_user_analytics(
    email: str,
    remote: SqliteRemoteStore = Depends(get_remote_store),
):
    record = await remote.fetch(_require_email(email))
    if record is None:
        raise HTTPException(status_code=404, detail="No saved chart data for this email")
    return AnalyticsRowResponse(
        user_email=record.identity,
        call_duration_data=series_to_list(record.call_duration),
        sad_path_data=series_to_list(record.sad_path),
        updated_at=record.updated_at,
    )


@router.get("/analytics/{email}/exists", response_model=ChartExistsResponse)
async def get_chart_exists(
    email: str,
    chart: ChartField = Query(...),
    remote: SqliteRemoteStore = Depends(get_remote_store),
):
    normalized = _require_email(email)
    exists = await remote.exists(normalized, chart)
    return ChartExistsResponse(email=normalized, chart=chart.value, exists=exists)


@router.put("/analytics/{email}/{chart}", response_model=ChartSaveResponse)
async def save_chart(
    email: str,
    chart: ChartField,
    request: ChartSaveRequest,
    remote: SqliteRemoteStore = Depends(get_remote_store),
):
    normalized = _require_email(email)
    model = DurationPointModel if chart is ChartField.CALL_DURATION else OutcomeSliceModel
    try:
        points = [model(**item).model_dump() for item in request.data]
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    saved_email = await remote.upsert(normalized, chart, series_from_list(chart, points))
    return ChartSaveResponse(email=saved_email)


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    email: Optional[str] = Query(None),
    remote: SqliteRemoteStore = Depends(get_remote_store),
):
    """Both charts for ``email``, or the seed data when unknown or never saved."""
    store = ChartStore()
    if email:
        store.set_identity(_require_email(email))
        await store.load_user_data(remote)

    return DashboardResponse(
        email=store.identity,
        call_duration=series_to_list(store.call_duration),
        sad_path=series_to_list(store.call_outcomes),
        footer=outcome_footer(store.call_outcomes),
    )
