"""
Dashboard API.

Serves the derived dashboard views for a date range. Each request refreshes
the snapshot from the configured source and re-derives every view.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, ConfigDict

from sitepulse.api.deps import get_dashboard_loader, get_rules
from sitepulse.components.dashboard import (
    DashboardLoader,
    DateRange,
    LoadStatus,
    TrendDirection,
)
from sitepulse.rules.models import Rules

router = APIRouter()


# --- Response Models ---


class ViewModel(BaseModel):
    """Response models are read straight off the component dataclasses."""

    model_config = ConfigDict(from_attributes=True)


class TrendItem(ViewModel):
    direction: TrendDirection
    magnitude: str
    label: str


class KpiItem(ViewModel):
    key: str
    title: str
    value: str
    trend: TrendItem | None = None
    subtitle: str | None = None


class SessionStatItem(ViewModel):
    key: str
    title: str
    value: str


class OverviewResponse(ViewModel):
    kpis: list[KpiItem]
    session_stats: list[SessionStatItem]


class FunnelStepItem(ViewModel):
    name: str
    value: int
    percentage: float
    dropoff: float | None
    color: str | None = None


class DeviceItem(ViewModel):
    device: str
    sessions: int
    users: int
    bounce_rate: float
    percentage: float
    high_bounce: bool


class LocationItem(ViewModel):
    rank: int
    country: str
    city: str | None
    users: int
    sessions: int


class SourceItem(ViewModel):
    rank: int
    source: str
    medium: str
    sessions: int
    users: int


class RoomItem(ViewModel):
    name: str
    views: int
    avg_time_minutes: int
    bounce_rate: float


class ViewsResponse(ViewModel):
    overview: OverviewResponse
    funnel: list[FunnelStepItem]
    devices: list[DeviceItem]
    locations: list[LocationItem]
    traffic_sources: list[SourceItem]
    rooms: list[RoomItem]


class DashboardResponse(BaseModel):
    """Dashboard response. views is None when the snapshot was empty."""

    status: str
    date_range: str
    views: ViewsResponse | None = None


class LoaderStatusResponse(BaseModel):
    status: str
    date_range: str | None = None
    error: str | None = None


# --- Helper Functions ---


def parse_date_range(value: str) -> DateRange:
    """Parse date range string to enum."""
    try:
        return DateRange(value)
    except ValueError:
        allowed = ", ".join(d.value for d in DateRange)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid date range: {value}. Must be one of: {allowed}",
        ) from None


# --- Routes ---


@router.get("", response_model=DashboardResponse)
def get_dashboard(
    date_range: str | None = Query(None, description="last7Days, last30Days or last90Days"),
    refresh: bool = Query(False, description="Bypass the snapshot cache"),
    room_sort: str | None = Query(None, description="Room leaderboard sort key"),
    loader: DashboardLoader = Depends(get_dashboard_loader),
    rules: Rules = Depends(get_rules),
) -> DashboardResponse:
    """
    Fetch the snapshot for a date range and return the derived views.

    502 when the snapshot source failed, 422 when the snapshot is malformed.
    """
    dr = parse_date_range(date_range or rules.dashboard.default_date_range)

    result = loader.refresh(dr, use_cache=not refresh)

    if result.status == LoadStatus.FAILED:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Analytics snapshot unavailable: {result.error}",
        )
    if result.status == LoadStatus.INVALID:
        raise HTTPException(
            status_code=422,
            detail=result.error,
        )

    views = loader.views_for(result, room_sort)

    return DashboardResponse(
        status=result.status.value,
        date_range=dr.value,
        views=ViewsResponse.model_validate(views) if views is not None else None,
    )


@router.get("/status", response_model=LoaderStatusResponse)
def get_status(
    loader: DashboardLoader = Depends(get_dashboard_loader),
) -> LoaderStatusResponse:
    """Outcome of the last fetch, without fetching."""
    state = loader.state
    return LoaderStatusResponse(
        status=state.status.value,
        date_range=state.date_range.value if state.date_range else None,
        error=state.error,
    )
