"""
Dashboard component - Funnel, breakdown, leaderboard and KPI views derived
from an analytics snapshot.
"""

from ._loader import DashboardLoader
from .component import (
    avg_time_minutes,
    classify_trend,
    derive_funnel,
    derive_views,
    device_breakdown,
    format_number,
    format_trend,
    funnel_definitions,
    is_empty_snapshot,
    overview_view,
    parse_snapshot,
    room_leaderboard,
    run,
    run_derive,
    top_locations,
    top_sources,
    validate_snapshot,
)
from .models import (
    DEFAULT_CONFIG,
    AnalyticsSnapshot,
    Conversions,
    DashboardConfig,
    DashboardValidationError,
    DateRange,
    DerivedViews,
    DeriveViewsInput,
    DeriveViewsOutput,
    DeviceRecord,
    DeviceShare,
    FunnelStep,
    FunnelStepDefinition,
    GeoRecord,
    KpiCard,
    LoadResult,
    LoadStatus,
    LocationEntry,
    Overview,
    OverviewView,
    RoomEntry,
    RoomRecord,
    RoomSortKey,
    SessionStat,
    SnapshotError,
    SnapshotFetchError,
    SourceEntry,
    TrafficSourceRecord,
    TrendBadge,
    TrendDirection,
)
from .ports import DashboardRulesPort, SnapshotSourcePort

__all__ = [
    # Entry points
    "run",
    "run_derive",
    "DashboardLoader",
    # Pure functions
    "avg_time_minutes",
    "classify_trend",
    "derive_funnel",
    "derive_views",
    "device_breakdown",
    "format_number",
    "format_trend",
    "funnel_definitions",
    "is_empty_snapshot",
    "overview_view",
    "parse_snapshot",
    "room_leaderboard",
    "top_locations",
    "top_sources",
    "validate_snapshot",
    # Snapshot models
    "AnalyticsSnapshot",
    "Conversions",
    "DeviceRecord",
    "GeoRecord",
    "Overview",
    "RoomRecord",
    "TrafficSourceRecord",
    # View models
    "DerivedViews",
    "DeviceShare",
    "FunnelStep",
    "FunnelStepDefinition",
    "KpiCard",
    "LocationEntry",
    "OverviewView",
    "RoomEntry",
    "SessionStat",
    "SourceEntry",
    "TrendBadge",
    # Config, enums, errors
    "DEFAULT_CONFIG",
    "DashboardConfig",
    "DashboardValidationError",
    "DateRange",
    "DeriveViewsInput",
    "DeriveViewsOutput",
    "LoadResult",
    "LoadStatus",
    "RoomSortKey",
    "SnapshotError",
    "SnapshotFetchError",
    "TrendDirection",
    # Ports
    "DashboardRulesPort",
    "SnapshotSourcePort",
]
