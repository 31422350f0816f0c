"""
Dashboard component - derived views from an analytics snapshot.

Pure, synchronous transformation of one snapshot into funnel steps,
device shares, top-N lists, the room leaderboard and KPI cards.

Invariants:
- the input snapshot is never mutated
- same snapshot in, same views out
- every division is guarded; no NaN or Infinity reaches the output
- missing optional fields degrade to zero, never raise
- funnel drop-off is not clamped; negative values are preserved
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from .models import (
    DEFAULT_CONFIG,
    AnalyticsSnapshot,
    DashboardConfig,
    DashboardValidationError,
    DerivedViews,
    DeriveViewsInput,
    DeriveViewsOutput,
    DeviceRecord,
    DeviceShare,
    FunnelStep,
    FunnelStepDefinition,
    GeoRecord,
    KpiCard,
    LocationEntry,
    OverviewView,
    RoomEntry,
    RoomRecord,
    RoomSortKey,
    SessionStat,
    SnapshotError,
    SourceEntry,
    TrafficSourceRecord,
    TrendBadge,
    TrendDirection,
)
from .ports import DashboardRulesPort

logger = logging.getLogger(__name__)


FUNNEL_COLORS: tuple[str, ...] = (
    "#2D5A4A",
    "#A85C32",
    "#C4A96A",
    "#3b82f6",
    "#8b5cf6",
    "#ec4899",
)

UNSET_CITY = "(not set)"


# --- Pure Functions (Functional Core) ---


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, int | float)
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def format_number(value: int | float | None) -> str:
    """
    Render a count for display.

    0/None/NaN -> "0", millions -> "1.2M", thousands -> "1.5K",
    otherwise a comma-grouped number.
    """
    if not value or not _is_number(value):
        return "0"
    if value >= 1_000_000:
        return f"{value / 1_000_000:.1f}M"
    if value >= 1_000:
        return f"{value / 1_000:.1f}K"
    if isinstance(value, float) and not value.is_integer():
        return f"{value:,.3f}".rstrip("0").rstrip(".")
    return f"{int(value):,}"


def classify_trend(value: float | None) -> TrendDirection:
    """Sign of a period-over-period delta; absent or NaN is neutral."""
    if value is None or not _is_number(value):
        return TrendDirection.NEUTRAL
    if value > 0:
        return TrendDirection.UP
    if value < 0:
        return TrendDirection.DOWN
    return TrendDirection.NEUTRAL


def format_trend(value: float | None) -> TrendBadge:
    """Direction plus absolute magnitude to one decimal place."""
    magnitude = abs(value) if value is not None and _is_number(value) else 0.0
    return TrendBadge(direction=classify_trend(value), magnitude=f"{magnitude:.1f}")


def derive_funnel(steps: Sequence[FunnelStepDefinition]) -> tuple[FunnelStep, ...]:
    """
    Derive percentages and drop-offs for ordered funnel steps.

    percentage is relative to the first step (0 everywhere when the first
    step is 0). dropoff is the share lost to the next step; it is 0 when
    the step itself is 0 and None for the last step. Non-monotonic input
    yields negative drop-off, which is kept as-is.
    """
    if not steps:
        return ()

    max_value = steps[0].value
    derived: list[FunnelStep] = []

    for index, step in enumerate(steps):
        percentage = step.value / max_value * 100 if max_value > 0 else 0.0

        dropoff: float | None = None
        if index + 1 < len(steps):
            next_value = steps[index + 1].value
            dropoff = (step.value - next_value) / step.value * 100 if step.value > 0 else 0.0

        derived.append(
            FunnelStep(
                name=step.name,
                value=step.value,
                percentage=percentage,
                dropoff=dropoff,
                color=step.color,
            )
        )

    return tuple(derived)


def funnel_definitions(snapshot: AnalyticsSnapshot) -> tuple[FunnelStepDefinition, ...]:
    """Conversion funnel from visits through to WhatsApp contact."""
    conversions = snapshot.conversions
    counts = (
        ("Visits", snapshot.overview.total_visits),
        ("Room Views", conversions.room_views),
        ("Date Selections", conversions.date_selections),
        ("Price Checks", conversions.price_checks),
        ("WhatsApp Clicks", conversions.whatsapp_clicks),
    )
    return tuple(
        FunnelStepDefinition(name=name, value=value, color=FUNNEL_COLORS[i % len(FUNNEL_COLORS)])
        for i, (name, value) in enumerate(counts)
    )


def device_breakdown(
    devices: Sequence[DeviceRecord],
    high_bounce_threshold: float = DEFAULT_CONFIG.high_bounce_threshold,
) -> tuple[DeviceShare, ...]:
    """Session share per device, one decimal, input order preserved."""
    total_sessions = sum(d.sessions for d in devices)

    return tuple(
        DeviceShare(
            device=d.device,
            sessions=d.sessions,
            users=d.users,
            bounce_rate=d.bounce_rate,
            percentage=(
                round(d.sessions / total_sessions * 100, 1) if total_sessions > 0 else 0.0
            ),
            high_bounce=d.bounce_rate > high_bounce_threshold,
        )
        for d in devices
    )


def top_locations(
    geographic: Sequence[GeoRecord],
    limit: int = DEFAULT_CONFIG.geographic_limit,
) -> tuple[LocationEntry, ...]:
    """First `limit` locations in snapshot order."""
    return tuple(
        LocationEntry(
            rank=rank,
            country=g.country,
            city=None if not g.city or g.city == UNSET_CITY else g.city,
            users=g.users,
            sessions=g.sessions,
        )
        for rank, g in enumerate(geographic[: max(limit, 0)], start=1)
    )


def top_sources(
    sources: Sequence[TrafficSourceRecord],
    limit: int = DEFAULT_CONFIG.traffic_source_limit,
) -> tuple[SourceEntry, ...]:
    """First `limit` traffic sources in snapshot order."""
    return tuple(
        SourceEntry(
            rank=rank,
            source=s.source,
            medium=s.medium,
            sessions=s.sessions,
            users=s.users,
        )
        for rank, s in enumerate(sources[: max(limit, 0)], start=1)
    )


def avg_time_minutes(avg_duration_seconds: float | None) -> int:
    """Average duration in whole minutes; 0 when missing or not a number."""
    if avg_duration_seconds is None or not _is_number(avg_duration_seconds):
        return 0
    return _round_half_up(avg_duration_seconds / 60)


def room_leaderboard(
    rooms: Sequence[RoomRecord],
    sort_by: str | None = RoomSortKey.VIEWS.value,
) -> tuple[RoomEntry, ...]:
    """
    Room rows with average time in minutes.

    "views" sorts by views descending (stable); any other key keeps the
    snapshot order.
    """
    entries = [
        RoomEntry(
            name=room.label,
            views=room.views,
            avg_time_minutes=avg_time_minutes(room.avg_duration),
            bounce_rate=room.bounce_rate,
        )
        for room in rooms
    ]

    if sort_by == RoomSortKey.VIEWS.value:
        entries = sorted(entries, key=lambda e: e.views, reverse=True)

    return tuple(entries)


def _plain(value: float) -> str:
    if not _is_number(value):
        return "0"
    return str(int(value)) if float(value).is_integer() else repr(float(value))


def overview_view(snapshot: AnalyticsSnapshot) -> OverviewView:
    """KPI cards and session stats."""
    overview = snapshot.overview
    conversions = snapshot.conversions

    kpis = (
        KpiCard(
            key="total_visits",
            title="Total Visits",
            value=format_number(overview.total_visits),
            trend=format_trend(overview.trends.get("totalVisits")),
        ),
        KpiCard(
            key="room_views",
            title="Room Views",
            value=format_number(conversions.room_views),
        ),
        KpiCard(
            key="whatsapp_clicks",
            title="WhatsApp Clicks",
            value=format_number(conversions.whatsapp_clicks),
            subtitle="From all sources",
        ),
        KpiCard(
            key="conversion_rate",
            title="Conversion Rate",
            value=f"{_plain(overview.conversion_rate)}%",
            subtitle="To WhatsApp",
        ),
    )

    session_stats = (
        SessionStat(
            key="avg_session",
            title="Avg Session",
            value=f"{_round_half_up(overview.avg_session_duration)}s",
        ),
        SessionStat(
            key="bounce_rate",
            title="Bounce Rate",
            value=f"{_round_half_up(overview.bounce_rate)}%",
        ),
        SessionStat(
            key="engagement_rate",
            title="Engagement",
            value=f"{_round_half_up(overview.engagement_rate)}%",
        ),
        SessionStat(
            key="new_users",
            title="New Users",
            value=format_number(overview.new_users),
        ),
    )

    return OverviewView(kpis=kpis, session_stats=session_stats)


def is_empty_snapshot(snapshot: AnalyticsSnapshot) -> bool:
    """True when the snapshot carries no counts and no rows at all."""
    overview = snapshot.overview
    conversions = snapshot.conversions
    return not any(
        (
            overview.total_visits,
            overview.new_users,
            conversions.room_views,
            conversions.date_selections,
            conversions.price_checks,
            conversions.whatsapp_clicks,
            snapshot.devices,
            snapshot.geographic,
            snapshot.traffic_sources,
            snapshot.rooms,
        )
    )


# --- Snapshot validation ---


def validate_snapshot(data: Mapping[str, Any] | None) -> list[DashboardValidationError]:
    """
    Shallow validity check of a raw snapshot.

    Only a missing snapshot or overview, or values of the wrong type, are
    errors. Missing optional fields are not.
    """
    errors: list[DashboardValidationError] = []

    if data is None:
        errors.append(
            DashboardValidationError(
                code="SNAPSHOT_MISSING",
                message="No analytics snapshot supplied",
            )
        )
        return errors

    if not isinstance(data, Mapping):
        errors.append(
            DashboardValidationError(
                code="SNAPSHOT_INVALID",
                message=f"Snapshot must be a mapping, got {type(data).__name__}",
            )
        )
        return errors

    if not isinstance(data.get("overview"), Mapping):
        errors.append(
            DashboardValidationError(
                code="OVERVIEW_MISSING",
                message="Snapshot has no overview object",
                field_name="overview",
            )
        )
        return errors

    try:
        AnalyticsSnapshot.model_validate(data)
    except ValidationError as e:
        for detail in e.errors():
            errors.append(
                DashboardValidationError(
                    code="SNAPSHOT_INVALID",
                    message=detail["msg"],
                    field_name=".".join(str(part) for part in detail["loc"]),
                )
            )

    return errors


def parse_snapshot(data: Mapping[str, Any] | AnalyticsSnapshot | None) -> AnalyticsSnapshot:
    """Parse a raw snapshot, raising SnapshotError when it is unusable."""
    if isinstance(data, AnalyticsSnapshot):
        return data

    errors = validate_snapshot(data)
    if errors or data is None:
        summary = "; ".join(
            f"{err.field_name}: {err.message}" if err.field_name else err.message
            for err in errors
        )
        raise SnapshotError(f"Invalid analytics snapshot: {summary}")

    return AnalyticsSnapshot.model_validate(data)


def _resolve_config(
    config: DashboardConfig | None,
    rules: DashboardRulesPort | None,
) -> DashboardConfig:
    if rules is not None:
        return DashboardConfig(
            geographic_limit=rules.get_geographic_limit(),
            traffic_source_limit=rules.get_traffic_source_limit(),
            high_bounce_threshold=rules.get_high_bounce_threshold(),
            room_sort=rules.get_room_sort(),
        )
    return config or DEFAULT_CONFIG


def derive_views(
    snapshot: AnalyticsSnapshot,
    config: DashboardConfig = DEFAULT_CONFIG,
    room_sort: str | None = None,
) -> DerivedViews:
    """Derive every dashboard view from a parsed snapshot."""
    views = DerivedViews(
        overview=overview_view(snapshot),
        funnel=derive_funnel(funnel_definitions(snapshot)),
        devices=device_breakdown(snapshot.devices, config.high_bounce_threshold),
        locations=top_locations(snapshot.geographic, config.geographic_limit),
        traffic_sources=top_sources(snapshot.traffic_sources, config.traffic_source_limit),
        rooms=room_leaderboard(snapshot.rooms, room_sort or config.room_sort),
    )
    logger.debug(
        "Derived dashboard views: %d devices, %d locations, %d sources, %d rooms",
        len(views.devices),
        len(views.locations),
        len(views.traffic_sources),
        len(views.rooms),
    )
    return views


# --- Component Entry Points ---


def run_derive(
    inp: DeriveViewsInput,
    *,
    rules: DashboardRulesPort | None = None,
    config: DashboardConfig | None = None,
) -> DeriveViewsOutput:
    """
    Derive dashboard views from a snapshot.

    Malformed input is reported through errors; the call itself does not raise.
    """
    if isinstance(inp.snapshot, AnalyticsSnapshot):
        snapshot = inp.snapshot
    else:
        errors = validate_snapshot(inp.snapshot)
        if errors or inp.snapshot is None:
            return DeriveViewsOutput(views=None, errors=errors, success=False)
        snapshot = AnalyticsSnapshot.model_validate(inp.snapshot)

    views = derive_views(snapshot, _resolve_config(config, rules), inp.room_sort)
    return DeriveViewsOutput(views=views, errors=[], success=True)


def run(
    inp: DeriveViewsInput,
    *,
    rules: DashboardRulesPort | None = None,
    config: DashboardConfig | None = None,
) -> DeriveViewsOutput:
    """Main entry point for the dashboard component."""
    if isinstance(inp, DeriveViewsInput):
        return run_derive(inp, rules=rules, config=config)
    raise ValueError(f"Unknown input type: {type(inp)}")
