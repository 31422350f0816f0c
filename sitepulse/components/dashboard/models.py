"""
Dashboard component models.

The analytics snapshot is external input and is parsed with pydantic so
absent or null numeric fields fall back to zero. Derived views are frozen
dataclasses: plain data handed to presentation.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# --- Enums ---


class DateRange(str, Enum):
    """Date-range selector understood by the snapshot source."""

    LAST_7_DAYS = "last7Days"
    LAST_30_DAYS = "last30Days"
    LAST_90_DAYS = "last90Days"


class RoomSortKey(str, Enum):
    """Implemented room leaderboard sort modes."""

    VIEWS = "views"


class TrendDirection(str, Enum):
    """Sign classification of a period-over-period delta."""

    UP = "up"
    DOWN = "down"
    NEUTRAL = "neutral"


class LoadStatus(str, Enum):
    """Outcome of the most recent snapshot fetch."""

    NO_DATA = "no_data"
    FAILED = "failed"
    INVALID = "invalid"
    EMPTY = "empty"
    READY = "ready"


# --- Errors ---


@dataclass(frozen=True)
class DashboardValidationError:
    """Dashboard validation error."""

    code: str
    message: str
    field_name: str | None = None


class SnapshotError(ValueError):
    """Snapshot is absent or too malformed to derive views from."""


class SnapshotFetchError(Exception):
    """The snapshot source could not deliver a snapshot."""


# --- Snapshot (external input) ---


def _number_or_none(value: Any) -> Any:
    """Numeric strings are converted; anything else non-numeric becomes None."""
    if isinstance(value, bool) or not isinstance(value, int | float):
        try:
            return float(value)
        except (TypeError, ValueError):
            return None
    return value


class SnapshotModel(BaseModel):
    """Base for snapshot records: camelCase aliases, nulls treated as absent."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, Mapping):
            return {key: value for key, value in data.items() if value is not None}
        return data


class Overview(SnapshotModel):
    total_visits: int = Field(0, alias="totalVisits")
    new_users: int = Field(0, alias="newUsers")
    avg_session_duration: float = Field(0.0, alias="avgSessionDuration")
    bounce_rate: float = Field(0.0, alias="bounceRate")
    engagement_rate: float = Field(0.0, alias="engagementRate")
    conversion_rate: float = Field(0.0, alias="conversionRate")
    trends: dict[str, float | None] = Field(default_factory=dict)

    @field_validator("trends", mode="before")
    @classmethod
    def _non_numeric_trends(cls, value: Any) -> Any:
        if not isinstance(value, Mapping):
            return {}
        return {key: _number_or_none(delta) for key, delta in value.items()}


class Conversions(SnapshotModel):
    room_views: int = Field(0, alias="roomViews")
    date_selections: int = Field(0, alias="dateSelections")
    price_checks: int = Field(0, alias="priceChecks")
    whatsapp_clicks: int = Field(0, alias="whatsappClicks")


class DeviceRecord(SnapshotModel):
    device: str = "unknown"
    sessions: int = 0
    users: int = 0
    bounce_rate: float = Field(0.0, alias="bounceRate")


class GeoRecord(SnapshotModel):
    country: str = ""
    city: str | None = None
    users: int = 0
    sessions: int = 0


class TrafficSourceRecord(SnapshotModel):
    source: str = ""
    medium: str = ""
    sessions: int = 0
    users: int = 0


class RoomRecord(SnapshotModel):
    room_slug: str | None = Field(None, alias="roomSlug")
    path: str | None = None
    views: int = 0
    avg_duration: float | None = Field(None, alias="avgDuration")
    bounce_rate: float = Field(0.0, alias="bounceRate")

    @field_validator("avg_duration", mode="before")
    @classmethod
    def _non_numeric_duration(cls, value: Any) -> Any:
        return _number_or_none(value)

    @property
    def label(self) -> str:
        return self.room_slug or self.path or ""


class AnalyticsSnapshot(SnapshotModel):
    """One materialized bundle of aggregate counts for a date range."""

    overview: Overview
    conversions: Conversions = Field(default_factory=Conversions)
    devices: list[DeviceRecord] = Field(default_factory=list)
    geographic: list[GeoRecord] = Field(default_factory=list)
    traffic_sources: list[TrafficSourceRecord] = Field(
        default_factory=list, alias="trafficSources"
    )
    rooms: list[RoomRecord] = Field(default_factory=list)


# --- Derived views ---


@dataclass(frozen=True)
class FunnelStepDefinition:
    """A funnel step before derivation. Color is presentational only."""

    name: str
    value: int
    color: str | None = None


@dataclass(frozen=True)
class FunnelStep:
    """A derived funnel step. dropoff is None for the last step."""

    name: str
    value: int
    percentage: float
    dropoff: float | None
    color: str | None = None


@dataclass(frozen=True)
class DeviceShare:
    device: str
    sessions: int
    users: int
    bounce_rate: float
    percentage: float
    high_bounce: bool = False


@dataclass(frozen=True)
class LocationEntry:
    rank: int
    country: str
    city: str | None
    users: int
    sessions: int


@dataclass(frozen=True)
class SourceEntry:
    rank: int
    source: str
    medium: str
    sessions: int
    users: int


@dataclass(frozen=True)
class RoomEntry:
    name: str
    views: int
    avg_time_minutes: int
    bounce_rate: float


@dataclass(frozen=True)
class TrendBadge:
    """Direction plus absolute magnitude formatted to one decimal."""

    direction: TrendDirection
    magnitude: str

    @property
    def label(self) -> str:
        return f"{self.magnitude}%"


@dataclass(frozen=True)
class KpiCard:
    key: str
    title: str
    value: str
    trend: TrendBadge | None = None
    subtitle: str | None = None


@dataclass(frozen=True)
class SessionStat:
    key: str
    title: str
    value: str


@dataclass(frozen=True)
class OverviewView:
    kpis: tuple[KpiCard, ...]
    session_stats: tuple[SessionStat, ...]


@dataclass(frozen=True)
class DerivedViews:
    """Everything the dashboard renders, derived from one snapshot."""

    overview: OverviewView
    funnel: tuple[FunnelStep, ...]
    devices: tuple[DeviceShare, ...]
    locations: tuple[LocationEntry, ...]
    traffic_sources: tuple[SourceEntry, ...]
    rooms: tuple[RoomEntry, ...]


# --- Configuration ---


@dataclass(frozen=True)
class DashboardConfig:
    """Dashboard configuration."""

    geographic_limit: int = 10
    traffic_source_limit: int = 8
    high_bounce_threshold: float = 70.0
    room_sort: str = RoomSortKey.VIEWS.value


DEFAULT_CONFIG = DashboardConfig()


# --- Input / Output ---


@dataclass(frozen=True)
class DeriveViewsInput:
    """Input for deriving dashboard views from a raw or parsed snapshot."""

    snapshot: Mapping[str, Any] | AnalyticsSnapshot | None
    room_sort: str | None = None


@dataclass(frozen=True)
class DeriveViewsOutput:
    views: DerivedViews | None
    errors: list[DashboardValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class LoadResult:
    """State of the dashboard after a refresh."""

    status: LoadStatus
    date_range: DateRange | None = None
    snapshot: AnalyticsSnapshot | None = None
    error: str | None = None
