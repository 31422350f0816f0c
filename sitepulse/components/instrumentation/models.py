"""
Instrumentation component models.

Events, tracked regions, per-page scroll state and the enums used by the
action primitives.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

# --- Attribute values ---

AttributeValue = str | int | float
Attributes = Mapping[str, AttributeValue]


# --- Enums ---


class EventName(str, Enum):
    """Event names emitted to the sink."""

    PAGE_VIEW = "page_view"
    COMPONENT_LOAD = "component_load"
    COMPONENT_UNLOAD = "component_unload"
    SCROLL = "scroll"
    SECTION_VIEW = "section_view"
    WHATSAPP_CLICK = "whatsapp_click"
    ROOM_VIEW = "room_view"
    DATE_SELECTION = "date_selection"
    SECTION_INTERACTION = "section_interaction"
    IMAGE_CLICK = "image_click"
    VIDEO_PLAY = "video_play"


class ViewType(str, Enum):
    """How a room was looked at."""

    GALLERY = "gallery"
    DETAILS = "details"


class InteractionAction(str, Enum):
    """Kinds of section interaction."""

    CLICK = "click"
    SCROLL = "scroll"
    HOVER = "hover"


class ReportState(str, Enum):
    """One-shot reporting state of a tracked entity."""

    UNSEEN = "unseen"
    REPORTED = "reported"


# --- Event ---


@dataclass(frozen=True)
class Event:
    """An emitted behavioral event. Immutable, no identity."""

    name: str
    attributes: Mapping[str, AttributeValue]
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


# --- Page geometry ---


@dataclass(frozen=True)
class TrackedRegion:
    """A marked area of the page that reports its first visibility."""

    section_id: str
    section_name: str | None = None

    @property
    def display_name(self) -> str:
        return self.section_name or self.section_id


@dataclass(frozen=True)
class RegionBounds:
    """Vertical extent of a region relative to the top of the viewport."""

    top: float
    bottom: float


# --- Scroll state ---


@dataclass
class ScrollState:
    """
    Per-page scroll state.

    max_scroll_seen only grows; threshold_fired is a latch that never resets
    for the lifetime of the page instance.
    """

    max_scroll_seen: float = 0.0
    threshold_fired: bool = False


# --- Configuration ---


@dataclass(frozen=True)
class InstrumentationConfig:
    """Instrumentation configuration."""

    scroll_threshold_percent: float = 75.0
    section_debounce_ms: int = 100
    visibility_line_ratio: float = 0.5


DEFAULT_CONFIG = InstrumentationConfig()
