"""
Instrumentation component - Page lifecycle, scroll depth, section visibility
and action tracking.
"""

from .component import (
    ActionTracker,
    Debouncer,
    PageSession,
    ScrollDepthTracker,
    SectionVisibilityTracker,
    is_region_visible,
    round_half_up,
    safe_emit,
    scroll_percent,
    tracked_page,
)
from .models import (
    DEFAULT_CONFIG,
    Attributes,
    AttributeValue,
    Event,
    EventName,
    InstrumentationConfig,
    InteractionAction,
    RegionBounds,
    ReportState,
    ScrollState,
    TrackedRegion,
    ViewType,
)
from .ports import (
    ClockPort,
    EventSinkPort,
    InstrumentationRulesPort,
    SchedulerPort,
    TimerHandlePort,
    ViewportPort,
)

__all__ = [
    # Trackers
    "ActionTracker",
    "Debouncer",
    "PageSession",
    "ScrollDepthTracker",
    "SectionVisibilityTracker",
    # Pure functions
    "is_region_visible",
    "round_half_up",
    "safe_emit",
    "scroll_percent",
    "tracked_page",
    # Models
    "DEFAULT_CONFIG",
    "Attributes",
    "AttributeValue",
    "Event",
    "EventName",
    "InstrumentationConfig",
    "InteractionAction",
    "RegionBounds",
    "ReportState",
    "ScrollState",
    "TrackedRegion",
    "ViewType",
    # Ports
    "ClockPort",
    "EventSinkPort",
    "InstrumentationRulesPort",
    "SchedulerPort",
    "TimerHandlePort",
    "ViewportPort",
]
