"""
Instrumentation component port definitions.

Everything the layer needs from its host (sink, clock, timers, page
geometry) is injected through these protocols.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Protocol

from .models import Attributes, RegionBounds, TrackedRegion


class EventSinkPort(Protocol):
    """Telemetry sink. Fire-and-forget, no return value."""

    def emit(self, name: str, attributes: Attributes) -> None:
        """Forward one event."""
        ...


class ClockPort(Protocol):
    """Monotonic time source."""

    def monotonic_ms(self) -> float:
        """Milliseconds from an arbitrary fixed origin."""
        ...


class TimerHandlePort(Protocol):
    """Handle for a scheduled action."""

    def cancel(self) -> None:
        """Cancel the action if it has not run yet."""
        ...


class SchedulerPort(Protocol):
    """Schedules deferred actions on the host event loop."""

    def call_later(self, delay_seconds: float, action: Callable[[], None]) -> TimerHandlePort:
        """Run action once after delay_seconds unless cancelled."""
        ...


class ViewportPort(Protocol):
    """Geometry provider standing in for the browser window and document."""

    def scroll_y(self) -> float:
        """Current vertical scroll offset."""
        ...

    def viewport_height(self) -> float:
        """Height of the visible area."""
        ...

    def document_height(self) -> float:
        """Total scrollable height of the document."""
        ...

    def discover_regions(self) -> Sequence[TrackedRegion]:
        """Regions marked for tracking on the current page."""
        ...

    def region_bounds(self, section_id: str) -> RegionBounds | None:
        """Bounds of a region relative to the viewport, None if it is gone."""
        ...


class InstrumentationRulesPort(Protocol):
    """Port for instrumentation rules configuration."""

    def get_scroll_threshold_percent(self) -> float:
        """Scroll depth that triggers the scroll event (default 75)."""
        ...

    def get_section_debounce_ms(self) -> int:
        """Quiet period before section visibility is evaluated (default 100)."""
        ...

    def get_visibility_line_ratio(self) -> float:
        """Position of the visibility line as a fraction of viewport height."""
        ...
