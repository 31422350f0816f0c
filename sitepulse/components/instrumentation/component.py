"""
Instrumentation component - behavioral event detection on a live page.

Turns high-frequency raw signals (scroll ticks, layout changes, mount and
teardown) into exactly one event per logical occurrence.

Invariants:
- scroll event fires at most once per page instance, never below threshold
- section_view fires at most once per region per page instance
- every component_load is paired with exactly one component_unload
- at most one pending section evaluation per page instance
- sink failures never reach the caller
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from datetime import date
from types import TracebackType

from .models import (
    DEFAULT_CONFIG,
    AttributeValue,
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

logger = logging.getLogger(__name__)


# --- Pure Functions (Functional Core) ---


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return math.floor(value + 0.5)


def scroll_percent(scroll_y: float, document_height: float, viewport_height: float) -> float:
    """
    Current scroll depth as a percentage of the scrollable distance.

    Returns NaN when the page is not taller than the viewport.
    """
    scrollable = document_height - viewport_height
    if scrollable <= 0:
        return math.nan
    return scroll_y / scrollable * 100


def is_region_visible(
    bounds: RegionBounds,
    viewport_height: float,
    line_ratio: float = 0.5,
) -> bool:
    """A region is visible when it spans the horizontal line at line_ratio of the viewport."""
    line = viewport_height * line_ratio
    return bounds.top < line < bounds.bottom


def _number(value: float) -> int | float:
    """Integral floats are reported as ints."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def safe_emit(
    sink: EventSinkPort,
    name: EventName | str,
    attributes: dict[str, AttributeValue],
) -> None:
    """
    Forward an event, dropping it if the sink fails.

    Telemetry loss is acceptable; no retry and no buffering.
    """
    event_name = name.value if isinstance(name, EventName) else name
    try:
        sink.emit(event_name, attributes)
    except Exception:
        logger.debug("Dropped %s event, sink unavailable", event_name, exc_info=True)


def _resolve_config(
    config: InstrumentationConfig | None,
    rules: InstrumentationRulesPort | None,
) -> InstrumentationConfig:
    if rules is not None:
        return InstrumentationConfig(
            scroll_threshold_percent=rules.get_scroll_threshold_percent(),
            section_debounce_ms=rules.get_section_debounce_ms(),
            visibility_line_ratio=rules.get_visibility_line_ratio(),
        )
    return config or DEFAULT_CONFIG


# --- Debounce ---


class Debouncer:
    """
    Coalesces bursts of signals into one deferred action.

    Every signal cancels the pending timer and schedules a new one, so the
    action runs once per quiet interval with the latest state.
    """

    def __init__(
        self,
        scheduler: SchedulerPort,
        delay_ms: float,
        action: Callable[[], None],
    ) -> None:
        self._scheduler = scheduler
        self._delay_seconds = delay_ms / 1000
        self._action = action
        self._pending: TimerHandlePort | None = None

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def signal(self) -> None:
        """Register a raw signal and restart the quiet period."""
        if self._pending is not None:
            self._pending.cancel()
        self._pending = self._scheduler.call_later(self._delay_seconds, self._fire)

    def cancel(self) -> None:
        """Drop the pending action, if any."""
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _fire(self) -> None:
        self._pending = None
        self._action()


# --- Scroll depth ---


class ScrollDepthTracker:
    """Emits a single scroll event the first time the threshold is reached."""

    def __init__(
        self,
        viewport: ViewportPort,
        sink: EventSinkPort,
        threshold_percent: float = DEFAULT_CONFIG.scroll_threshold_percent,
    ) -> None:
        self._viewport = viewport
        self._sink = sink
        self._threshold = threshold_percent
        self.state = ScrollState()

    @property
    def threshold_percent(self) -> float:
        return self._threshold

    def on_scroll(self) -> bool:
        """
        Evaluate the current scroll position.

        Returns True only on the call that emitted the scroll event.
        """
        percent = scroll_percent(
            self._viewport.scroll_y(),
            self._viewport.document_height(),
            self._viewport.viewport_height(),
        )
        if not math.isfinite(percent):
            return False

        if percent > self.state.max_scroll_seen:
            self.state.max_scroll_seen = percent

        if self.state.threshold_fired or percent < self._threshold:
            return False

        self.state.threshold_fired = True
        safe_emit(
            self._sink,
            EventName.SCROLL,
            {"percent_scrolled": _number(self._threshold)},
        )
        return True


# --- Section visibility ---


class SectionVisibilityTracker:
    """
    Reports each tracked region the first time it crosses the visibility line.

    Reporting state lives in a map keyed by section id; a region moves from
    UNSEEN to REPORTED exactly once.
    """

    def __init__(
        self,
        viewport: ViewportPort,
        sink: EventSinkPort,
        page_url: str,
        line_ratio: float = DEFAULT_CONFIG.visibility_line_ratio,
        regions: Sequence[TrackedRegion] | None = None,
    ) -> None:
        self._viewport = viewport
        self._sink = sink
        self._page_url = page_url
        self._line_ratio = line_ratio
        if regions is None:
            regions = viewport.discover_regions()
        self._regions: tuple[TrackedRegion, ...] = tuple(regions)
        self._states: dict[str, ReportState] = {
            region.section_id: ReportState.UNSEEN for region in self._regions
        }

    @property
    def regions(self) -> tuple[TrackedRegion, ...]:
        return self._regions

    def state_of(self, section_id: str) -> ReportState | None:
        return self._states.get(section_id)

    def evaluate(self) -> list[TrackedRegion]:
        """Check every unreported region; returns the ones reported by this call."""
        viewport_height = self._viewport.viewport_height()
        reported: list[TrackedRegion] = []

        for region in self._regions:
            if self._states.get(region.section_id) is not ReportState.UNSEEN:
                continue

            bounds = self._viewport.region_bounds(region.section_id)
            if bounds is None or not is_region_visible(bounds, viewport_height, self._line_ratio):
                continue

            self._states[region.section_id] = ReportState.REPORTED
            safe_emit(
                self._sink,
                EventName.SECTION_VIEW,
                {
                    "section_id": region.section_id,
                    "section_name": region.display_name,
                    "page_url": self._page_url,
                },
            )
            reported.append(region)

        return reported

    def clear(self) -> None:
        """Discard regions and their state at page teardown."""
        self._regions = ()
        self._states.clear()


# --- Action primitives ---


class ActionTracker:
    """
    Stateless emitters for domain actions.

    No latching and no dedup; every call emits.
    """

    def __init__(self, sink: EventSinkPort, page_url: str = "") -> None:
        self._sink = sink
        self._page_url = page_url

    def page_view(self, page_path: str, page_location: str, page_title: str) -> None:
        safe_emit(
            self._sink,
            EventName.PAGE_VIEW,
            {
                "page_path": page_path,
                "page_location": page_location,
                "page_title": page_title,
            },
        )

    def whatsapp_click(self, source: str, phone_number: str | None = None) -> None:
        attributes: dict[str, AttributeValue] = {"source": source}
        if phone_number:
            attributes["phone_number"] = phone_number
        safe_emit(self._sink, EventName.WHATSAPP_CLICK, attributes)

    def room_view(self, room_id: str, room_name: str, view_type: ViewType | str) -> None:
        safe_emit(
            self._sink,
            EventName.ROOM_VIEW,
            {
                "room_id": room_id,
                "room_name": room_name,
                "view_type": ViewType(view_type).value,
            },
        )

    def date_selection(self, check_in: date | str, check_out: date | str, nights: int) -> None:
        safe_emit(
            self._sink,
            EventName.DATE_SELECTION,
            {
                "check_in": check_in.isoformat() if isinstance(check_in, date) else check_in,
                "check_out": check_out.isoformat() if isinstance(check_out, date) else check_out,
                "nights": nights,
            },
        )

    def section_interaction(self, section: str, action: InteractionAction | str) -> None:
        safe_emit(
            self._sink,
            EventName.SECTION_INTERACTION,
            {
                "section": section,
                "action": InteractionAction(action).value,
                "page_url": self._page_url,
            },
        )

    def image_click(self, image_id: str, gallery_name: str) -> None:
        safe_emit(
            self._sink,
            EventName.IMAGE_CLICK,
            {"image_id": image_id, "gallery_name": gallery_name, "page_url": self._page_url},
        )

    def video_play(self, video_id: str, video_title: str) -> None:
        safe_emit(
            self._sink,
            EventName.VIDEO_PLAY,
            {"video_id": video_id, "video_title": video_title, "page_url": self._page_url},
        )


# --- Page session ---


class PageSession:
    """
    One tracked page instance.

    Activation emits component_load and starts the session timer; teardown
    emits component_unload with the elapsed time. Use as a context manager
    so teardown runs on every exit path:

        with PageSession("RoomsPage", "/rooms", sink=sink, clock=clock) as page:
            page.on_scroll()

    Scroll and section tracking are enabled when a viewport is supplied, in
    which case a scheduler is required for the section debounce.
    """

    def __init__(
        self,
        component_name: str,
        page_url: str,
        *,
        sink: EventSinkPort,
        clock: ClockPort,
        viewport: ViewportPort | None = None,
        scheduler: SchedulerPort | None = None,
        config: InstrumentationConfig | None = None,
        rules: InstrumentationRulesPort | None = None,
    ) -> None:
        if viewport is not None and scheduler is None:
            raise ValueError("A scheduler is required when a viewport is tracked")

        self.component_name = component_name
        self.page_url = page_url
        self._sink = sink
        self._clock = clock
        self._viewport = viewport
        self._scheduler = scheduler
        self._config = _resolve_config(config, rules)

        self.actions = ActionTracker(sink, page_url)
        self.scroll: ScrollDepthTracker | None = None
        self.sections: SectionVisibilityTracker | None = None
        self._debouncer: Debouncer | None = None

        self._started_ms: float | None = None
        self._active = False
        self._closed = False

    @property
    def active(self) -> bool:
        return self._active

    @property
    def section_check_pending(self) -> bool:
        return self._debouncer is not None and self._debouncer.pending

    def activate(self) -> None:
        """Start the page instance. A torn-down session cannot be reused."""
        if self._closed:
            raise RuntimeError(f"Page session for {self.page_url} was already torn down")
        if self._active:
            return

        self._started_ms = self._clock.monotonic_ms()
        self._active = True

        if self._viewport is not None and self._scheduler is not None:
            self.scroll = ScrollDepthTracker(
                self._viewport,
                self._sink,
                self._config.scroll_threshold_percent,
            )
            self.sections = SectionVisibilityTracker(
                self._viewport,
                self._sink,
                self.page_url,
                self._config.visibility_line_ratio,
            )
            self._debouncer = Debouncer(
                self._scheduler,
                self._config.section_debounce_ms,
                self.sections.evaluate,
            )

        safe_emit(
            self._sink,
            EventName.COMPONENT_LOAD,
            {"component_name": self.component_name, "page_url": self.page_url},
        )

    def on_scroll(self) -> None:
        """Raw scroll signal from the host."""
        if not self._active:
            return
        if self.scroll is not None:
            self.scroll.on_scroll()
        if self._debouncer is not None:
            self._debouncer.signal()

    def deactivate(self) -> None:
        """Tear the page instance down. Safe to call more than once."""
        if not self._active:
            return

        self._active = False
        self._closed = True

        if self._debouncer is not None:
            self._debouncer.cancel()
        if self.sections is not None:
            self.sections.clear()

        elapsed = self._clock.monotonic_ms() - (self._started_ms or 0.0)
        safe_emit(
            self._sink,
            EventName.COMPONENT_UNLOAD,
            {
                "component_name": self.component_name,
                "page_url": self.page_url,
                "time_loaded": max(0, round_half_up(elapsed)),
            },
        )

    def __enter__(self) -> PageSession:
        self.activate()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.deactivate()


@contextmanager
def tracked_page(
    component_name: str,
    page_url: str,
    *,
    sink: EventSinkPort,
    clock: ClockPort,
    viewport: ViewportPort | None = None,
    scheduler: SchedulerPort | None = None,
    config: InstrumentationConfig | None = None,
    rules: InstrumentationRulesPort | None = None,
) -> Iterator[PageSession]:
    """Track one page instance for the duration of the block."""
    session = PageSession(
        component_name,
        page_url,
        sink=sink,
        clock=clock,
        viewport=viewport,
        scheduler=scheduler,
        config=config,
        rules=rules,
    )
    session.activate()
    try:
        yield session
    finally:
        session.deactivate()
