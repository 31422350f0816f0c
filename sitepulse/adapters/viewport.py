"""
Document geometry adapter.

Implements ViewportPort over a simple in-memory page model: a document of a
given height, a viewport window onto it, and tracked regions placed at
document offsets. Used for headless replay of scroll sessions and in tests.
"""

from __future__ import annotations

from dataclasses import dataclass

from sitepulse.components.instrumentation import RegionBounds, TrackedRegion


@dataclass(frozen=True)
class PlacedRegion:
    """A tracked region laid out at a document offset."""

    section_id: str
    offset_top: float
    height: float
    section_name: str | None = None


class DocumentGeometry:
    """Mutable page geometry. Scroll offset is clamped to the scrollable range."""

    def __init__(
        self,
        viewport_height: float,
        document_height: float,
        regions: list[PlacedRegion] | None = None,
        scroll_y: float = 0.0,
    ) -> None:
        self._viewport_height = viewport_height
        self._document_height = document_height
        self._regions: dict[str, PlacedRegion] = {r.section_id: r for r in regions or []}
        self._scroll_y = 0.0
        self.scroll_to(scroll_y)

    # --- Mutation ---

    def scroll_to(self, y: float) -> None:
        max_scroll = max(self._document_height - self._viewport_height, 0.0)
        self._scroll_y = max(0.0, min(y, max_scroll))

    def scroll_to_percent(self, percent: float) -> None:
        max_scroll = max(self._document_height - self._viewport_height, 0.0)
        self.scroll_to(max_scroll * percent / 100)

    def resize(
        self,
        viewport_height: float | None = None,
        document_height: float | None = None,
    ) -> None:
        if viewport_height is not None:
            self._viewport_height = viewport_height
        if document_height is not None:
            self._document_height = document_height
        self.scroll_to(self._scroll_y)

    def add_region(self, region: PlacedRegion) -> None:
        self._regions[region.section_id] = region

    def remove_region(self, section_id: str) -> None:
        self._regions.pop(section_id, None)

    # --- ViewportPort ---

    def scroll_y(self) -> float:
        return self._scroll_y

    def viewport_height(self) -> float:
        return self._viewport_height

    def document_height(self) -> float:
        return self._document_height

    def discover_regions(self) -> list[TrackedRegion]:
        return [
            TrackedRegion(section_id=r.section_id, section_name=r.section_name)
            for r in sorted(self._regions.values(), key=lambda r: r.offset_top)
        ]

    def region_bounds(self, section_id: str) -> RegionBounds | None:
        region = self._regions.get(section_id)
        if region is None:
            return None
        top = region.offset_top - self._scroll_y
        return RegionBounds(top=top, bottom=top + region.height)
