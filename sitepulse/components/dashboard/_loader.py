"""
DashboardLoader - most-recent-snapshot holder.

Fetches a snapshot from the injected source and records how the fetch went,
so callers can tell "nothing loaded yet" from "fetch failed" from "fetched
an empty snapshot".

Key behaviors:
- Only the most recent successful snapshot is kept
- Fetch failures keep the previous snapshot and mark the state FAILED
- Malformed snapshots are rejected with status INVALID
- Views are re-derived on every call, never cached
"""

from __future__ import annotations

import logging

from .component import _resolve_config, derive_views, is_empty_snapshot, parse_snapshot
from .models import (
    AnalyticsSnapshot,
    DashboardConfig,
    DateRange,
    DerivedViews,
    LoadResult,
    LoadStatus,
    SnapshotError,
    SnapshotFetchError,
)
from .ports import DashboardRulesPort, SnapshotSourcePort

logger = logging.getLogger(__name__)


class DashboardLoader:
    """Loads snapshots on demand and derives views from the latest one."""

    def __init__(
        self,
        source: SnapshotSourcePort,
        config: DashboardConfig | None = None,
        rules: DashboardRulesPort | None = None,
    ) -> None:
        self._source = source
        self._config = _resolve_config(config, rules)
        self._state = LoadResult(status=LoadStatus.NO_DATA)

    @property
    def state(self) -> LoadResult:
        return self._state

    @property
    def snapshot(self) -> AnalyticsSnapshot | None:
        return self._state.snapshot

    def refresh(
        self,
        date_range: DateRange | str = DateRange.LAST_7_DAYS,
        use_cache: bool = False,
    ) -> LoadResult:
        """
        Fetch the snapshot for a date range and update the state.

        The returned result belongs to this call; derive from it with
        views_for rather than reading state again, which a concurrent
        refresh may already have replaced.
        """
        date_range = DateRange(date_range)
        result = self._load(date_range, use_cache, previous=self._state.snapshot)
        self._state = result
        return result

    def _load(
        self,
        date_range: DateRange,
        use_cache: bool,
        previous: AnalyticsSnapshot | None,
    ) -> LoadResult:
        try:
            raw = self._source.fetch(date_range, use_cache)
        except SnapshotFetchError as e:
            logger.warning("Snapshot fetch failed for %s: %s", date_range.value, e)
            return LoadResult(
                status=LoadStatus.FAILED,
                date_range=date_range,
                snapshot=previous,
                error=str(e),
            )

        if not raw:
            logger.info("Snapshot for %s is empty", date_range.value)
            return LoadResult(status=LoadStatus.EMPTY, date_range=date_range)

        try:
            snapshot = parse_snapshot(raw)
        except SnapshotError as e:
            logger.warning("Rejected snapshot for %s: %s", date_range.value, e)
            return LoadResult(
                status=LoadStatus.INVALID,
                date_range=date_range,
                snapshot=previous,
                error=str(e),
            )

        status = LoadStatus.EMPTY if is_empty_snapshot(snapshot) else LoadStatus.READY
        return LoadResult(status=status, date_range=date_range, snapshot=snapshot)

    def views(self, room_sort: str | None = None) -> DerivedViews | None:
        """Derive views from the current snapshot, None if there is none."""
        return self.views_for(self._state, room_sort)

    def views_for(self, result: LoadResult, room_sort: str | None = None) -> DerivedViews | None:
        """Derive views from the snapshot carried by a given load result."""
        if result.snapshot is None:
            return None
        return derive_views(result.snapshot, self._config, room_sort)
