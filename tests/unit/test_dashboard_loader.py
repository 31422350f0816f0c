"""
Tests for DashboardLoader.

The loader distinguishes no data yet, fetch failure, malformed snapshot,
empty snapshot and a usable snapshot.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pytest

from sitepulse.adapters.snapshot_source import InMemorySnapshotSource
from sitepulse.components.dashboard import (
    DashboardLoader,
    DateRange,
    LoadStatus,
    SnapshotFetchError,
)


class FlakySource:
    """Returns a snapshot until told to fail."""

    def __init__(self, snapshot: Mapping[str, Any]) -> None:
        self.snapshot = snapshot
        self.fail = False

    def fetch(self, date_range: DateRange, use_cache: bool = True) -> Mapping[str, Any] | None:
        if self.fail:
            raise SnapshotFetchError("backend returned 503")
        return self.snapshot


@pytest.fixture
def source(sample_snapshot: dict[str, Any]) -> InMemorySnapshotSource:
    return InMemorySnapshotSource({DateRange.LAST_7_DAYS: sample_snapshot})


class TestDashboardLoader:
    def test_no_data_before_first_refresh(self, source: InMemorySnapshotSource) -> None:
        loader = DashboardLoader(source)

        assert loader.state.status == LoadStatus.NO_DATA
        assert loader.snapshot is None
        assert loader.views() is None

    def test_ready_after_refresh(self, source: InMemorySnapshotSource) -> None:
        loader = DashboardLoader(source)

        result = loader.refresh(DateRange.LAST_7_DAYS)

        assert result.status == LoadStatus.READY
        assert result.date_range == DateRange.LAST_7_DAYS
        views = loader.views()
        assert views is not None
        assert views.funnel[0].value == 1000

    def test_missing_range_is_empty(self, source: InMemorySnapshotSource) -> None:
        loader = DashboardLoader(source)

        result = loader.refresh(DateRange.LAST_90_DAYS)

        assert result.status == LoadStatus.EMPTY
        assert loader.views() is None

    def test_zero_snapshot_is_empty_but_derivable(self, source: InMemorySnapshotSource) -> None:
        source.put(DateRange.LAST_30_DAYS, {"overview": {"totalVisits": 0}})
        loader = DashboardLoader(source)

        result = loader.refresh(DateRange.LAST_30_DAYS)

        assert result.status == LoadStatus.EMPTY
        views = loader.views()
        assert views is not None
        assert all(s.percentage == 0.0 for s in views.funnel)

    def test_malformed_snapshot_is_invalid(self, source: InMemorySnapshotSource) -> None:
        source.put(DateRange.LAST_30_DAYS, {"devices": []})
        loader = DashboardLoader(source)

        result = loader.refresh(DateRange.LAST_30_DAYS)

        assert result.status == LoadStatus.INVALID
        assert result.error is not None
        assert "overview" in result.error

    def test_fetch_failure_keeps_previous_snapshot(self, sample_snapshot: dict[str, Any]) -> None:
        flaky = FlakySource(sample_snapshot)
        loader = DashboardLoader(flaky)
        loader.refresh()
        previous = loader.snapshot

        flaky.fail = True
        result = loader.refresh()

        assert result.status == LoadStatus.FAILED
        assert result.error == "backend returned 503"
        assert loader.snapshot is previous
        assert loader.views() is not None

    def test_only_latest_snapshot_kept(
        self, source: InMemorySnapshotSource, sample_snapshot: dict[str, Any]
    ) -> None:
        source.put(DateRange.LAST_30_DAYS, {"overview": {"totalVisits": 5}})
        loader = DashboardLoader(source)

        loader.refresh(DateRange.LAST_7_DAYS)
        loader.refresh(DateRange.LAST_30_DAYS)

        assert loader.snapshot is not None
        assert loader.snapshot.overview.total_visits == 5

    def test_every_refresh_fetches(self, source: InMemorySnapshotSource) -> None:
        loader = DashboardLoader(source)

        loader.refresh()
        loader.refresh()

        assert source.fetch_count == 2

    def test_room_sort_passed_through(self, source: InMemorySnapshotSource) -> None:
        loader = DashboardLoader(source)
        loader.refresh()

        views = loader.views(room_sort="none")

        assert views is not None
        assert views.rooms[0].name == "garden-suite"

    def test_views_for_uses_the_given_result(
        self, source: InMemorySnapshotSource, sample_snapshot: dict[str, Any]
    ) -> None:
        source.put(DateRange.LAST_30_DAYS, {"overview": {"totalVisits": 3000}})
        loader = DashboardLoader(source)

        week = loader.refresh(DateRange.LAST_7_DAYS)
        loader.refresh(DateRange.LAST_30_DAYS)

        views = loader.views_for(week)
        assert views is not None
        assert views.funnel[0].value == 1000
        latest = loader.views()
        assert latest is not None
        assert latest.funnel[0].value == 3000

    def test_views_for_empty_result(self, source: InMemorySnapshotSource) -> None:
        loader = DashboardLoader(source)

        result = loader.refresh(DateRange.LAST_90_DAYS)

        assert loader.views_for(result) is None

    def test_refresh_accepts_range_string(self, source: InMemorySnapshotSource) -> None:
        loader = DashboardLoader(source)

        result = loader.refresh("last7Days")

        assert result.status == LoadStatus.READY
        assert result.date_range == DateRange.LAST_7_DAYS

    def test_refresh_rejects_unknown_range_string(self, source: InMemorySnapshotSource) -> None:
        loader = DashboardLoader(source)

        with pytest.raises(ValueError):
            loader.refresh("lastYear")
        assert loader.state.status == LoadStatus.NO_DATA
