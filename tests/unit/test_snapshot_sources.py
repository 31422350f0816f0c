"""Tests for the snapshot source adapters."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from sitepulse.adapters.snapshot_source import InMemorySnapshotSource, JsonFileSnapshotSource
from sitepulse.components.dashboard import DateRange, SnapshotFetchError


def write_snapshot(directory: Path, date_range: DateRange, payload: Any) -> Path:
    path = directory / f"{date_range.value}.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


class TestInMemorySnapshotSource:
    def test_returns_stored_snapshot(self, sample_snapshot: dict[str, Any]) -> None:
        source = InMemorySnapshotSource({DateRange.LAST_7_DAYS: sample_snapshot})

        assert source.fetch(DateRange.LAST_7_DAYS) is sample_snapshot
        assert source.fetch(DateRange.LAST_30_DAYS) is None
        assert source.fetch_count == 2


class TestJsonFileSnapshotSource:
    def test_path_for_range(self, tmp_path: Path) -> None:
        source = JsonFileSnapshotSource(tmp_path)

        assert source.path_for(DateRange.LAST_30_DAYS) == tmp_path / "last30Days.json"

    def test_reads_snapshot(self, tmp_path: Path, sample_snapshot: dict[str, Any]) -> None:
        write_snapshot(tmp_path, DateRange.LAST_7_DAYS, sample_snapshot)
        source = JsonFileSnapshotSource(tmp_path)

        assert source.fetch(DateRange.LAST_7_DAYS) == sample_snapshot

    def test_missing_file_is_none(self, tmp_path: Path) -> None:
        source = JsonFileSnapshotSource(tmp_path)

        assert source.fetch(DateRange.LAST_90_DAYS) is None

    def test_cached_until_refresh(self, tmp_path: Path) -> None:
        write_snapshot(tmp_path, DateRange.LAST_7_DAYS, {"overview": {"totalVisits": 1}})
        source = JsonFileSnapshotSource(tmp_path)
        source.fetch(DateRange.LAST_7_DAYS)

        write_snapshot(tmp_path, DateRange.LAST_7_DAYS, {"overview": {"totalVisits": 2}})

        cached = source.fetch(DateRange.LAST_7_DAYS)
        fresh = source.fetch(DateRange.LAST_7_DAYS, use_cache=False)
        assert cached is not None and cached["overview"]["totalVisits"] == 1
        assert fresh is not None and fresh["overview"]["totalVisits"] == 2

    def test_invalid_json_raises(self, tmp_path: Path) -> None:
        (tmp_path / "last7Days.json").write_text("{not json", encoding="utf-8")
        source = JsonFileSnapshotSource(tmp_path)

        with pytest.raises(SnapshotFetchError):
            source.fetch(DateRange.LAST_7_DAYS)

    def test_non_object_raises(self, tmp_path: Path) -> None:
        write_snapshot(tmp_path, DateRange.LAST_7_DAYS, [1, 2, 3])
        source = JsonFileSnapshotSource(tmp_path)

        with pytest.raises(SnapshotFetchError):
            source.fetch(DateRange.LAST_7_DAYS)

    def test_null_document_is_none(self, tmp_path: Path) -> None:
        write_snapshot(tmp_path, DateRange.LAST_7_DAYS, None)
        source = JsonFileSnapshotSource(tmp_path)

        assert source.fetch(DateRange.LAST_7_DAYS) is None

    def test_file_exported_after_miss_is_picked_up(
        self, tmp_path: Path, sample_snapshot: dict[str, Any]
    ) -> None:
        source = JsonFileSnapshotSource(tmp_path)
        assert source.fetch(DateRange.LAST_7_DAYS) is None

        write_snapshot(tmp_path, DateRange.LAST_7_DAYS, sample_snapshot)

        assert source.fetch(DateRange.LAST_7_DAYS) == sample_snapshot
