"""
Snapshot source adapters.

Implements SnapshotSourcePort. The production backend endpoint is external;
these adapters serve snapshots exported to disk or held in memory.

Key behaviors:
- One snapshot per date range
- JsonFileSnapshotSource reads <dir>/<dateRange>.json and caches the parsed
  document; use_cache=False forces a re-read. A missing file is not cached,
  so a snapshot exported later is picked up on the next fetch
- I/O and decoding failures surface as SnapshotFetchError
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from sitepulse.components.dashboard import DateRange, SnapshotFetchError

logger = logging.getLogger(__name__)


class InMemorySnapshotSource:
    """In-memory snapshot source for testing/dev."""

    def __init__(self, snapshots: Mapping[DateRange, Mapping[str, Any]] | None = None) -> None:
        self._snapshots: dict[DateRange, Mapping[str, Any]] = dict(snapshots or {})
        self.fetch_count = 0

    def put(self, date_range: DateRange, snapshot: Mapping[str, Any]) -> None:
        self._snapshots[date_range] = snapshot

    def fetch(self, date_range: DateRange, use_cache: bool = True) -> Mapping[str, Any] | None:
        self.fetch_count += 1
        return self._snapshots.get(date_range)


class JsonFileSnapshotSource:
    """Reads snapshots from JSON files named after the date range."""

    def __init__(self, directory: str | Path) -> None:
        self._directory = Path(directory)
        self._cache: dict[DateRange, Mapping[str, Any] | None] = {}

    def path_for(self, date_range: DateRange) -> Path:
        return self._directory / f"{date_range.value}.json"

    def fetch(self, date_range: DateRange, use_cache: bool = True) -> Mapping[str, Any] | None:
        if use_cache and date_range in self._cache:
            return self._cache[date_range]

        path = self.path_for(date_range)
        if not path.exists():
            logger.info("No snapshot file at %s", path)
            self._cache.pop(date_range, None)
            return None

        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except OSError as e:
            raise SnapshotFetchError(f"Cannot read snapshot file {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise SnapshotFetchError(f"Snapshot file {path} is not valid JSON: {e}") from e

        if data is not None and not isinstance(data, Mapping):
            raise SnapshotFetchError(f"Snapshot file {path} does not contain a JSON object")

        self._cache[date_range] = data
        return data
