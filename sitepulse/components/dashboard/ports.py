"""
Dashboard component port definitions.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

from .models import DateRange


class SnapshotSourcePort(Protocol):
    """Supplies one analytics snapshot per date range."""

    def fetch(self, date_range: DateRange, use_cache: bool = True) -> Mapping[str, Any] | None:
        """
        Fetch the raw snapshot.

        Returns None when the source has nothing for the range.
        Raises SnapshotFetchError when the source cannot be reached.
        """
        ...


class DashboardRulesPort(Protocol):
    """Port for dashboard rules configuration."""

    def get_geographic_limit(self) -> int:
        """Number of locations shown (default 10)."""
        ...

    def get_traffic_source_limit(self) -> int:
        """Number of traffic sources shown (default 8)."""
        ...

    def get_high_bounce_threshold(self) -> float:
        """Bounce rate above which a device row is flagged (default 70)."""
        ...

    def get_room_sort(self) -> str:
        """Default room leaderboard sort key (default 'views')."""
        ...
