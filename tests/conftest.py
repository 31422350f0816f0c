from __future__ import annotations

from typing import Any

import pytest

from sitepulse.adapters.sinks import InMemorySink
from sitepulse.adapters.viewport import DocumentGeometry, PlacedRegion
from tests.fakes import FakeClock, FakeScheduler

# --- Fixtures ---


@pytest.fixture
def sink() -> InMemorySink:
    return InMemorySink()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(start_ms=1_000.0)


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def geometry() -> DocumentGeometry:
    """A 3000px page in an 800px viewport with three sections."""
    return DocumentGeometry(
        viewport_height=800,
        document_height=3000,
        regions=[
            PlacedRegion("hero", offset_top=0, height=700, section_name="Hero"),
            PlacedRegion("rooms", offset_top=900, height=800, section_name="Our Rooms"),
            PlacedRegion("contact", offset_top=2400, height=600),
        ],
    )


@pytest.fixture
def sample_snapshot() -> dict[str, Any]:
    """A realistic raw snapshot as the backend returns it."""
    return {
        "overview": {
            "totalVisits": 1000,
            "newUsers": 640,
            "avgSessionDuration": 94.6,
            "bounceRate": 42.4,
            "engagementRate": 57.5,
            "conversionRate": 6.0,
            "trends": {"totalVisits": 12.34},
        },
        "conversions": {
            "roomViews": 400,
            "dateSelections": 150,
            "priceChecks": 150,
            "whatsappClicks": 60,
        },
        "devices": [
            {"device": "mobile", "sessions": 600, "users": 500, "bounceRate": 75.0},
            {"device": "desktop", "sessions": 300, "users": 250, "bounceRate": 30.0},
            {"device": "tablet", "sessions": 100, "users": 90, "bounceRate": 50.0},
        ],
        "geographic": [
            {"country": "Ghana", "city": "Accra", "users": 300, "sessions": 350},
            {"country": "Nigeria", "city": "(not set)", "users": 120, "sessions": 130},
        ],
        "trafficSources": [
            {"source": "google", "medium": "organic", "sessions": 500, "users": 420},
            {"source": "instagram", "medium": "social", "sessions": 200, "users": 180},
        ],
        "rooms": [
            {"roomSlug": "garden-suite", "views": 120, "avgDuration": 150, "bounceRate": 20.0},
            {"roomSlug": "ocean-view", "views": 300, "avgDuration": 89, "bounceRate": 35.0},
            {"path": "/rooms/loft", "views": 120, "avgDuration": "n/a", "bounceRate": 10.0},
        ],
    }
