"""Tests for the action tracking primitives."""

from __future__ import annotations

from datetime import date

import pytest

from sitepulse.adapters.sinks import InMemorySink
from sitepulse.components.instrumentation import (
    ActionTracker,
    EventName,
    InteractionAction,
    ViewType,
    safe_emit,
)
from tests.fakes import FailingSink


@pytest.fixture
def actions(sink: InMemorySink) -> ActionTracker:
    return ActionTracker(sink, page_url="/rooms")


class TestActionTracker:
    def test_page_view(self, actions: ActionTracker, sink: InMemorySink) -> None:
        actions.page_view("/rooms", "https://example.com/rooms", "Rooms")

        assert sink.events[0].name == "page_view"
        assert sink.events[0].attributes == {
            "page_path": "/rooms",
            "page_location": "https://example.com/rooms",
            "page_title": "Rooms",
        }

    def test_whatsapp_click_with_phone(self, actions: ActionTracker, sink: InMemorySink) -> None:
        actions.whatsapp_click("room_card", "+233200000000")

        assert sink.events[0].attributes == {
            "source": "room_card",
            "phone_number": "+233200000000",
        }

    def test_whatsapp_click_without_phone(
        self, actions: ActionTracker, sink: InMemorySink
    ) -> None:
        actions.whatsapp_click("floating_button")
        actions.whatsapp_click("footer", "")

        assert [e.attributes for e in sink.events] == [
            {"source": "floating_button"},
            {"source": "footer"},
        ]

    def test_room_view(self, actions: ActionTracker, sink: InMemorySink) -> None:
        actions.room_view("r1", "Garden Suite", ViewType.GALLERY)
        actions.room_view("r1", "Garden Suite", "details")

        assert [e.attributes["view_type"] for e in sink.events] == ["gallery", "details"]
        assert sink.events[0].attributes["room_name"] == "Garden Suite"

    def test_room_view_rejects_unknown_view_type(self, actions: ActionTracker) -> None:
        with pytest.raises(ValueError):
            actions.room_view("r1", "Garden Suite", "panorama")

    def test_date_selection_formats_dates(
        self, actions: ActionTracker, sink: InMemorySink
    ) -> None:
        actions.date_selection(date(2025, 3, 1), date(2025, 3, 4), 3)

        assert sink.events[0].attributes == {
            "check_in": "2025-03-01",
            "check_out": "2025-03-04",
            "nights": 3,
        }

    def test_date_selection_accepts_strings(
        self, actions: ActionTracker, sink: InMemorySink
    ) -> None:
        actions.date_selection("2025-03-01", "2025-03-02", 1)

        assert sink.events[0].attributes["check_in"] == "2025-03-01"

    def test_section_interaction_carries_page_url(
        self, actions: ActionTracker, sink: InMemorySink
    ) -> None:
        actions.section_interaction("amenities", InteractionAction.HOVER)

        assert sink.events[0].attributes == {
            "section": "amenities",
            "action": "hover",
            "page_url": "/rooms",
        }

    def test_image_click(self, actions: ActionTracker, sink: InMemorySink) -> None:
        actions.image_click("img-7", "pool")

        assert sink.events[0].attributes == {
            "image_id": "img-7",
            "gallery_name": "pool",
            "page_url": "/rooms",
        }

    def test_video_play(self, actions: ActionTracker, sink: InMemorySink) -> None:
        actions.video_play("v1", "Welcome tour")

        assert sink.events[0].name == "video_play"
        assert sink.events[0].attributes["video_title"] == "Welcome tour"

    def test_no_dedup(self, actions: ActionTracker, sink: InMemorySink) -> None:
        for _ in range(3):
            actions.whatsapp_click("header")

        assert len(sink.named("whatsapp_click")) == 3


class TestSafeEmit:
    def test_swallows_sink_failure(self) -> None:
        failing = FailingSink()

        safe_emit(failing, EventName.SCROLL, {"percent_scrolled": 75})

        assert failing.attempts == 1

    def test_accepts_plain_event_name(self, sink: InMemorySink) -> None:
        safe_emit(sink, "custom_event", {"k": "v"})

        assert sink.events[0].name == "custom_event"

    def test_enum_name_is_emitted_as_value(self, sink: InMemorySink) -> None:
        safe_emit(sink, EventName.SECTION_VIEW, {})

        assert sink.events[0].name == "section_view"
