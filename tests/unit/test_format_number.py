"""Tests for number and trend formatting."""

from __future__ import annotations

import pytest

from sitepulse.components.dashboard import (
    TrendDirection,
    classify_trend,
    format_number,
    format_trend,
)


class TestFormatNumber:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (1500, "1.5K"),
            (1000, "1.0K"),
            (12_345, "12.3K"),
            (1_000_000, "1.0M"),
            (1_234_567, "1.2M"),
            (999, "999"),
            (42, "42"),
            (7.0, "7"),
            (999.5, "999.5"),
        ],
    )
    def test_magnitudes(self, value: float, expected: str) -> None:
        assert format_number(value) == expected

    @pytest.mark.parametrize("value", [0, 0.0, None, float("nan"), float("inf")])
    def test_falsy_and_non_finite_render_zero(self, value: float | None) -> None:
        assert format_number(value) == "0"

    def test_negative_values_are_grouped(self) -> None:
        assert format_number(-1500) == "-1,500"


class TestTrend:
    @pytest.mark.parametrize(
        ("value", "direction"),
        [
            (5.2, TrendDirection.UP),
            (-0.1, TrendDirection.DOWN),
            (0, TrendDirection.NEUTRAL),
            (None, TrendDirection.NEUTRAL),
            (float("nan"), TrendDirection.NEUTRAL),
        ],
    )
    def test_classify(self, value: float | None, direction: TrendDirection) -> None:
        assert classify_trend(value) == direction

    def test_magnitude_is_absolute_one_decimal(self) -> None:
        badge = format_trend(-3.21)

        assert badge.direction == TrendDirection.DOWN
        assert badge.magnitude == "3.2"
        assert badge.label == "3.2%"

    def test_absent_trend(self) -> None:
        badge = format_trend(None)

        assert badge.direction == TrendDirection.NEUTRAL
        assert badge.magnitude == "0.0"
