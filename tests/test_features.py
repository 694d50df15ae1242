"""Tests for pure progress/formatting helpers."""

import pytest

from app.kpi.catalog import build_initial_data
from app.kpi.features import (
    average_progress,
    calculate_progress,
    days_in_month,
    display_value,
    format_currency,
    format_number,
    progress_color,
)


class TestCalculateProgress:
    def test_at_min_is_zero(self):
        assert calculate_progress(50, 50, 100) == 0.0

    def test_at_max_is_hundred(self):
        assert calculate_progress(100, 50, 100) == 100.0

    def test_midpoint(self):
        assert calculate_progress(75, 50, 100) == 50.0

    def test_clamped_below(self):
        assert calculate_progress(10, 50, 100) == 0.0

    def test_clamped_above(self):
        assert calculate_progress(500, 50, 100) == 100.0

    def test_monotonic_non_decreasing(self):
        values = [calculate_progress(c, 30, 60) for c in range(0, 100)]
        assert values == sorted(values)
        assert all(0.0 <= v <= 100.0 for v in values)

    def test_ignores_zero_floor(self):
        # min is honoured, not a percent-of-max ratio
        assert calculate_progress(50, 25000, 100000) == 0.0

    def test_degenerate_reached(self):
        assert calculate_progress(5, 5, 5) == 100.0

    def test_degenerate_above(self):
        assert calculate_progress(6, 5, 5) == 100.0

    def test_degenerate_below(self):
        assert calculate_progress(4, 5, 5) == 0.0

    def test_inverted_range_stays_clamped(self):
        result = calculate_progress(5, 10, 0)
        assert 0.0 <= result <= 100.0


class TestProgressColor:
    @pytest.mark.parametrize(
        "progress, color",
        [
            (0, "danger"),
            (24.9, "danger"),
            (25, "warning"),
            (49.9, "warning"),
            (50, "info"),
            (74.9, "info"),
            (75, "success"),
            (100, "success"),
        ],
    )
    def test_boundaries(self, progress, color):
        assert progress_color(progress) == color


class TestAverageProgress:
    def test_empty_values(self):
        assert average_progress(build_initial_data().daily) == 0

    def test_single_goal_halfway(self):
        data = build_initial_data()
        data.daily.emails_sent.current_value = 75  # 50% of 50..100
        assert average_progress(data.daily) == 10

    def test_all_complete(self):
        data = build_initial_data()
        for _, goal in data.monthly.items():
            goal.current_value = goal.target.max
        assert average_progress(data.monthly) == 100


class TestFormatting:
    def test_currency_grouped(self):
        assert format_currency(25000) == "$25,000"

    def test_currency_rounds_half_up(self):
        assert format_currency(1234.5) == "$1,235"

    def test_currency_negative(self):
        assert format_currency(-1234.5) == "-$1,235"

    def test_currency_zero(self):
        assert format_currency(0) == "$0"

    def test_number_integer(self):
        assert format_number(1234) == "1,234"

    def test_number_integral_float(self):
        assert format_number(1000000.0) == "1,000,000"

    def test_number_fraction(self):
        assert format_number(1234.5) == "1,234.5"

    def test_number_three_fraction_digits(self):
        assert format_number(0.12345) == "0.123"

    def test_display_value_currency_unit(self):
        data = build_initial_data()
        data.weekly.pipeline_generated.current_value = 45000
        assert display_value(data.weekly.pipeline_generated) == "$45,000"

    def test_display_value_plain_unit(self):
        data = build_initial_data()
        data.daily.emails_sent.current_value = 1200
        assert display_value(data.daily.emails_sent) == "1,200"


class TestDaysInMonth:
    def test_leap_february(self):
        assert days_in_month(2024, 2) == 29

    def test_february(self):
        assert days_in_month(2026, 2) == 28

    def test_december(self):
        assert days_in_month(2026, 12) == 31
