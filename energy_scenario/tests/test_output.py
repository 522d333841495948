"""Unit tests for energy_scenario.output (chart rows and formatting).

Covers:
- build_chart_points: per-index join, length mismatch
- chart_frame: UTC DatetimeIndex, float columns
- format_tick / format_tooltip_label
- fmt_float / fmt_thousands / fmt_signed, including None
- kpi_cards: titles, units and formatted values in display order
"""

from __future__ import annotations

import pandas as pd
import pytest

from energy_scenario.output.chart import (
    ChartDataPoint,
    build_chart_points,
    chart_frame,
    format_tick,
    format_tooltip_label,
)
from energy_scenario.output.formatting import fmt_float, fmt_signed, fmt_thousands, kpi_cards
from energy_scenario.scenario.engine import Kpis, TimeSeries

_TIMESTAMPS = ["2025-09-08T13:00:00Z", "2025-09-08T14:00:00Z"]


@pytest.fixture
def baseline() -> TimeSeries:
    return TimeSeries(consumption=[160.0, 155.0], pv_generation=[20.0, 10.0])


@pytest.fixture
def scenario() -> TimeSeries:
    return TimeSeries(consumption=[159.2, 154.6], pv_generation=[21.3, 10.7])


# ---------------------------------------------------------------------------
# Chart rows
# ---------------------------------------------------------------------------


class TestBuildChartPoints:
    def test_rows_joined_by_index(self, baseline, scenario):
        points = build_chart_points(_TIMESTAMPS, baseline, scenario)
        assert points == [
            ChartDataPoint("2025-09-08T13:00:00Z", 160.0, 20.0, 159.2, 21.3),
            ChartDataPoint("2025-09-08T14:00:00Z", 155.0, 10.0, 154.6, 10.7),
        ]

    def test_values_are_python_floats(self, baseline, scenario):
        point = build_chart_points(_TIMESTAMPS, baseline, scenario)[0]
        assert type(point.scenario_pv) is float

    def test_empty(self):
        empty = TimeSeries(consumption=[], pv_generation=[])
        assert build_chart_points([], empty, empty) == []

    def test_length_mismatch(self, baseline, scenario):
        with pytest.raises(ValueError, match="1 timestamps"):
            build_chart_points(_TIMESTAMPS[:1], baseline, scenario)


class TestChartFrame:
    def test_index_and_columns(self, baseline, scenario):
        df = chart_frame(_TIMESTAMPS, baseline, scenario)
        assert isinstance(df.index, pd.DatetimeIndex)
        assert str(df.index.tz) == "UTC"
        assert df.index.name == "timestamp"
        assert list(df.columns) == [
            "baseline_consumption",
            "baseline_pv",
            "scenario_consumption",
            "scenario_pv",
        ]
        assert df.loc[pd.Timestamp("2025-09-08T14:00:00Z"), "scenario_consumption"] == 154.6

    def test_all_float(self, baseline, scenario):
        df = chart_frame(_TIMESTAMPS, baseline, scenario)
        assert all(dtype == float for dtype in df.dtypes)


class TestLabels:
    def test_tick(self):
        assert format_tick("2025-09-08T14:00:00Z") == "14:00"

    def test_tooltip(self):
        assert format_tooltip_label("2025-09-08T14:00:00Z") == "Sep 8 14:00"

    def test_tooltip_two_digit_day(self):
        assert format_tooltip_label("2025-12-24T07:30:00Z") == "Dec 24 07:30"


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


class TestFormatting:
    def test_fmt_float(self):
        assert fmt_float(3.14159) == "3.1"
        assert fmt_float(3.14159, precision=3) == "3.142"
        assert fmt_float(None) == ""

    @pytest.mark.parametrize(
        "value, expected",
        [
            (3265.2, "3,265.2"),
            (1033.0, "1,033"),
            (1029.7, "1,029.7"),
            (7.8, "7.8"),
            (0.001, "0.001"),
            (0.42, "0.42"),
            (0.0, "0"),
            (None, ""),
        ],
    )
    def test_fmt_thousands(self, value, expected):
        assert fmt_thousands(value) == expected

    def test_fmt_signed(self):
        assert fmt_signed(2.5) == "+2.5"
        assert fmt_signed(-1.25, precision=2) == "-1.25"
        assert fmt_signed(0) == "+0.0"
        assert fmt_signed(None) == ""

    def test_kpi_cards(self):
        cards = kpi_cards(Kpis(3265.2, 31.4, 0.42))
        assert cards == [
            ("Total Consumption", "3,265.2", "kWh"),
            ("PV Coverage", "31.4", "%"),
            ("CO₂ Savings", "0.42", "t"),
        ]
