"""Chart rows pairing each timestamp with baseline and scenario values.

Public API
----------
ChartDataPoint       – One row of the baseline-vs-scenario chart.
build_chart_points   – Join timestamps, baseline and scenario per index.
chart_frame          – The same rows as a DataFrame indexed by UTC time.
format_tick          – Axis tick label (``"14:00"``).
format_tooltip_label – Tooltip heading (``"Sep 8 14:00"``).
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Sequence

import pandas as pd

from energy_scenario.scenario.engine import TimeSeries


@dataclass(frozen=True)
class ChartDataPoint:
    """Values plotted for one interval (kWh)."""

    timestamp: str
    baseline_consumption: float
    baseline_pv: float
    scenario_consumption: float
    scenario_pv: float


def build_chart_points(
    timestamps: Sequence[str],
    baseline: TimeSeries,
    scenario: TimeSeries,
) -> list[ChartDataPoint]:
    """Join *timestamps*, *baseline* and *scenario* index by index.

    Raises
    ------
    ValueError
        When the three inputs do not have the same length.
    """
    n = len(timestamps)
    if len(baseline) != n or len(scenario) != n:
        raise ValueError(
            f"Cannot build chart rows: {n} timestamps, {len(baseline)} baseline "
            f"and {len(scenario)} scenario intervals."
        )
    return [
        ChartDataPoint(
            timestamp=timestamps[i],
            baseline_consumption=float(baseline.consumption[i]),
            baseline_pv=float(baseline.pv_generation[i]),
            scenario_consumption=float(scenario.consumption[i]),
            scenario_pv=float(scenario.pv_generation[i]),
        )
        for i in range(n)
    ]


def chart_frame(
    timestamps: Sequence[str],
    baseline: TimeSeries,
    scenario: TimeSeries,
) -> pd.DataFrame:
    """Return chart rows as a DataFrame with a UTC ``DatetimeIndex``."""
    points = build_chart_points(timestamps, baseline, scenario)
    columns = [
        "baseline_consumption",
        "baseline_pv",
        "scenario_consumption",
        "scenario_pv",
    ]
    df = pd.DataFrame([asdict(p) for p in points], columns=["timestamp", *columns])
    df.index = pd.DatetimeIndex(pd.to_datetime(df.pop("timestamp"), utc=True), name="timestamp")
    return df.astype(float)


def format_tick(timestamp: str) -> str:
    """Return the 24-hour ``HH:MM`` label of *timestamp*."""
    return pd.Timestamp(timestamp).strftime("%H:%M")


def format_tooltip_label(timestamp: str) -> str:
    """Return ``"<Mon> <day> HH:MM"`` for *timestamp*, e.g. ``"Sep 8 14:00"``."""
    ts = pd.Timestamp(timestamp)
    return f"{ts.strftime('%b')} {ts.day} {ts.strftime('%H:%M')}"
