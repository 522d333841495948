"""Number formatting helpers for KPI cards and stdout tables.

All functions return strings suitable for printing to the terminal. None
values are represented as an empty string.

Public API
----------
fmt_float     – Format a float with configurable decimal places.
fmt_thousands – Format a number with thousands separators.
fmt_signed    – Format a number with an explicit sign.
kpi_cards     – Title / value / unit triples for the three KPI cards.
"""

from __future__ import annotations

from energy_scenario.config.defaults import FLOAT_PRECISION
from energy_scenario.scenario.engine import Kpis


def fmt_float(
    value: float | None,
    precision: int = FLOAT_PRECISION,
) -> str:
    """Format a float to a fixed number of decimal places.

    Parameters
    ----------
    value:
        The value to format. None is returned as an empty string.
    precision:
        Number of decimal places.

    Returns
    -------
    str
        Formatted string, e.g. ``"3.1"``.
    """
    if value is None:
        return ""
    return f"{value:.{precision}f}"


def fmt_thousands(value: float | None) -> str:
    """Format *value* with comma thousands separators, trimming trailing zeros.

    ``3265.2`` → ``"3,265.2"``, ``1033.0`` → ``"1,033"``.
    """
    if value is None:
        return ""
    text = f"{value:,.3f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def fmt_signed(value: float | None, precision: int = FLOAT_PRECISION) -> str:
    """Format *value* with a leading ``+`` for non-negative numbers."""
    if value is None:
        return ""
    return f"{value:+.{precision}f}"


def kpi_cards(kpis: Kpis) -> list[tuple[str, str, str]]:
    """Return ``(title, value, unit)`` for each KPI card, in display order."""
    return [
        ("Total Consumption", fmt_thousands(kpis.total_consumption_kwh), "kWh"),
        ("PV Coverage", fmt_thousands(kpis.pv_coverage_pct), "%"),
        ("CO₂ Savings", fmt_thousands(kpis.co2_savings_ton), "t"),
    ]
