"""Shared pytest fixtures for the energy_scenario test suite.

All fixtures provide synthetic, deterministic data so tests run without a
backend.  Numerical reference values document expected results for the
eight-interval baseline used throughout.

Reference baseline (8 intervals)
--------------------------------
consumption   = [120, 118, 115, 113, 112, 140, 160, 155]   Σ = 1033 kWh
pv_generation = [  0,   0,   0,   5,  15,  25,  20,  10]   Σ =   75 kWh

Reference scenario at +10 kW with default options (H=4, S=0.6, F=0.4)
  additional PV per hour = 10 × 4 / 24            = 1.6667 kWh
  night intervals (0–2): +0.16667 kWh PV          → consumption −0.1 kWh each
  day intervals  (3–7): scale = pv / 25 = [0.2, 0.6, 1.0, 0.8, 0.4]
                        +PV = [0.333, 1.0, 1.667, 1.333, 0.667] kWh
                        consumption −0.6 × +PV = [0.2, 0.6, 1.0, 0.8, 0.4]
  Σ consumption = 1033 − 3.3 = 1029.7 kWh
  Σ PV          = 75 + 0.5 + 5.0 = 80.5 kWh  → coverage 80.5 / 1033 = 7.793 % → 7.8
  CO2           = 3.3 × 0.4 / 1000 = 0.00132 t → 0.001
"""

from __future__ import annotations

import pytest

from energy_scenario.data.fallback import fallback_response
from energy_scenario.scenario.engine import TimeSeries

_REFERENCE_CONSUMPTION = [120.0, 118.0, 115.0, 113.0, 112.0, 140.0, 160.0, 155.0]
_REFERENCE_PV = [0.0, 0.0, 0.0, 5.0, 15.0, 25.0, 20.0, 10.0]


# ---------------------------------------------------------------------------
# Baseline fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def reference_baseline() -> TimeSeries:
    """Eight-interval baseline with a small midday PV hump."""
    return TimeSeries(consumption=_REFERENCE_CONSUMPTION, pv_generation=_REFERENCE_PV)


@pytest.fixture
def empty_baseline() -> TimeSeries:
    return TimeSeries(consumption=[], pv_generation=[])


@pytest.fixture
def no_pv_baseline() -> TimeSeries:
    """Baseline of a site without any existing PV."""
    return TimeSeries(consumption=[50.0, 60.0, 70.0, 80.0], pv_generation=[0.0] * 4)


@pytest.fixture
def zero_consumption_baseline() -> TimeSeries:
    """Baseline with PV but no recorded consumption."""
    return TimeSeries(consumption=[0.0, 0.0, 0.0], pv_generation=[0.0, 4.0, 2.0])


# ---------------------------------------------------------------------------
# API payload fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def energy_payload() -> dict:
    """A valid 24-interval energy API response."""
    return fallback_response()


@pytest.fixture
def small_energy_payload() -> dict:
    """A valid three-interval response without scenario / KPI blocks."""
    return {
        "timestamps": [
            "2025-01-01T10:00:00Z",
            "2025-01-01T11:00:00Z",
            "2025-01-01T12:00:00Z",
        ],
        "baseline": {
            "consumption": [100.0, 110.0, 120.0],
            "pv_generation": [10.0, 20.0, 0.0],
        },
    }
