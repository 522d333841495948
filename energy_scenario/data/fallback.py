"""Built-in one-day energy dataset served when the API returns no usable JSON.

Hourly values for 2025-09-08 (UTC).  The ``scenario`` and ``kpis`` blocks are
the reference values the backend ships with this day; they are kept verbatim
so the payload has the same shape as a live response.
"""

from __future__ import annotations

import copy

_FALLBACK_RESPONSE: dict = {
    "timestamps": [f"2025-09-08T{h:02d}:00:00Z" for h in range(24)],
    "baseline": {
        "consumption": [
            120.5, 118.3, 115.2, 113.4, 112.0, 111.0, 112.8, 116.4,
            125.0, 140.5, 155.2, 160.8, 165.4, 162.1, 158.3, 152.7,
            148.2, 145.5, 142.8, 138.4, 135.1, 130.8, 127.2, 123.5,
        ],
        "pv_generation": [
            0, 0, 0, 0, 0, 0, 0, 0,
            5.2, 15.8, 25.4, 32.1, 35.8, 33.2, 28.7, 22.4,
            14.6, 8.1, 2.3, 0, 0, 0, 0, 0,
        ],
    },
    "scenario": {
        "consumption": [
            120.5, 118.3, 115.2, 113.4, 112.0, 111.0, 112.8, 116.4,
            125.0, 140.5, 155.2, 160.8, 165.4, 162.1, 158.3, 152.7,
            148.2, 145.5, 142.8, 138.4, 135.1, 130.8, 127.2, 123.5,
        ],
        "pv_generation": [
            0, 0, 0, 0, 0, 0, 0, 0,
            10.4, 31.6, 50.8, 64.2, 71.6, 66.4, 57.4, 44.8,
            29.2, 16.2, 4.6, 0, 0, 0, 0, 0,
        ],
    },
    "kpis": {
        "total_consumption_kwh": 3265.2,
        "pv_coverage_pct": 31.4,
        "co2_savings_ton": 0.42,
    },
}


def fallback_response() -> dict:
    """Return a fresh copy of the fallback payload (safe to mutate)."""
    return copy.deepcopy(_FALLBACK_RESPONSE)
