"""Global default values and constants.

All numeric constants used throughout the energy_scenario package must be
defined here rather than as inline literals. Import from this module wherever
a constant is needed to ensure a single source of truth and full traceability.
"""

# ---------------------------------------------------------------------------
# Time constants
# ---------------------------------------------------------------------------

HOURS_PER_DAY: int = 24
"""Hours over which added PV capacity is spread each day."""

DEFAULT_DATE_RANGE_DAYS: int = 7
"""Length of the default data window (today minus seven days up to today)."""

DATE_FORMAT: str = "%Y-%m-%d"
"""Date format of the ``start`` / ``end`` query parameters."""

# ---------------------------------------------------------------------------
# Calculation option defaults
# ---------------------------------------------------------------------------

DEFAULT_HOURS_PER_DAY: float = 4.0
"""Default peak-sun hours per day used to spread added PV capacity."""

DEFAULT_SELF_CONSUMPTION_SHARE: float = 0.6
"""Default fraction of incremental PV generation consumed on site."""

DEFAULT_CO2_EMISSION_FACTOR: float = 0.4
"""Default grid emission factor in kg CO2 per kWh displaced."""

# ---------------------------------------------------------------------------
# Fixed scenario model constants
# ---------------------------------------------------------------------------

MAX_CONSUMPTION_REDUCTION_FRACTION: float = 0.8
"""Upper bound on the share of an interval's consumption PV may displace."""

MIN_CONSUMPTION_FRACTION: float = 0.2
"""Residual load floor as a fraction of the baseline interval consumption."""

NIGHT_GENERATION_FACTOR: float = 0.1
"""Share of the hourly added PV assigned to intervals without baseline PV."""

KG_PER_TON: float = 1000.0
"""Conversion factor from kg to metric tons (divide kg by this)."""

PERCENT: float = 100.0
"""Multiplier from a fraction to a percentage."""

# ---------------------------------------------------------------------------
# KPI rounding
# ---------------------------------------------------------------------------

CONSUMPTION_KPI_DECIMALS: int = 1
"""Decimal places of ``total_consumption_kwh``."""

COVERAGE_KPI_DECIMALS: int = 1
"""Decimal places of ``pv_coverage_pct``."""

CO2_KPI_DECIMALS: int = 3
"""Decimal places of ``co2_savings_ton`` (keeps small savings visible)."""

# ---------------------------------------------------------------------------
# PV capacity input
# ---------------------------------------------------------------------------

DEFAULT_ADDED_PV_KW: float = 10.0
"""Added PV capacity used when the caller does not choose one."""

MIN_ADDED_PV_KW: float = 0.0
"""Lower bound of the PV capacity accepted by the command line."""

MAX_ADDED_PV_KW: float = 100.0
"""Upper bound of the PV capacity accepted by the command line."""

# ---------------------------------------------------------------------------
# Energy API
# ---------------------------------------------------------------------------

ENERGY_API_BASE_URL: str = "http://localhost:5173/"
"""Base URL of the dashboard backend serving energy data."""

ENERGY_API_ENDPOINT: str = "api/energy"
"""Endpoint returning timestamps, baseline and reference scenario."""

ENERGY_API_REQUEST_TIMEOUT_S: int = 30
"""HTTP request timeout in seconds for energy API calls."""

ENERGY_API_RETRY_MAX: int = 2
"""Maximum number of HTTP attempts for one energy API call."""

ENERGY_API_RETRY_BACKOFF_FACTOR: float = 1.0
"""Exponential backoff factor (seconds) between energy API retries."""

RAW_RESPONSE_LOG_CHARS: int = 200
"""Number of response body characters echoed into DEBUG logs."""

# ---------------------------------------------------------------------------
# Input / output
# ---------------------------------------------------------------------------

CSV_DELIMITER: str = ","
"""Delimiter used in baseline CSV files."""

FLOAT_PRECISION: int = 1
"""Decimal places for per-interval kWh values in printed tables."""

LOG_BUFFER_MAX_ENTRIES: int = 100
"""Number of log records kept by the in-memory log buffer."""
