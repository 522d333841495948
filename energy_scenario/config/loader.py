"""Load and validate calculation options and baseline energy data.

Public API
----------
load_options(path)          – Parse + validate a calculation-options JSON file.
load_options_dict(data)     – Validate an already-parsed options dictionary.
energy_data_from_dict(data) – Validate + wrap an energy API payload.
load_baseline_csv(path)     – Load a baseline series from a local CSV file.

All error messages name the specific field or row that caused the problem so
the user can fix the JSON or CSV without guessing.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import pandas as pd

from energy_scenario.config.defaults import CSV_DELIMITER
from energy_scenario.config.schema import validate_energy_response, validate_options
from energy_scenario.scenario.engine import CalculationOptions, Kpis, TimeSeries

logger = logging.getLogger(__name__)

_TIMESTAMP_COLUMN = "timestamp"
_SERIES_COLUMNS = ("consumption", "pv_generation")
_ISO_UTC_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


# ---------------------------------------------------------------------------
# Typed result containers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EnergyData:
    """Baseline energy data together with its time axis.

    Attributes
    ----------
    timestamps:
        ISO 8601 timestamp per interval, same length as the baseline.
    baseline:
        Observed consumption and PV generation.
    scenario:
        Reference scenario delivered by the server, if any.  The dashboard
        recomputes its own scenario and uses this only for comparison.
    kpis:
        KPIs delivered alongside the reference scenario, if any.
    source:
        Where the data came from: ``"api"``, ``"fallback"`` or ``"csv"``.
    """

    timestamps: tuple[str, ...]
    baseline: TimeSeries
    scenario: TimeSeries | None = None
    kpis: Kpis | None = None
    source: str = "api"

    def __len__(self) -> int:
        return len(self.timestamps)


# ---------------------------------------------------------------------------
# Calculation options
# ---------------------------------------------------------------------------


def load_options(path: str | Path) -> CalculationOptions:
    """Load and validate a calculation-options JSON file.

    The file may contain any subset of ``hours_per_day``,
    ``self_consumption_share`` and ``co2_emission_factor``; missing options
    take their defaults.

    Raises
    ------
    FileNotFoundError
        When *path* does not exist.
    json.JSONDecodeError
        When the file contains invalid JSON.
    jsonschema.ValidationError
        When an option is unknown or out of range.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(
            f"Options file not found: '{path}'. "
            "Check that the path is correct and the file exists."
        )

    logger.debug("Loading calculation options from '%s'", path)

    try:
        with path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
    except json.JSONDecodeError as exc:
        raise json.JSONDecodeError(
            f"Invalid JSON in options file '{path}': {exc.msg}",
            exc.doc,
            exc.pos,
        ) from exc

    options = load_options_dict(data)
    logger.info("Loaded calculation options from '%s': %s", path, options.to_dict())
    return options


def load_options_dict(data: dict[str, Any]) -> CalculationOptions:
    """Validate a parsed options dictionary and merge it over the defaults."""
    validate_options(data)
    return CalculationOptions.from_overrides(data)


# ---------------------------------------------------------------------------
# Energy data
# ---------------------------------------------------------------------------


def energy_data_from_dict(data: dict[str, Any], source: str = "api") -> EnergyData:
    """Validate an energy API payload and convert it to :class:`EnergyData`.

    Raises
    ------
    jsonschema.ValidationError
        When *data* does not conform to the response schema.
    ValueError
        When the timestamps and series differ in length, or a timestamp is
        not ISO 8601.
    """
    validate_energy_response(data)
    _check_timestamps(data["timestamps"])

    scenario = data.get("scenario")
    kpis = data.get("kpis")
    return EnergyData(
        timestamps=tuple(data["timestamps"]),
        baseline=TimeSeries.from_dict(data["baseline"]),
        scenario=TimeSeries.from_dict(scenario) if scenario is not None else None,
        kpis=_kpis_from_dict(kpis) if kpis is not None else None,
        source=source,
    )


def _check_timestamps(timestamps: list[str]) -> None:
    """Raise ValueError naming the first timestamp that is not ISO 8601."""
    for i, ts in enumerate(timestamps):
        try:
            pd.to_datetime(ts, utc=True, format="ISO8601")
        except (ValueError, TypeError) as exc:
            raise ValueError(
                f"Energy response timestamp {ts!r} at index {i} is not ISO 8601: {exc}"
            ) from exc


def _kpis_from_dict(data: dict[str, Any]) -> Kpis:
    """Build :class:`Kpis` from its declared fields; other keys are ignored."""
    return Kpis(**{f.name: float(data[f.name]) for f in fields(Kpis)})


def load_baseline_csv(path: str | Path) -> EnergyData:
    """Load a baseline series from a CSV file.

    The CSV must contain a ``timestamp`` column (ISO 8601, interpreted as UTC
    when no offset is given) plus ``consumption`` and ``pv_generation``
    columns in kWh per interval.

    Raises
    ------
    FileNotFoundError
        When *path* does not exist.
    ValueError
        When a column is missing, a value is NaN or negative, or a timestamp
        cannot be parsed.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Baseline CSV file not found: '{path}'.")

    logger.debug("Loading baseline CSV from '%s'", path)

    try:
        df = pd.read_csv(path, sep=CSV_DELIMITER)
    except Exception as exc:
        raise ValueError(f"Failed to parse baseline CSV '{path}': {exc}") from exc

    required = [_TIMESTAMP_COLUMN, *_SERIES_COLUMNS]
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise ValueError(
            f"Baseline CSV '{path}' is missing required column(s): {missing}. "
            f"Available columns: {sorted(df.columns)}."
        )

    for col in required:
        if df[col].isna().any():
            first_idx = int(df[col].isna().idxmax())
            raise ValueError(
                f"Baseline CSV '{path}' has a missing '{col}' value at row {first_idx}."
            )

    try:
        parsed = pd.to_datetime(df[_TIMESTAMP_COLUMN], utc=True)
    except (ValueError, TypeError) as exc:
        raise ValueError(
            f"Baseline CSV '{path}' contains an unparseable timestamp: {exc}"
        ) from exc

    try:
        baseline = TimeSeries(
            consumption=df["consumption"].to_numpy(dtype=float),
            pv_generation=df["pv_generation"].to_numpy(dtype=float),
        )
    except ValueError as exc:
        raise ValueError(f"Baseline CSV '{path}': {exc}") from exc

    data = EnergyData(
        timestamps=tuple(parsed.dt.strftime(_ISO_UTC_FORMAT)),
        baseline=baseline,
        source="csv",
    )
    logger.info("Loaded baseline CSV '%s': %d intervals", path, len(data))
    return data
