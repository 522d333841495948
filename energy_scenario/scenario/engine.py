"""Scenario engine: project a baseline energy series onto added PV capacity.

Given a baseline (per-interval grid consumption and PV generation) and an
amount of additional PV capacity, the engine produces the "what-if" series the
site would have seen with the extra panels installed, plus three summary KPIs.

Model per interval ``i``
------------------------
1.  ``additional_pv_per_hour = added_pv_kw × H / 24`` (constant over the
    series), with ``H`` the peak-sun hours per day.
2.  New generation follows the existing irradiance shape: intervals with
    baseline PV receive ``additional_pv_per_hour × pv[i] / max(pv)`` on top of
    their baseline; intervals without baseline PV receive a fixed residual of
    ``additional_pv_per_hour × 0.1``.
3.  A share ``S`` of the incremental generation displaces grid consumption,
    capped at 80 % of the interval's baseline consumption.
4.  Consumption never drops below 20 % of its baseline value.

The shape-following spread and the 10 % night residual are empirical
heuristics, not an irradiance model.  The caps are fixed model constants
(see :mod:`energy_scenario.config.defaults`), not calculation options.

Unit conventions
----------------

========  ======  ===============================================
Quantity  Unit    Notes
========  ======  ===============================================
Energy    kWh     Per-interval consumption and PV generation
Power     kW      Added PV capacity
CO2       t       KPI ``co2_savings_ton``; factor given in kg/kWh
========  ======  ===============================================

Public API
----------
InvalidArgumentError - Raised for inputs outside the engine's domain.
TimeSeries           - Read-only consumption / PV generation pair.
CalculationOptions   - Peak-sun hours, self-consumption share, CO2 factor.
Kpis                 - Rounded summary indicators.
ScenarioResult       - Scenario series and KPIs from one calculation.
compute_scenario     - Run the calculation.
"""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass, fields
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Any, Mapping, Sequence, Union

import numpy as np

from energy_scenario.config.defaults import (
    CO2_KPI_DECIMALS,
    CONSUMPTION_KPI_DECIMALS,
    COVERAGE_KPI_DECIMALS,
    DEFAULT_CO2_EMISSION_FACTOR,
    DEFAULT_HOURS_PER_DAY,
    DEFAULT_SELF_CONSUMPTION_SHARE,
    HOURS_PER_DAY,
    KG_PER_TON,
    MAX_CONSUMPTION_REDUCTION_FRACTION,
    MIN_CONSUMPTION_FRACTION,
    NIGHT_GENERATION_FACTOR,
    PERCENT,
)

logger = logging.getLogger(__name__)


class InvalidArgumentError(ValueError):
    """Raised when an engine input lies outside its valid domain."""


# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------


def _as_series(values: Sequence[float] | np.ndarray, name: str) -> np.ndarray:
    """Return a read-only float64 copy of *values*, validated as kWh data."""
    try:
        arr = np.array(values, dtype=float)
    except (TypeError, ValueError) as exc:
        raise InvalidArgumentError(f"'{name}' must contain only numbers: {exc}") from exc

    if arr.ndim != 1:
        raise InvalidArgumentError(
            f"'{name}' must be one-dimensional, got shape {arr.shape}."
        )
    if not np.all(np.isfinite(arr)):
        first = int(np.argmin(np.isfinite(arr)))
        raise InvalidArgumentError(
            f"'{name}' contains a non-finite value at index {first}."
        )
    if np.any(arr < 0):
        first = int(np.argmax(arr < 0))
        raise InvalidArgumentError(
            f"'{name}' contains a negative value ({arr[first]}) at index {first}."
        )
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class TimeSeries:
    """Per-interval consumption and PV generation on a shared time axis.

    Both arrays are copied on construction and made read-only, so an instance
    can be handed to several consumers as an immutable snapshot.  The matching
    timestamps are owned by the caller.

    Attributes
    ----------
    consumption:
        Grid consumption per interval in kWh.
    pv_generation:
        PV generation per interval in kWh.

    Raises
    ------
    InvalidArgumentError
        When the arrays differ in length, are not one-dimensional, or contain
        negative or non-finite values.
    """

    consumption: np.ndarray
    pv_generation: np.ndarray

    def __post_init__(self) -> None:
        consumption = _as_series(self.consumption, "consumption")
        pv_generation = _as_series(self.pv_generation, "pv_generation")
        if len(consumption) != len(pv_generation):
            raise InvalidArgumentError(
                f"consumption has {len(consumption)} values but pv_generation "
                f"has {len(pv_generation)}; both series must share one time axis."
            )
        object.__setattr__(self, "consumption", consumption)
        object.__setattr__(self, "pv_generation", pv_generation)

    def __len__(self) -> int:
        return len(self.consumption)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TimeSeries):
            return NotImplemented
        return np.array_equal(self.consumption, other.consumption) and np.array_equal(
            self.pv_generation, other.pv_generation
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Sequence[float]]) -> TimeSeries:
        """Build a series from a ``{"consumption": [...], "pv_generation": [...]}`` dict."""
        try:
            return cls(
                consumption=data["consumption"],
                pv_generation=data["pv_generation"],
            )
        except KeyError as exc:
            raise InvalidArgumentError(f"Time series is missing key {exc}.") from exc

    def to_dict(self) -> dict[str, list[float]]:
        """Return plain-list representation (JSON friendly)."""
        return {
            "consumption": self.consumption.tolist(),
            "pv_generation": self.pv_generation.tolist(),
        }


Baseline = TimeSeries
Scenario = TimeSeries


@dataclass(frozen=True)
class CalculationOptions:
    """Scalar parameters of the scenario model.

    Attributes
    ----------
    hours_per_day:
        Peak-sun hours used to spread added capacity over the day (> 0).
    self_consumption_share:
        Fraction of incremental PV consumed on site, in [0, 1].
    co2_emission_factor:
        kg CO2 avoided per kWh of displaced grid consumption (> 0).
    """

    hours_per_day: float = DEFAULT_HOURS_PER_DAY
    self_consumption_share: float = DEFAULT_SELF_CONSUMPTION_SHARE
    co2_emission_factor: float = DEFAULT_CO2_EMISSION_FACTOR

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidArgumentError(
                    f"Option '{f.name}' must be a number, got {value!r}."
                )
            if not math.isfinite(value):
                raise InvalidArgumentError(f"Option '{f.name}' must be finite.")
            object.__setattr__(self, f.name, float(value))

        if self.hours_per_day <= 0:
            raise InvalidArgumentError(
                f"hours_per_day must be positive, got {self.hours_per_day}."
            )
        if not 0.0 <= self.self_consumption_share <= 1.0:
            raise InvalidArgumentError(
                "self_consumption_share must lie in [0, 1], "
                f"got {self.self_consumption_share}."
            )
        if self.co2_emission_factor <= 0:
            raise InvalidArgumentError(
                f"co2_emission_factor must be positive, got {self.co2_emission_factor}."
            )

    @classmethod
    def from_overrides(cls, overrides: Mapping[str, Any] | None = None) -> CalculationOptions:
        """Merge a partial mapping of options over the defaults.

        Raises
        ------
        InvalidArgumentError
            When *overrides* names an unknown option or holds an invalid value.
        """
        if not overrides:
            return cls()
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise InvalidArgumentError(
                f"Unknown calculation option(s): {unknown}. "
                f"Valid options are {sorted(known)}."
            )
        return cls(**overrides)

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


OptionsLike = Union[CalculationOptions, Mapping[str, Any], None]


@dataclass(frozen=True)
class Kpis:
    """Summary indicators of one scenario.

    Attributes
    ----------
    total_consumption_kwh:
        Sum of scenario consumption, rounded to 1 decimal.
    pv_coverage_pct:
        Scenario PV generation as a percentage of baseline consumption,
        rounded to 1 decimal.  ``0.0`` when baseline consumption is zero.
    co2_savings_ton:
        CO2 avoided by the consumption reduction in metric tons, rounded to
        3 decimals.
    """

    total_consumption_kwh: float
    pv_coverage_pct: float
    co2_savings_ton: float

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class ScenarioResult:
    """Scenario series and KPIs computed from the same inputs."""

    scenario: TimeSeries
    kpis: Kpis

    def to_dict(self) -> dict[str, dict]:
        return {"scenario": self.scenario.to_dict(), "kpis": self.kpis.to_dict()}


# ---------------------------------------------------------------------------
# Calculation
# ---------------------------------------------------------------------------


def round_half_away(value: float, decimals: int) -> float:
    """Round *value* to *decimals* places, ties away from zero.

    Uses the shortest decimal representation of the float, so ``2.675``
    rounds to ``2.68`` as written rather than to its binary neighbour.
    Works for any finite float; the working precision grows with the
    magnitude of *value*.
    """
    exact = Decimal(repr(float(value)))
    quantum = Decimal(1).scaleb(-decimals)
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, exact.adjusted() + decimals + 2)
        return float(exact.quantize(quantum, rounding=ROUND_HALF_UP))


def compute_scenario(
    baseline: TimeSeries,
    added_pv_kw: float,
    options: OptionsLike = None,
) -> ScenarioResult:
    """Compute the scenario series and KPIs for *added_pv_kw* of new PV.

    Parameters
    ----------
    baseline:
        Observed consumption and PV generation (kWh per interval).  Never
        modified.
    added_pv_kw:
        Additional PV capacity in kW.  ``0`` returns a scenario value-equal
        to the baseline with zero CO2 savings.
    options:
        :class:`CalculationOptions`, or a partial mapping of option names to
        values merged over the defaults, or ``None`` for all defaults.

    Returns
    -------
    ScenarioResult
        Freshly allocated scenario series (same length as *baseline*) and
        KPIs.

    Raises
    ------
    InvalidArgumentError
        When *added_pv_kw* is negative or not finite, when the options are
        invalid, or when the baseline series differ in length.  Also raised
        when the capacity or the baseline is so large that scenario values
        or totals overflow float64.
    """
    if added_pv_kw < 0:
        raise InvalidArgumentError("PV capacity cannot be negative")
    if not math.isfinite(added_pv_kw):
        raise InvalidArgumentError(f"PV capacity must be finite, got {added_pv_kw}.")

    if isinstance(options, CalculationOptions):
        opts = options
    else:
        opts = CalculationOptions.from_overrides(options)

    base_consumption = baseline.consumption
    base_pv = baseline.pv_generation
    if len(base_consumption) != len(base_pv):
        raise InvalidArgumentError(
            f"Baseline series lengths differ: {len(base_consumption)} "
            f"consumption vs {len(base_pv)} pv_generation values."
        )

    additional_pv_per_hour = added_pv_kw * (opts.hours_per_day / HOURS_PER_DAY)

    if added_pv_kw == 0:
        new_pv = base_pv.copy()
    else:
        max_base_pv = float(base_pv.max()) if len(base_pv) else 0.0
        if max_base_pv > 0:
            scale = base_pv / max_base_pv
        else:
            scale = np.zeros_like(base_pv)
        with np.errstate(over="ignore"):
            new_pv = np.where(
                base_pv > 0,
                base_pv + additional_pv_per_hour * scale,
                additional_pv_per_hour * NIGHT_GENERATION_FACTOR,
            )
        if not np.all(np.isfinite(new_pv)):
            raise InvalidArgumentError(
                f"PV capacity {added_pv_kw:g} kW is too large: scenario PV "
                "generation exceeds the float64 range."
            )

    additional_pv = new_pv - base_pv
    reduction = np.minimum(
        additional_pv * opts.self_consumption_share,
        base_consumption * MAX_CONSUMPTION_REDUCTION_FRACTION,
    )
    new_consumption = np.maximum(
        base_consumption - reduction,
        base_consumption * MIN_CONSUMPTION_FRACTION,
    )

    scenario = TimeSeries(consumption=new_consumption, pv_generation=new_pv)
    kpis = _compute_kpis(baseline, scenario, opts.co2_emission_factor)

    logger.debug(
        "Scenario for +%.2f kW over %d intervals: %.1f kWh, %.1f %% PV coverage, %.3f t CO2",
        added_pv_kw,
        len(scenario),
        kpis.total_consumption_kwh,
        kpis.pv_coverage_pct,
        kpis.co2_savings_ton,
    )
    return ScenarioResult(scenario=scenario, kpis=kpis)


def _compute_kpis(baseline: TimeSeries, scenario: TimeSeries, co2_factor: float) -> Kpis:
    """Aggregate totals over the full series and round them for display."""
    with np.errstate(over="ignore"):
        total_baseline = float(np.sum(baseline.consumption))
        total_scenario = float(np.sum(scenario.consumption))
        total_pv = float(np.sum(scenario.pv_generation))

    consumption_savings = total_baseline - total_scenario
    coverage_pct = total_pv / total_baseline * PERCENT if total_baseline > 0 else 0.0
    co2_savings_ton = consumption_savings * co2_factor / KG_PER_TON

    if not all(map(math.isfinite, (total_scenario, coverage_pct, co2_savings_ton))):
        raise InvalidArgumentError(
            "Scenario totals exceed the float64 range; reduce the PV capacity "
            "or the baseline magnitude."
        )

    return Kpis(
        total_consumption_kwh=round_half_away(total_scenario, CONSUMPTION_KPI_DECIMALS),
        pv_coverage_pct=round_half_away(coverage_pct, COVERAGE_KPI_DECIMALS),
        co2_savings_ton=round_half_away(co2_savings_ton, CO2_KPI_DECIMALS),
    )
