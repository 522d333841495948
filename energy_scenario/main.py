"""CLI entrypoint: compute a PV scenario for a baseline and print its KPIs.

Execution flow
--------------
1.  Load & validate calculation options (defaults when no file is given).
2.  Obtain the baseline: local CSV, or the energy API (with fallback data).
3.  Compute the scenario for the requested added PV capacity.
4.  Print KPI summary (and optionally the per-interval table or JSON).

Usage
-----
    python -m energy_scenario.main --pv-kw 25
    python -m energy_scenario.main --baseline-csv baseline.csv --options opts.json
    python -m energy_scenario.main --start 2025-01-01 --end 2025-01-07 --chart
    python -m energy_scenario.main --pv-kw 10 --json
    python -m energy_scenario.main --options opts.json --dry-run -v
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from energy_scenario.config.defaults import (
    DEFAULT_ADDED_PV_KW,
    ENERGY_API_BASE_URL,
    MAX_ADDED_PV_KW,
    MIN_ADDED_PV_KW,
)
from energy_scenario.config.loader import EnergyData, load_baseline_csv, load_options
from energy_scenario.data.energy_client import EnergyApiClient, default_date_range
from energy_scenario.diagnostics.log_buffer import LogBuffer, install, uninstall
from energy_scenario.output.chart import build_chart_points, format_tooltip_label
from energy_scenario.output.formatting import fmt_float, fmt_signed, kpi_cards
from energy_scenario.scenario.engine import (
    CalculationOptions,
    ScenarioResult,
    compute_scenario,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# CLI argument parsing
# ---------------------------------------------------------------------------


def _pv_capacity(text: str) -> float:
    """argparse type for the added PV capacity."""
    try:
        value = float(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"not a number: {text!r}") from exc
    if not MIN_ADDED_PV_KW <= value <= MAX_ADDED_PV_KW:
        raise argparse.ArgumentTypeError(
            f"must lie between {MIN_ADDED_PV_KW:g} and {MAX_ADDED_PV_KW:g} kW, got {value:g}"
        )
    return value


def _build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    p = argparse.ArgumentParser(
        prog="python -m energy_scenario.main",
        description="Energy dashboard scenario calculator",
    )
    p.add_argument(
        "--pv-kw",
        type=_pv_capacity,
        default=DEFAULT_ADDED_PV_KW,
        metavar="KW",
        help=f"Added PV capacity in kW (default {DEFAULT_ADDED_PV_KW:g}).",
    )
    p.add_argument(
        "--options",
        metavar="PATH",
        default=None,
        help="Calculation options JSON file (missing options take defaults).",
    )
    p.add_argument(
        "--baseline-csv",
        metavar="PATH",
        default=None,
        help="Read the baseline from a local CSV instead of the energy API.",
    )
    p.add_argument(
        "--api-url",
        metavar="URL",
        default=ENERGY_API_BASE_URL,
        help="Energy API base URL.",
    )
    p.add_argument("--start", metavar="YYYY-MM-DD", default=None, help="First day (default: 7 days ago).")
    p.add_argument("--end", metavar="YYYY-MM-DD", default=None, help="Last day (default: today).")
    p.add_argument(
        "--fallback-on-error",
        action="store_true",
        default=False,
        help="Use the built-in dataset when the energy API cannot be reached.",
    )
    p.add_argument(
        "--chart",
        action="store_true",
        default=False,
        help="Print the per-interval baseline vs. scenario table.",
    )
    p.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Print the scenario and KPIs as JSON instead of the summary.",
    )
    p.add_argument(
        "--show-log",
        action="store_true",
        default=False,
        help="Print warnings and errors captured during the run.",
    )
    p.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Enable DEBUG logging.",
    )
    p.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="Validate options and inputs, then exit without fetching or computing.",
    )
    return p


# ---------------------------------------------------------------------------
# Main orchestration
# ---------------------------------------------------------------------------


def run(args: argparse.Namespace) -> int:
    """Execute one scenario calculation.

    Parameters
    ----------
    args:
        Parsed CLI arguments.

    Returns
    -------
    int
        Exit code (0 = success, 1 = error).
    """
    # ------------------------------------------------------------------
    # Step 1: Calculation options
    # ------------------------------------------------------------------
    try:
        options = load_options(args.options) if args.options else CalculationOptions()
    except Exception as exc:
        logger.error("Failed to load calculation options: %s", exc)
        return 1

    if args.dry_run:
        print(f"Dry run: options {options.to_dict()} validated successfully.")
        return 0

    # ------------------------------------------------------------------
    # Step 2: Baseline
    # ------------------------------------------------------------------
    try:
        data = _load_energy_data(args)
    except Exception as exc:
        logger.error("Failed to load baseline data: %s", exc)
        return 1

    # ------------------------------------------------------------------
    # Step 3: Scenario
    # ------------------------------------------------------------------
    try:
        result = compute_scenario(data.baseline, args.pv_kw, options)
    except ValueError as exc:
        logger.error("Scenario calculation failed: %s", exc)
        return 1

    # ------------------------------------------------------------------
    # Step 4: Output
    # ------------------------------------------------------------------
    if args.json:
        payload = {
            "timestamps": list(data.timestamps),
            "added_pv_kw": args.pv_kw,
            "options": options.to_dict(),
            "baseline": data.baseline.to_dict(),
            **result.to_dict(),
        }
        print(json.dumps(payload, indent=2))
    else:
        _print_summary(data, args.pv_kw, options, result)
        if args.chart:
            _print_chart(data, result)

    return 0


def _load_energy_data(args: argparse.Namespace) -> EnergyData:
    """Return the baseline from the CSV file or the energy API."""
    if args.baseline_csv:
        return load_baseline_csv(args.baseline_csv)

    default_start, default_end = default_date_range()
    start = args.start or default_start
    end = args.end or default_end
    client = EnergyApiClient(base_url=args.api_url, fallback_on_error=args.fallback_on_error)
    logger.info("Fetching energy data %s … %s from %s", start, end, client.url)
    return client.get_energy_data(start, end)


def _print_summary(
    data: EnergyData,
    pv_kw: float,
    options: CalculationOptions,
    result: ScenarioResult,
) -> None:
    """Print a concise result summary to stdout."""
    print()
    print("=" * 60)
    print(f"  Scenario: {fmt_signed(pv_kw)} kW PV over {len(data)} intervals ({data.source})")
    print("=" * 60)
    print(f"  Peak-sun hours:        {options.hours_per_day:g} h/day")
    print(f"  Self-consumption:      {options.self_consumption_share * 100:.0f} %")
    print(f"  CO2 factor:            {options.co2_emission_factor:g} kg/kWh")
    print()
    for title, value, unit in kpi_cards(result.kpis):
        print(f"  {title + ':':<22} {value} {unit}")
    print("=" * 60)
    print()


def _print_chart(data: EnergyData, result: ScenarioResult) -> None:
    """Print one line per interval: baseline and scenario consumption / PV."""
    print(f"  {'Time':<14}{'Base cons':>11}{'Scen cons':>11}{'Base PV':>10}{'Scen PV':>10}")
    for point in build_chart_points(data.timestamps, data.baseline, result.scenario):
        print(
            f"  {format_tooltip_label(point.timestamp):<14}"
            f"{fmt_float(point.baseline_consumption):>11}"
            f"{fmt_float(point.scenario_consumption):>11}"
            f"{fmt_float(point.baseline_pv):>10}"
            f"{fmt_float(point.scenario_pv):>10}"
        )
    print()


def _print_log(buffer: LogBuffer) -> None:
    entries = buffer.entries()
    print(f"Captured log entries: {len(entries)}")
    for entry in entries:
        print(f"  {entry.timestamp:%H:%M:%S} [{entry.level.upper()}] {entry.context}: {entry.message}")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and run the scenario."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    # Configure logging
    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    buffer = install()
    try:
        code = run(args)
        if args.show_log:
            _print_log(buffer)
    finally:
        uninstall(buffer)
    sys.exit(code)


if __name__ == "__main__":
    main()
