"""JSON schema definitions and validation for options files and API payloads.

Two documents are validated here:

* a calculation-options file (any subset of the three model options), and
* the energy API response (timestamps, baseline series and optionally the
  server's reference scenario and KPIs).

Validation uses the ``jsonschema`` library (Draft 7).

Usage::

    from energy_scenario.config.schema import validate_options
    validate_options(data)   # raises jsonschema.ValidationError on failure
"""

from __future__ import annotations

import jsonschema

# ---------------------------------------------------------------------------
# Re-usable sub-schemas
# ---------------------------------------------------------------------------

_NON_NEGATIVE_NUMBER = {"type": "number", "minimum": 0}

_SERIES = {"type": "array", "items": _NON_NEGATIVE_NUMBER}

_TIME_SERIES = {
    "type": "object",
    "required": ["consumption", "pv_generation"],
    "properties": {
        "consumption": _SERIES,
        "pv_generation": _SERIES,
    },
}

_KPIS = {
    "type": "object",
    "required": ["total_consumption_kwh", "pv_coverage_pct", "co2_savings_ton"],
    "properties": {
        "total_consumption_kwh": {"type": "number"},
        "pv_coverage_pct": {"type": "number"},
        "co2_savings_ton": {"type": "number"},
    },
}

# ---------------------------------------------------------------------------
# Top-level schemas
# ---------------------------------------------------------------------------

OPTIONS_SCHEMA: dict = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "Scenario Calculation Options",
    "type": "object",
    "properties": {
        "hours_per_day": {"type": "number", "exclusiveMinimum": 0},
        "self_consumption_share": {"type": "number", "minimum": 0, "maximum": 1},
        "co2_emission_factor": {"type": "number", "exclusiveMinimum": 0},
    },
    "additionalProperties": False,
}

ENERGY_RESPONSE_SCHEMA: dict = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "Energy API Response",
    "type": "object",
    "required": ["timestamps", "baseline"],
    "properties": {
        "timestamps": {"type": "array", "items": {"type": "string", "minLength": 1}},
        "baseline": _TIME_SERIES,
        "scenario": _TIME_SERIES,
        "kpis": _KPIS,
    },
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def validate_options(data: dict) -> None:
    """Validate a calculation-options dictionary.

    Raises
    ------
    jsonschema.ValidationError
        When *data* names an unknown option or a value is out of range.
    """
    _validate(data, OPTIONS_SCHEMA, "Options")


def validate_energy_response(data: dict) -> None:
    """Validate an energy API response dictionary.

    Raises
    ------
    jsonschema.ValidationError
        When *data* does not conform to the response schema.
    ValueError
        When the timestamp and series arrays differ in length.
    """
    _validate(data, ENERGY_RESPONSE_SCHEMA, "Energy response")
    _validate_series_lengths(data)


def get_schema(name: str) -> dict:
    """Return a copy of the schema called ``"options"`` or ``"energy_response"``."""
    schemas = {"options": OPTIONS_SCHEMA, "energy_response": ENERGY_RESPONSE_SCHEMA}
    if name not in schemas:
        raise KeyError(f"Unknown schema '{name}'. Available: {sorted(schemas)}")
    return schemas[name].copy()


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _validate(data: dict, schema: dict, label: str) -> None:
    """Raise the most specific schema violation with its JSON path."""
    validator = jsonschema.Draft7Validator(schema)
    errors = sorted(
        validator.iter_errors(data), key=lambda e: [str(p) for p in e.absolute_path]
    )

    if errors:
        first = errors[0]
        path_str = " → ".join(str(p) for p in first.absolute_path) or "(root)"
        raise jsonschema.ValidationError(
            f"{label} validation failed at '{path_str}': {first.message}",
            path=first.absolute_path,
            schema_path=first.absolute_schema_path,
            validator=first.validator,
            validator_value=first.validator_value,
            instance=first.instance,
            schema=first.schema,
            cause=first.cause,
        )


def _validate_series_lengths(data: dict) -> None:
    """Check that timestamps and every series array have the same length."""
    expected = len(data["timestamps"])
    for block in ("baseline", "scenario"):
        series = data.get(block)
        if series is None:
            continue
        for key in ("consumption", "pv_generation"):
            n = len(series[key])
            if n != expected:
                raise ValueError(
                    f"Energy response '{block}.{key}' has {n} values but "
                    f"there are {expected} timestamps."
                )
