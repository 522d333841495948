"""Energy API client – fetch baseline energy data for a date range.

Calls the dashboard backend's ``GET /api/energy?start=YYYY-MM-DD&end=YYYY-MM-DD``
endpoint and converts the payload into :class:`~energy_scenario.config.loader.EnergyData`.

Key behaviour
-------------
- Retries up to :data:`~energy_scenario.config.defaults.ENERGY_API_RETRY_MAX`
  times with exponential backoff on HTTP 429 / 5xx, timeouts and connection
  errors.  Other 4xx responses fail immediately.
- A successful response whose body is not JSON (typically an HTML page served
  because the mock backend is not running) is replaced by the built-in
  fallback dataset, with a warning.
- With ``fallback_on_error=True`` every other failure also falls back instead
  of raising :class:`EnergyApiError`.

Typical usage::

    from energy_scenario.data.energy_client import EnergyApiClient, default_date_range
    client = EnergyApiClient()
    start, end = default_date_range()
    data = client.get_energy_data(start, end)
"""

from __future__ import annotations

import logging
import time
from datetime import date, datetime, timedelta
from typing import Any

import jsonschema
import requests

from energy_scenario.config.defaults import (
    DATE_FORMAT,
    DEFAULT_DATE_RANGE_DAYS,
    ENERGY_API_BASE_URL,
    ENERGY_API_ENDPOINT,
    ENERGY_API_REQUEST_TIMEOUT_S,
    ENERGY_API_RETRY_BACKOFF_FACTOR,
    ENERGY_API_RETRY_MAX,
    RAW_RESPONSE_LOG_CHARS,
)
from energy_scenario.config.loader import EnergyData, energy_data_from_dict
from energy_scenario.data.fallback import fallback_response

logger = logging.getLogger(__name__)

# HTTP status codes that warrant a retry (rate-limit and server errors)
_RETRYABLE_STATUS_CODES: frozenset[int] = frozenset({429, 500, 502, 503, 504})


class EnergyApiError(RuntimeError):
    """Raised when energy data cannot be obtained from the API."""


def default_date_range(
    today: date | None = None,
    days: int = DEFAULT_DATE_RANGE_DAYS,
) -> tuple[str, str]:
    """Return ``(start, end)`` ISO dates covering the last *days* days up to *today*."""
    end = today or date.today()
    start = end - timedelta(days=days)
    return start.strftime(DATE_FORMAT), end.strftime(DATE_FORMAT)


class EnergyApiClient:
    """Thin client for the ``/api/energy`` endpoint.

    Parameters
    ----------
    base_url:
        Backend base URL.
    timeout:
        HTTP request timeout in seconds.
    max_retries:
        Maximum number of attempts on transient errors.
    backoff_factor:
        Initial wait time (seconds) for exponential backoff.
        Actual wait on attempt *k* = ``backoff_factor × 2^(k-1)``.
    fallback_on_error:
        Serve the built-in fallback dataset instead of raising
        :class:`EnergyApiError`.
    """

    def __init__(
        self,
        base_url: str = ENERGY_API_BASE_URL,
        timeout: int = ENERGY_API_REQUEST_TIMEOUT_S,
        max_retries: int = ENERGY_API_RETRY_MAX,
        backoff_factor: float = ENERGY_API_RETRY_BACKOFF_FACTOR,
        fallback_on_error: bool = False,
    ) -> None:
        self._base_url = base_url.rstrip("/") + "/"
        self._timeout = timeout
        self._max_retries = max_retries
        self._backoff_factor = backoff_factor
        self._fallback_on_error = fallback_on_error

    @property
    def url(self) -> str:
        return self._base_url + ENERGY_API_ENDPOINT

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get_energy_data(self, start: str, end: str) -> EnergyData:
        """Fetch baseline energy data between *start* and *end*.

        Parameters
        ----------
        start:
            First day, ``YYYY-MM-DD``.
        end:
            Last day, ``YYYY-MM-DD``; must not precede *start*.

        Returns
        -------
        EnergyData
            Validated data; ``source`` is ``"fallback"`` when the built-in
            dataset was served.

        Raises
        ------
        ValueError
            When the dates are malformed or out of order (never retried,
            never replaced by the fallback).
        EnergyApiError
            When the request fails and ``fallback_on_error`` is off.
        """
        params = _build_params(start, end)
        logger.debug("Requesting energy data from %s (start=%s, end=%s)", self.url, start, end)

        try:
            resp = self._fetch(params)
            raw = self._decode(resp)
            if raw is None:
                logger.warning("Energy API did not return JSON, using fallback data")
                return _fallback_data()
            data = self._parse_response(raw)
        except EnergyApiError as exc:
            if not self._fallback_on_error:
                logger.error("Energy data request failed: %s", exc)
                raise
            logger.warning("Energy data request failed (%s), using fallback data", exc)
            return _fallback_data()

        logger.info(
            "Energy data received: %d intervals from %s to %s",
            len(data),
            data.timestamps[0] if len(data) else "-",
            data.timestamps[-1] if len(data) else "-",
        )
        return data

    # ------------------------------------------------------------------
    # HTTP with retry/backoff
    # ------------------------------------------------------------------

    def _fetch(self, params: dict[str, Any]) -> requests.Response:
        """Execute the HTTP GET with exponential backoff retry."""
        last_exc: Exception | None = None

        for attempt in range(1, self._max_retries + 1):
            wait = self._backoff_factor * (2 ** (attempt - 1))
            try:
                logger.debug(
                    "Energy API request attempt %d/%d: %s",
                    attempt,
                    self._max_retries,
                    self.url,
                )
                resp = requests.get(self.url, params=params, timeout=self._timeout)

                if resp.status_code == 200:
                    return resp

                if resp.status_code in _RETRYABLE_STATUS_CODES:
                    logger.warning(
                        "Energy API HTTP %d on attempt %d/%d – retrying in %.1fs",
                        resp.status_code,
                        attempt,
                        self._max_retries,
                        wait,
                    )
                    time.sleep(wait)
                    last_exc = EnergyApiError(
                        f"HTTP {resp.status_code} from energy API "
                        f"after {attempt} attempt(s)"
                    )
                    continue

                raise EnergyApiError(
                    f"Failed to fetch energy data (HTTP {resp.status_code}): "
                    f"{resp.reason or resp.text[:RAW_RESPONSE_LOG_CHARS]}"
                )

            except requests.Timeout as exc:
                logger.warning(
                    "Energy API timeout on attempt %d/%d – retrying in %.1fs",
                    attempt,
                    self._max_retries,
                    wait,
                )
                time.sleep(wait)
                last_exc = exc

            except requests.ConnectionError as exc:
                logger.warning(
                    "Energy API connection error on attempt %d/%d – retrying in %.1fs: %s",
                    attempt,
                    self._max_retries,
                    wait,
                    exc,
                )
                time.sleep(wait)
                last_exc = exc

        raise EnergyApiError(
            f"Energy API request failed after {self._max_retries} attempt(s)."
        ) from last_exc

    # ------------------------------------------------------------------
    # Response parsing
    # ------------------------------------------------------------------

    @staticmethod
    def _decode(resp: requests.Response) -> dict | None:
        """Return the JSON body of *resp*, or ``None`` when it is not JSON."""
        body = resp.text
        logger.debug(
            "Raw energy API response (HTTP %d): %s%s",
            resp.status_code,
            body[:RAW_RESPONSE_LOG_CHARS],
            "..." if len(body) > RAW_RESPONSE_LOG_CHARS else "",
        )
        try:
            return resp.json()
        except ValueError:
            return None

    @staticmethod
    def _parse_response(raw: Any) -> EnergyData:
        """Validate the decoded payload and convert it to :class:`EnergyData`."""
        if not isinstance(raw, dict):
            raise EnergyApiError(
                f"Unexpected energy response: expected a JSON object, got {type(raw).__name__}."
            )
        try:
            return energy_data_from_dict(raw, source="api")
        except (jsonschema.ValidationError, ValueError) as exc:
            raise EnergyApiError(f"Malformed energy response: {exc}") from exc


# ---------------------------------------------------------------------------
# Module-level utilities
# ---------------------------------------------------------------------------


def _build_params(start: str, end: str) -> dict[str, str]:
    """Return the query parameters after checking the date range."""
    parsed = {}
    for name, value in (("start", start), ("end", end)):
        try:
            parsed[name] = datetime.strptime(value, DATE_FORMAT).date()
        except (TypeError, ValueError) as exc:
            raise ValueError(
                f"Invalid {name} date {value!r}: expected format YYYY-MM-DD."
            ) from exc
    if parsed["start"] > parsed["end"]:
        raise ValueError(f"start date {start} is after end date {end}.")
    return {"start": start, "end": end}


def _fallback_data() -> EnergyData:
    return energy_data_from_dict(fallback_response(), source="fallback")
