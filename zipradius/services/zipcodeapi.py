"""ZipCodeAPI REST client used by the radius search pipeline.

The client wraps two provider endpoints:

* ``radius.json`` returns every ZIP code within a distance of a center ZIP.
* ``info.json`` returns coordinates, city, and state for a single ZIP.

The API key is part of the request path, so every URL is redacted before it
is written to a log line.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, List, Optional

import requests
from requests import Response
from requests.exceptions import RequestException

from zipradius.radius.errors import (
    AuthError,
    ConfigurationError,
    InvalidZip,
    RadiusSearchError,
    RateLimited,
    UpstreamError,
)
from zipradius.radius.models import Coordinates, RawResultEntry, SearchRequest

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://www.zipcodeapi.com/rest"
DEFAULT_TIMEOUT_SECONDS = 10.0

# ZipCodeAPI reports unknown or malformed ZIP codes with this error_code.
_INVALID_ZIP_ERROR_CODES = frozenset({404})
_REDACTED = "<redacted>"


def _parse_error_code(response: Response) -> Optional[int]:
    """Return the provider ``error_code`` from an error body, if present.

    Args:
        response: Non-success response from ZipCodeAPI.

    Returns:
        The integer ``error_code`` field of a JSON body such as
        ``{"error_code": 404, "error_msg": "..."}``, otherwise ``None``.
    """

    try:
        payload = response.json()
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    error_code = payload.get("error_code")
    if isinstance(error_code, bool):
        return None
    try:
        return int(error_code)
    except (TypeError, ValueError):
        return None


def _format_radius(radius: float) -> str:
    # 10.0 -> "10", 12.3456789 -> "12.3456789", 1e-07 -> "0.0000001"
    text = format(Decimal(repr(radius)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


class ZipCodeApiClient:
    """Client for the ZipCodeAPI radius and info endpoints.

    The credential is supplied at construction; the client reads no process
    configuration. Instances hold no per-request state and can be shared by
    the lookup worker threads of a single search.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self._api_key = (api_key or "").strip()
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    def search_radius(self, search: SearchRequest) -> List[RawResultEntry]:
        """Return the raw radius results for a validated search.

        Args:
            search: Validated center ZIP, radius, and units.

        Returns:
            List of :class:`RawResultEntry` in the order the provider sent
            them. Codes are not normalized yet.

        Raises:
            ConfigurationError: No API key configured.
            AuthError: Provider answered 401 or 403.
            RateLimited: Provider answered 429.
            InvalidZip: Provider reported the center ZIP as unknown.
            UpstreamError: Any other failure, including transport errors and
                malformed success bodies.

        External dependencies:
            * Calls :func:`requests.get` once. No retries.
        """

        path = (
            f"radius.json/{search.center_code}/"
            f"{_format_radius(search.radius)}/{search.units}"
        )
        response = self._get(path)
        self._raise_for_status(response, path)

        try:
            payload = response.json()
        except ValueError as exc:
            logger.warning(
                "ZipCodeAPI radius response was not JSON for %s", self._redact(path)
            )
            raise UpstreamError("Radius response was not JSON") from exc
        return self._parse_radius_payload(payload, path)

    def _raise_for_status(self, response: Response, path: str) -> None:
        status = response.status_code
        if 200 <= status < 300:
            return

        logger.warning(
            "ZipCodeAPI returned status %s for %s", status, self._redact(path)
        )
        if status in (401, 403):
            raise AuthError(f"ZipCodeAPI rejected the API key (status {status})")
        if status == 429:
            raise RateLimited("ZipCodeAPI rate limit reached")
        if _parse_error_code(response) in _INVALID_ZIP_ERROR_CODES:
            raise InvalidZip(f"ZipCodeAPI reported an invalid ZIP (status {status})")
        raise UpstreamError(f"ZipCodeAPI returned status {status}")

    def _parse_radius_payload(self, payload: Any, path: str) -> List[RawResultEntry]:
        rows = payload.get("zip_codes") if isinstance(payload, dict) else None
        if not isinstance(rows, list):
            logger.warning(
                "ZipCodeAPI radius response is missing zip_codes for %s",
                self._redact(path),
            )
            raise UpstreamError("Radius response is missing zip_codes")

        entries: List[RawResultEntry] = []
        for row in rows:
            try:
                entries.append(
                    RawResultEntry(
                        code=str(row["zip_code"]).strip(),
                        distance=float(row.get("distance") or 0.0),
                        city=str(row.get("city") or ""),
                        state=str(row.get("state") or ""),
                    )
                )
            except (AttributeError, KeyError, TypeError, ValueError) as exc:
                raise UpstreamError(f"Malformed radius row: {exc}") from exc
        return entries

    def lookup_coordinates(self, zip_code: str) -> Optional[Coordinates]:
        """Return coordinates for ``zip_code`` or ``None`` when unavailable.

        A failed lookup is data, not an error: transport failures, non-2xx
        responses, and bodies without numeric ``lat``/``lng`` all yield
        ``None`` and a warning log line.

        External dependencies:
            * Calls :func:`requests.get` against ``info.json``.
        """

        path = f"info.json/{zip_code}/degrees"
        try:
            response = self._get(path)
        except RadiusSearchError:
            return None

        if not 200 <= response.status_code < 300:
            logger.warning(
                "ZipCodeAPI info lookup returned status %s for %s",
                response.status_code,
                self._redact(path),
            )
            return None

        try:
            payload = response.json()
            return Coordinates(lat=float(payload["lat"]), lng=float(payload["lng"]))
        except (ValueError, KeyError, TypeError) as exc:
            logger.warning(
                "ZipCodeAPI info lookup for %s had no usable coordinates: %s",
                zip_code,
                exc,
            )
            return None

    def _get(self, path: str) -> Response:
        if not self._api_key:
            raise ConfigurationError("ZIPCODEAPI_KEY missing")
        url = f"{self._base_url}/{self._api_key}/{path}"
        try:
            return requests.get(url, timeout=self._timeout)
        except RequestException as exc:
            logger.warning(
                "ZipCodeAPI request failed for %s: %s",
                self._redact(path),
                type(exc).__name__,
            )
            raise UpstreamError(
                f"ZipCodeAPI request failed: {type(exc).__name__}"
            ) from exc

    def _redact(self, path: str) -> str:
        return f"{self._base_url}/{_REDACTED}/{path}"
