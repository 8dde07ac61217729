"""End-to-end radius search: validate, search, enrich, aggregate."""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, TypeVar

from zipradius.radius.aggregate import aggregate_results
from zipradius.radius.enrichment import DEFAULT_MAX_WORKERS, GeoEnricher
from zipradius.radius.errors import ConfigurationError
from zipradius.radius.models import SearchResult
from zipradius.radius.validation import validate_search_request
from zipradius.services.zipcodeapi import (
    DEFAULT_BASE_URL,
    DEFAULT_TIMEOUT_SECONDS,
    ZipCodeApiClient,
)

logger = logging.getLogger(__name__)

Number = TypeVar("Number", int, float)


class RadiusSearchService:
    """Run one radius search per call with no state carried between calls."""

    def __init__(
        self, client: ZipCodeApiClient, max_workers: int = DEFAULT_MAX_WORKERS
    ):
        self._client = client
        self._enricher = GeoEnricher(client, max_workers=max_workers)

    def search(self, payload: Mapping[str, Any]) -> SearchResult:
        """Validate ``payload`` and return the enriched radius result.

        Args:
            payload: Raw ``{zip, radius, units}`` mapping from the request
                body.

        Returns:
            SearchResult: Deduplicated, sorted, coordinate-enriched results.

        Raises:
            RadiusSearchError: Validation failures are raised before any
                network call; radius endpoint failures abort the search.
                Individual coordinate lookup failures never raise.
        """

        search = validate_search_request(payload)
        entries = self._client.search_radius(search)
        logger.info(
            "Radius search %s within %s %s returned %d rows",
            search.center_code,
            search.radius,
            search.units,
            len(entries),
        )
        enrichment = self._enricher.enrich(search.center_code, entries)
        return aggregate_results(
            search, entries, enrichment.by_code, enrichment.center
        )


def _positive_setting(
    config: Mapping[str, Any], key: str, default: Number, cast: Callable[[Any], Number]
) -> Number:
    raw_value = config.get(key)
    if raw_value is None or raw_value == "":
        return default
    try:
        value = cast(raw_value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{key} must be numeric, got {raw_value!r}") from None
    if isinstance(raw_value, bool) or not value > 0:
        raise ConfigurationError(f"{key} must be positive, got {raw_value!r}")
    return value


def build_search_service(config: Mapping[str, Any]) -> RadiusSearchService:
    """Create a :class:`RadiusSearchService` from Flask-style configuration.

    Args:
        config: Mapping providing ``ZIPCODEAPI_KEY`` and optionally
            ``ZIPCODEAPI_BASE_URL``, ``ZIPCODEAPI_TIMEOUT_SECONDS`` and
            ``GEOCODE_MAX_WORKERS``.

    Returns:
        A service whose client carries the credential explicitly.

    Raises:
        ConfigurationError: The timeout or worker count is set but is not a
            positive number.
    """

    client = ZipCodeApiClient(
        api_key=config.get("ZIPCODEAPI_KEY") or "",
        base_url=config.get("ZIPCODEAPI_BASE_URL") or DEFAULT_BASE_URL,
        timeout=_positive_setting(
            config, "ZIPCODEAPI_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS, float
        ),
    )
    max_workers = _positive_setting(
        config, "GEOCODE_MAX_WORKERS", DEFAULT_MAX_WORKERS, int
    )
    return RadiusSearchService(client, max_workers=max_workers)
