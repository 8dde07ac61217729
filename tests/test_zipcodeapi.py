"""Tests for the ZipCodeAPI client's requests and failure classification."""

from __future__ import annotations

import logging

import pytest
import requests
from _pytest.logging import LogCaptureFixture

from conftest import TEST_API_KEY, TEST_BASE_URL, FakeResponse, FakeZipCodeApi
from zipradius.radius.errors import (
    AuthError,
    ConfigurationError,
    InvalidZip,
    RateLimited,
    UpstreamError,
)
from zipradius.radius.models import Coordinates, RawResultEntry, SearchRequest

SEARCH = SearchRequest(center_code="21701", radius=10, units="mile")


def test_search_radius_builds_provider_url_and_parses_rows(
    fake_api: FakeZipCodeApi, client_factory
) -> None:
    """A successful call returns raw rows in provider order.

    Args:
        fake_api: Fake provider patched over :func:`requests.get`.
        client_factory: Builds clients bound to the fake base URL.

    Returns:
        None. Asserts the URL shape and the parsed entries.
    """

    fake_api.radius["21701/10/mile"] = FakeResponse(
        200,
        {
            "zip_codes": [
                {"zip_code": "21702", "distance": 2.1, "city": "Frederick", "state": "MD"},
                {"zip_code": 501, "distance": "0.4", "city": "Holtsville", "state": "NY"},
            ]
        },
    )

    entries = client_factory().search_radius(SEARCH)

    assert fake_api.calls == [
        f"{TEST_BASE_URL}/{TEST_API_KEY}/radius.json/21701/10/mile"
    ]
    assert fake_api.timeouts == [3.0]
    assert entries == [
        RawResultEntry(code="21702", distance=2.1, city="Frederick", state="MD"),
        RawResultEntry(code="501", distance=0.4, city="Holtsville", state="NY"),
    ]


@pytest.mark.parametrize(
    ("radius", "segment"),
    [
        (2.5, "2.5"),
        (10.0, "10"),
        (12.3456789, "12.3456789"),
        (1e-7, "0.0000001"),
        (200, "200"),
    ],
)
def test_search_radius_formats_radius_without_losing_digits(
    fake_api: FakeZipCodeApi, client_factory, radius: float, segment: str
) -> None:
    """Radii keep every decimal and never use exponent notation in the path."""

    fake_api.radius[f"21701/{segment}/km"] = FakeResponse(200, {"zip_codes": []})

    entries = client_factory().search_radius(
        SearchRequest(center_code="21701", radius=radius, units="km")
    )

    assert entries == []
    assert fake_api.calls == [
        f"{TEST_BASE_URL}/{TEST_API_KEY}/radius.json/21701/{segment}/km"
    ]


def test_missing_api_key_raises_configuration_error(
    fake_api: FakeZipCodeApi, client_factory
) -> None:
    """No request is attempted without a credential."""

    with pytest.raises(ConfigurationError):
        client_factory(api_key="  ").search_radius(SEARCH)

    assert fake_api.calls == []


@pytest.mark.parametrize("status", [401, 403])
def test_auth_failures_raise_auth_error(
    fake_api: FakeZipCodeApi, client_factory, status: int
) -> None:
    """401 and 403 mean the provider rejected the key."""

    fake_api.radius["21701/10/mile"] = FakeResponse(status, {"error_code": status})

    with pytest.raises(AuthError):
        client_factory().search_radius(SEARCH)


def test_rate_limit_raises_rate_limited(
    fake_api: FakeZipCodeApi, client_factory
) -> None:
    """429 is surfaced as :class:`RateLimited`, not retried."""

    fake_api.radius["21701/10/mile"] = FakeResponse(429, None, text="Too many")

    with pytest.raises(RateLimited):
        client_factory().search_radius(SEARCH)

    assert len(fake_api.calls) == 1


def test_structured_not_found_error_raises_invalid_zip(
    fake_api: FakeZipCodeApi, client_factory
) -> None:
    """A provider ``error_code`` of 404 marks the center ZIP as invalid."""

    fake_api.radius["21701/10/mile"] = FakeResponse(
        404, {"error_code": 404, "error_msg": 'Zip code "21701" not found.'}
    )

    with pytest.raises(InvalidZip):
        client_factory().search_radius(SEARCH)


def test_free_text_error_body_is_an_upstream_error(
    fake_api: FakeZipCodeApi, client_factory
) -> None:
    """Error text alone is not parsed for intent."""

    fake_api.radius["21701/10/mile"] = FakeResponse(
        400, None, text="invalid zip code"
    )

    with pytest.raises(UpstreamError):
        client_factory().search_radius(SEARCH)


def test_other_structured_errors_are_upstream_errors(
    fake_api: FakeZipCodeApi, client_factory
) -> None:
    """Provider errors without the invalid-ZIP code stay opaque."""

    fake_api.radius["21701/10/mile"] = FakeResponse(
        500, {"error_code": 500, "error_msg": "Internal error."}
    )

    with pytest.raises(UpstreamError):
        client_factory().search_radius(SEARCH)


def test_transport_failure_raises_upstream_error_without_leaking_key(
    fake_api: FakeZipCodeApi, client_factory, caplog: LogCaptureFixture
) -> None:
    """Connection errors become :class:`UpstreamError`; logs omit the key."""

    fake_api.radius["21701/10/mile"] = requests.ConnectionError(
        f"Max retries exceeded with url: /rest/{TEST_API_KEY}/radius.json"
    )

    with caplog.at_level(logging.WARNING, logger="zipradius.services.zipcodeapi"):
        with pytest.raises(UpstreamError) as excinfo:
            client_factory().search_radius(SEARCH)

    assert TEST_API_KEY not in str(excinfo.value)
    assert TEST_API_KEY not in caplog.text
    assert "<redacted>" in caplog.text


@pytest.mark.parametrize(
    "response",
    [
        FakeResponse(200, None, text="<html>"),
        FakeResponse(200, {"unexpected": []}),
        FakeResponse(200, {"zip_codes": [{"distance": 1.0}]}),
        FakeResponse(200, {"zip_codes": [{"zip_code": "21702", "distance": "far"}]}),
    ],
)
def test_malformed_success_bodies_raise_upstream_error(
    fake_api: FakeZipCodeApi, client_factory, response: FakeResponse
) -> None:
    """A 200 without the documented ``zip_codes`` list is an upstream failure."""

    fake_api.radius["21701/10/mile"] = response

    with pytest.raises(UpstreamError):
        client_factory().search_radius(SEARCH)


def test_lookup_coordinates_returns_lat_lng(
    fake_api: FakeZipCodeApi, client_factory
) -> None:
    """The info endpoint is queried in degrees."""

    fake_api.add_info("21701", 39.4444, -77.3851)

    coords = client_factory().lookup_coordinates("21701")

    assert coords == Coordinates(lat=39.4444, lng=-77.3851)
    assert fake_api.calls == [f"{TEST_BASE_URL}/{TEST_API_KEY}/info.json/21701/degrees"]


@pytest.mark.parametrize(
    "outcome",
    [
        FakeResponse(404, {"error_code": 404}),
        FakeResponse(429, None),
        FakeResponse(200, {"zip_code": "21701"}),
        FakeResponse(200, {"lat": None, "lng": -77.0}),
        FakeResponse(200, None, text="not json"),
        requests.Timeout("read timed out"),
    ],
)
def test_lookup_coordinates_failures_return_none(
    fake_api: FakeZipCodeApi, client_factory, outcome
) -> None:
    """Per-code lookup failures are absorbed as missing coordinates."""

    fake_api.info["21701"] = outcome

    assert client_factory().lookup_coordinates("21701") is None


def test_lookup_coordinates_without_key_returns_none(
    fake_api: FakeZipCodeApi, client_factory
) -> None:
    """A lookup never raises, even when the client has no credential."""

    assert client_factory(api_key="").lookup_coordinates("21701") is None
    assert fake_api.calls == []
