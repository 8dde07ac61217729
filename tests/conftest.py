from __future__ import annotations

import threading
import time
from typing import Any, Dict, List, Optional, Union

import pytest
from flask import Flask

from zipradius import create_app
from zipradius.services import zipcodeapi

TEST_API_KEY = "test-key-9f2c"
TEST_BASE_URL = "https://zipcodeapi.test/rest"


class FakeResponse:
    """Minimal stand-in for :class:`requests.Response` in provider tests."""

    def __init__(
        self,
        status_code: int = 200,
        payload: Any = None,
        text: Optional[str] = None,
    ) -> None:
        """Store the canned status and body.

        Args:
            status_code: HTTP status code to report.
            payload: JSON-decodable body returned by :meth:`json`. ``None``
                makes :meth:`json` raise :class:`ValueError`.
            text: Raw body text; defaults to ``str(payload)``.
        """

        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else str(payload)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


Outcome = Union[FakeResponse, Exception]


class FakeZipCodeApi:
    """Route fake ``requests.get`` calls to canned radius and info outcomes.

    ``radius`` maps the path after ``radius.json/`` (for example
    ``"21701/10/mile"``) to an outcome; ``info`` maps a five-digit ZIP to an
    outcome. Unknown info lookups answer 404. Exceptions are raised instead
    of returned.
    """

    def __init__(self) -> None:
        self.radius: Dict[str, Outcome] = {}
        self.info: Dict[str, Outcome] = {}
        self.calls: List[str] = []
        self.timeouts: List[Any] = []
        self._lock = threading.Lock()
        self._active = 0
        self.max_active = 0
        self.latency = 0.0

    def add_info(self, zip_code: str, lat: float, lng: float) -> None:
        self.info[zip_code] = FakeResponse(
            200,
            {"zip_code": zip_code, "lat": lat, "lng": lng, "city": "", "state": ""},
        )

    def get(self, url: str, timeout: Any = None, **kwargs: Any) -> FakeResponse:
        with self._lock:
            self.calls.append(url)
            self.timeouts.append(timeout)
            self._active += 1
            self.max_active = max(self.max_active, self._active)
        try:
            if self.latency:
                time.sleep(self.latency)
            return self._resolve(url)
        finally:
            with self._lock:
                self._active -= 1

    def _resolve(self, url: str) -> FakeResponse:
        prefix = f"{TEST_BASE_URL}/{TEST_API_KEY}/"
        assert url.startswith(prefix), url
        path = url[len(prefix):]
        if path.startswith("radius.json/"):
            outcome = self.radius.get(path[len("radius.json/"):])
            if outcome is None:
                outcome = FakeResponse(500, None, text="unexpected radius call")
        elif path.startswith("info.json/"):
            zip_code = path.split("/")[1]
            outcome = self.info.get(
                zip_code,
                FakeResponse(404, {"error_code": 404, "error_msg": "Zip not found."}),
            )
        else:
            raise AssertionError(f"Unexpected ZipCodeAPI path: {path}")
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def info_calls(self) -> List[str]:
        return [url for url in self.calls if "/info.json/" in url]


@pytest.fixture()
def fake_api(monkeypatch: pytest.MonkeyPatch) -> FakeZipCodeApi:
    """Patch :func:`requests.get` used by the ZipCodeAPI client.

    Args:
        monkeypatch: Pytest fixture used to stub ``requests.get``.

    Returns:
        The :class:`FakeZipCodeApi` that now answers every provider call.

    External dependencies:
        * Stubs :func:`requests.get` as seen by
          :mod:`zipradius.services.zipcodeapi`.
    """

    fake = FakeZipCodeApi()
    monkeypatch.setattr(zipcodeapi.requests, "get", fake.get)
    return fake


@pytest.fixture()
def client_factory():
    """Return a factory for clients pointed at the fake provider URL."""

    def _build(api_key: str = TEST_API_KEY, timeout: float = 3.0):
        return zipcodeapi.ZipCodeApiClient(
            api_key=api_key, base_url=TEST_BASE_URL, timeout=timeout
        )

    return _build


class RadiusTestConfig:
    """Configuration overrides for API route tests."""

    TESTING = True
    ZIPCODEAPI_KEY = TEST_API_KEY
    ZIPCODEAPI_BASE_URL = TEST_BASE_URL
    ZIPCODEAPI_TIMEOUT_SECONDS = 3.0
    GEOCODE_MAX_WORKERS = 4
    LOG_LEVEL = "DEBUG"
    RATELIMIT_ENABLED = False
    RATELIMIT_STORAGE_URI = "memory://"
    API_RADIUS_RATE_LIMIT = "30 per minute"
    CONFIG_ERRORS: List[str] = []


@pytest.fixture()
def app() -> Flask:
    """Create the Flask app configured for the fake provider.

    Returns:
        Flask application built by :func:`zipradius.create_app` with rate
        limiting disabled.
    """

    return create_app(RadiusTestConfig)
