"""Failure taxonomy for radius searches and its mapping to HTTP responses.

Every request-level failure raised by the pipeline is a
:class:`RadiusSearchError` subclass carrying an :class:`ErrorKind`.
:func:`classify_error` turns any exception into the status code and message
returned to the caller. Messages come from this module only, so provider
credentials and raw upstream bodies never reach a response.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict


class ErrorKind(str, Enum):
    INVALID_ZIP = "invalid_zip"
    INVALID_RADIUS = "invalid_radius"
    RADIUS_TOO_LARGE = "radius_too_large"
    INVALID_UNITS = "invalid_units"
    CONFIGURATION = "configuration_error"
    AUTH = "auth_error"
    RATE_LIMITED = "rate_limited"
    UPSTREAM = "upstream_error"


INVALID_ZIP_MESSAGE = "Enter a valid 5-digit ZIP code."
INVALID_RADIUS_MESSAGE = "Enter a radius greater than 0."
INVALID_UNITS_MESSAGE = "Units must be 'mile' or 'km'."
RATE_LIMITED_MESSAGE = "ZIP service rate limit reached. Try again later."
MISCONFIGURED_MESSAGE = (
    "ZIP service is not configured correctly. Contact the site administrator."
)
UPSTREAM_MESSAGE = "Couldn't fetch ZIP codes. Try again."

_STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.INVALID_ZIP: 400,
    ErrorKind.INVALID_RADIUS: 400,
    ErrorKind.RADIUS_TOO_LARGE: 400,
    ErrorKind.INVALID_UNITS: 400,
    ErrorKind.RATE_LIMITED: 429,
    ErrorKind.AUTH: 500,
    ErrorKind.CONFIGURATION: 500,
    ErrorKind.UPSTREAM: 500,
}

_UNIT_LABELS = {"mile": "miles", "km": "km"}


class RadiusSearchError(Exception):
    """Base exception for request-level radius search failures.

    The exception text is for logs only; callers see :attr:`user_message`.
    """

    kind: ErrorKind = ErrorKind.UPSTREAM
    default_message: str = UPSTREAM_MESSAGE

    @property
    def user_message(self) -> str:
        return self.default_message


class InvalidZip(RadiusSearchError):
    kind = ErrorKind.INVALID_ZIP
    default_message = INVALID_ZIP_MESSAGE


class InvalidRadius(RadiusSearchError):
    kind = ErrorKind.INVALID_RADIUS
    default_message = INVALID_RADIUS_MESSAGE


class RadiusTooLarge(RadiusSearchError):
    """Radius exceeds the tool's own ceiling, independent of provider limits."""

    kind = ErrorKind.RADIUS_TOO_LARGE

    def __init__(self, radius: float, max_radius: float, units: str = "mile"):
        self.radius = radius
        self.max_radius = max_radius
        self.units = units
        super().__init__(f"Radius {radius} exceeds maximum {max_radius}")

    @property
    def user_message(self) -> str:
        label = _UNIT_LABELS.get(self.units, "miles")
        return f"Radius too large for this tool (max: {self.max_radius:g} {label})."


class InvalidUnits(RadiusSearchError):
    kind = ErrorKind.INVALID_UNITS
    default_message = INVALID_UNITS_MESSAGE


class ConfigurationError(RadiusSearchError):
    """The service has no usable provider credential."""

    kind = ErrorKind.CONFIGURATION
    default_message = MISCONFIGURED_MESSAGE


class AuthError(RadiusSearchError):
    """The provider rejected the configured credential."""

    kind = ErrorKind.AUTH
    default_message = MISCONFIGURED_MESSAGE


class RateLimited(RadiusSearchError):
    kind = ErrorKind.RATE_LIMITED
    default_message = RATE_LIMITED_MESSAGE


class UpstreamError(RadiusSearchError):
    kind = ErrorKind.UPSTREAM
    default_message = UPSTREAM_MESSAGE


@dataclass(frozen=True)
class ErrorClassification:
    kind: ErrorKind
    status_code: int
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"error": self.message}


def classify_error(exc: BaseException) -> ErrorClassification:
    """Return the boundary status and message for a pipeline failure.

    Args:
        exc: Exception raised while serving a radius search.

    Returns:
        :class:`ErrorClassification` for the exception's kind. Exceptions
        outside the :class:`RadiusSearchError` hierarchy are reported as an
        opaque upstream failure.
    """

    if isinstance(exc, RadiusSearchError):
        kind = exc.kind
        message = exc.user_message
    else:
        kind = ErrorKind.UPSTREAM
        message = UPSTREAM_MESSAGE
    return ErrorClassification(
        kind=kind, status_code=_STATUS_BY_KIND[kind], message=message
    )
