"""Input validation and ZIP normalization for radius searches."""

from __future__ import annotations

import math
import re
from numbers import Real
from typing import Any, Mapping

from zipradius.radius.errors import (
    InvalidRadius,
    InvalidUnits,
    InvalidZip,
    RadiusTooLarge,
)
from zipradius.radius.models import SearchRequest

MAX_RADIUS = 200
DEFAULT_UNITS = "mile"
SUPPORTED_UNITS = frozenset({"mile", "km"})

_ZIP_RE = re.compile(r"^\d{5}$", re.ASCII)


def normalize_zip_code(raw: Any) -> str:
    """Return ``raw`` as a five-character ZIP, restoring dropped leading zeros.

    Args:
        raw: ZIP value from the provider, which may be an integer or a string
            such as ``"501"``.

    Returns:
        The value left-padded with zeros to five characters, e.g. ``"00501"``.
    """

    return str(raw).strip().zfill(5)


def _validate_zip(raw_zip: Any) -> str:
    if not isinstance(raw_zip, str):
        raise InvalidZip(f"ZIP must be a string, got {type(raw_zip).__name__}")
    clean_zip = raw_zip.strip()
    if not _ZIP_RE.match(clean_zip):
        raise InvalidZip(f"ZIP {clean_zip!r} is not five digits")
    return clean_zip


def _validate_radius(raw_radius: Any) -> Any:
    # bool is a Real subclass but never a radius
    if isinstance(raw_radius, bool) or not isinstance(raw_radius, Real):
        raise InvalidRadius(f"Radius must be numeric, got {type(raw_radius).__name__}")
    # ints are exact and may exceed float range; only floats can be nan/inf
    if isinstance(raw_radius, float) and not math.isfinite(raw_radius):
        raise InvalidRadius(f"Radius {raw_radius!r} is not a finite number")
    if raw_radius <= 0:
        raise InvalidRadius(f"Radius {raw_radius!r} is not a positive number")
    return raw_radius


def _validate_units(raw_units: Any) -> str:
    if raw_units is None:
        return DEFAULT_UNITS
    if not isinstance(raw_units, str):
        raise InvalidUnits(f"Units must be a string, got {type(raw_units).__name__}")
    if raw_units.strip().lower() not in SUPPORTED_UNITS:
        raise InvalidUnits(f"Unsupported units {raw_units!r}")
    return raw_units.strip().lower()


def validate_search_request(payload: Mapping[str, Any]) -> SearchRequest:
    """Validate raw ``{zip, radius, units}`` input into a :class:`SearchRequest`.

    Args:
        payload: Decoded JSON body. Keys may be missing and values may have
            any type.

    Returns:
        SearchRequest: Trimmed five-digit ZIP, the radius as supplied, and
        the normalized units (``"mile"`` when omitted).

    Raises:
        InvalidZip: ZIP missing, not a string, or not exactly five digits
            after trimming.
        InvalidRadius: Radius missing, non-numeric, non-finite, or ``<= 0``.
        RadiusTooLarge: Radius above :data:`MAX_RADIUS`.
        InvalidUnits: Units present but not ``"mile"`` or ``"km"``.
    """

    center_code = _validate_zip(payload.get("zip"))
    radius = _validate_radius(payload.get("radius"))
    raw_units = payload.get("units")
    if radius > MAX_RADIUS:
        units_label = DEFAULT_UNITS
        if isinstance(raw_units, str):
            units_label = raw_units.strip().lower()
        raise RadiusTooLarge(radius, MAX_RADIUS, units_label)
    units = _validate_units(raw_units)
    return SearchRequest(center_code=center_code, radius=radius, units=units)
