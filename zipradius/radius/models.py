"""Typed value objects passed between the radius search pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union

Number = Union[int, float]


@dataclass(frozen=True)
class SearchRequest:
    """Validated radius search input.

    Only :func:`zipradius.radius.validation.validate_search_request` should
    build instances; ``center_code`` is always five digits.
    """

    center_code: str
    radius: Number
    units: str = "mile"


@dataclass(frozen=True)
class RawResultEntry:
    """One row of the upstream radius response before normalization."""

    code: str
    distance: float
    city: str
    state: str


@dataclass(frozen=True)
class Coordinates:
    """Latitude/longitude pair returned by a single-code info lookup."""

    lat: float
    lng: float

    def to_dict(self) -> Dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}


@dataclass(frozen=True)
class ZipRecord:
    """Final enriched radius result.

    ``lat``/``lng`` of ``0.0`` mark a failed lookup, not a measured point.
    """

    code: str
    city: str
    state: str
    distance: float
    lat: float = 0.0
    lng: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the field names the map front end consumes."""
        return {
            "zip_code": self.code,
            "city": self.city,
            "state": self.state,
            "distance": self.distance,
            "lat": self.lat,
            "lng": self.lng,
        }


@dataclass(frozen=True)
class SearchSummary:
    count: int
    center_code: str
    radius: Number
    units: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "count": self.count,
            "centerZip": self.center_code,
            "radius": self.radius,
            "units": self.units,
        }


@dataclass(frozen=True)
class SearchResult:
    """Aggregated response for one radius search.

    ``codes`` is sorted lexicographically for copy/export while ``records``
    is sorted by distance; both describe the same set of ZIP codes.
    """

    codes: Tuple[str, ...]
    records: Tuple[ZipRecord, ...]
    center_coordinates: Optional[Coordinates]
    summary: SearchSummary

    def to_dict(self) -> Dict[str, Any]:
        """Return the JSON payload served by ``POST /api/radius``."""
        payload: Dict[str, Any] = {
            "zipCodes": list(self.codes),
            "zipDetails": [record.to_dict() for record in self.records],
            "centerCoords": (
                self.center_coordinates.to_dict()
                if self.center_coordinates is not None
                else None
            ),
            "meta": self.summary.to_dict(),
        }
        return payload

    def codes_as_text(self) -> str:
        """Return the ZIP list one code per line, as copied from the UI."""
        return "\n".join(self.codes)
