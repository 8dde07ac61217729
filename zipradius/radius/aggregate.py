"""Normalize, deduplicate, and order radius search results."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from zipradius.radius.models import (
    Coordinates,
    RawResultEntry,
    SearchRequest,
    SearchResult,
    SearchSummary,
    ZipRecord,
)
from zipradius.radius.validation import normalize_zip_code

UNKNOWN_COORDINATE = 0.0


def aggregate_results(
    search: SearchRequest,
    entries: Iterable[RawResultEntry],
    coordinates: Dict[str, Optional[Coordinates]],
    center_coordinates: Optional[Coordinates],
) -> SearchResult:
    """Build the final :class:`SearchResult` for a radius search.

    Args:
        search: Validated request, echoed into the summary.
        entries: Provider rows in arrival order.
        coordinates: Lookup results keyed by normalized ZIP. Missing keys and
            ``None`` values both mean "unknown".
        center_coordinates: Coordinates of the center ZIP, if resolved.

    Returns:
        SearchResult: ``records`` deduplicated on the first occurrence of
        each normalized code and stable-sorted by distance, ``codes`` holding
        the same codes in lexicographic order. Unknown coordinates are
        reported as ``0.0, 0.0``.
    """

    first_seen: Dict[str, RawResultEntry] = {}
    for entry in entries:
        first_seen.setdefault(normalize_zip_code(entry.code), entry)

    records: List[ZipRecord] = []
    for code, entry in first_seen.items():
        coords = coordinates.get(code)
        records.append(
            ZipRecord(
                code=code,
                city=entry.city,
                state=entry.state,
                distance=entry.distance,
                lat=coords.lat if coords is not None else UNKNOWN_COORDINATE,
                lng=coords.lng if coords is not None else UNKNOWN_COORDINATE,
            )
        )
    # sorted() is stable, so equal distances keep arrival order
    records = sorted(records, key=lambda record: record.distance)

    return SearchResult(
        codes=tuple(sorted(first_seen)),
        records=tuple(records),
        center_coordinates=center_coordinates,
        summary=SearchSummary(
            count=len(records),
            center_code=normalize_zip_code(search.center_code),
            radius=search.radius,
            units=search.units,
        ),
    )
