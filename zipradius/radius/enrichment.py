"""Concurrent coordinate lookups for radius search results."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Protocol

from zipradius.radius.models import Coordinates, RawResultEntry
from zipradius.radius.validation import normalize_zip_code

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8


class CoordinateLookup(Protocol):
    def lookup_coordinates(self, zip_code: str) -> Optional[Coordinates]: ...


@dataclass(frozen=True)
class EnrichmentResult:
    """Coordinates resolved for one search.

    ``by_code`` is keyed by normalized five-digit ZIP; a ``None`` value means
    the lookup for that code failed.
    """

    center: Optional[Coordinates]
    by_code: Dict[str, Optional[Coordinates]]

    @property
    def failed_codes(self) -> List[str]:
        return sorted(code for code, coords in self.by_code.items() if coords is None)


class GeoEnricher:
    """Resolve coordinates for a center ZIP and its radius results.

    One lookup runs per unique normalized code, center included, on a thread
    pool capped at ``max_workers``. :meth:`enrich` returns only after every
    lookup has settled; a failing lookup yields ``None`` for its code and
    never aborts the batch.
    """

    def __init__(
        self, lookup: CoordinateLookup, max_workers: int = DEFAULT_MAX_WORKERS
    ):
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self._lookup = lookup
        self._max_workers = max_workers

    def enrich(
        self, center_code: str, entries: Iterable[RawResultEntry]
    ) -> EnrichmentResult:
        center = normalize_zip_code(center_code)
        codes = _unique_codes([center], entries)

        workers = min(self._max_workers, len(codes))
        with ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="zip-geocode"
        ) as executor:
            # map() preserves input order; leaving the block joins every lookup
            resolved = list(executor.map(self._safe_lookup, codes))

        by_code = dict(zip(codes, resolved))
        result = EnrichmentResult(center=by_code[center], by_code=by_code)
        if result.failed_codes:
            logger.info(
                "Coordinate lookup failed for %d of %d ZIP codes",
                len(result.failed_codes),
                len(codes),
            )
        return result

    def _safe_lookup(self, zip_code: str) -> Optional[Coordinates]:
        try:
            return self._lookup.lookup_coordinates(zip_code)
        except Exception:
            logger.exception("Unexpected error looking up coordinates for %s", zip_code)
            return None


def _unique_codes(
    leading: List[str], entries: Iterable[RawResultEntry]
) -> List[str]:
    seen = set(leading)
    codes = list(leading)
    for entry in entries:
        code = normalize_zip_code(entry.code)
        if code not in seen:
            seen.add(code)
            codes.append(code)
    return codes
