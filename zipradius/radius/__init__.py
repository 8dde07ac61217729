"""Radius search pipeline: validation, enrichment, aggregation, errors.

The search entry point lives in :mod:`zipradius.radius.search`.
"""

from zipradius.radius.errors import RadiusSearchError, classify_error
from zipradius.radius.models import SearchResult

__all__ = [
    "RadiusSearchError",
    "SearchResult",
    "classify_error",
]
