"""Blueprint exposing the radius search JSON API."""

from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, Response, current_app, jsonify, request
from flask.typing import ResponseReturnValue

from zipradius import limiter
from zipradius.radius import RadiusSearchError, SearchResult, classify_error
from zipradius.radius.search import build_search_service

api_bp = Blueprint("api", __name__)


def _api_rate_limit_value() -> str:
    """Return the configured rate limit string for radius search requests.

    Returns:
        The value of ``flask.current_app.config['API_RADIUS_RATE_LIMIT']``,
        defaulting to ``"30 per minute"``.
    """

    value = current_app.config.get("API_RADIUS_RATE_LIMIT", "30 per minute")
    return str(value or "30 per minute")


def _request_payload() -> Dict[str, Any]:
    """Return the JSON body as a dict; anything else becomes ``{}``.

    An empty payload fails validation with the invalid-ZIP message, matching
    how a missing ``zip`` field is reported.
    """

    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _run_search() -> SearchResult:
    service = build_search_service(current_app.config)
    return service.search(_request_payload())


def _error_response(exc: Exception) -> ResponseReturnValue:
    """Log ``exc`` and return its classified ``{"error": ...}`` response.

    External dependencies:
        * Calls :func:`zipradius.radius.classify_error` for status and text.
        * Logs via :attr:`flask.current_app.logger`; unexpected exceptions are
          logged with their traceback.
    """

    classification = classify_error(exc)
    if isinstance(exc, RadiusSearchError):
        current_app.logger.info(
            "Radius search failed (%s): %s", classification.kind.value, exc
        )
    else:
        current_app.logger.exception("Unexpected radius search failure")
    return jsonify(classification.to_dict()), classification.status_code


@api_bp.post("/radius")
@limiter.limit(_api_rate_limit_value, methods=["POST"])
def api_radius_search() -> ResponseReturnValue:
    """Return every ZIP code within a radius of a center ZIP.

    Args:
        None. The JSON body provides ``zip``, ``radius``, and optional
        ``units`` (``"mile"`` or ``"km"``).

    Returns:
        ``200`` with ``zipCodes``, ``zipDetails``, ``centerCoords``, and
        ``meta`` on success, otherwise ``{"error": message}`` with the
        classified status code.

    External dependencies:
        Calls :meth:`zipradius.radius.RadiusSearchService.search`, which
        queries ZipCodeAPI.
    """

    try:
        result = _run_search()
    except Exception as exc:
        return _error_response(exc)
    return jsonify(result.to_dict())


@api_bp.post("/radius/export")
@limiter.limit(_api_rate_limit_value, methods=["POST"])
def api_radius_export() -> ResponseReturnValue:
    """Return the lexicographically sorted ZIP list as plain text.

    Accepts the same body as :func:`api_radius_search`. Successful responses
    hold one ZIP per line; failures use the JSON error shape.
    """

    try:
        result = _run_search()
    except Exception as exc:
        return _error_response(exc)
    return Response(result.codes_as_text(), mimetype="text/plain")
