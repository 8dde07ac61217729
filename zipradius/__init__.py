# zipradius/__init__.py
import logging
import os
from typing import List, Optional, Union

from flask import Flask, abort, jsonify
from flask.typing import ResponseReturnValue
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from werkzeug.exceptions import TooManyRequests

limiter = Limiter(key_func=get_remote_address)
TRUTHY_VALUES = {"1", "true", "t", "yes", "y", "on"}
PRODUCTION_ENV_VALUES = {"production", "prod", "live"}
TOO_MANY_REQUESTS_MESSAGE = "Too many searches. Try again in a minute."


def _is_truthy(value: Optional[Union[str, bool]]) -> bool:
    """Return whether a string or boolean represents a truthy value.

    Args:
        value: Raw value from configuration or environment variables.

    Returns:
        ``True`` when the provided value maps to a truthy string or ``True``.
    """

    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in TRUTHY_VALUES


def _is_production_environment() -> bool:
    """Return whether ``ENVIRONMENT`` or ``FLASK_ENV`` names production."""

    raw_environment = os.getenv("ENVIRONMENT") or os.getenv("FLASK_ENV") or ""
    normalized = raw_environment.strip().lower()
    return normalized in PRODUCTION_ENV_VALUES


def _should_show_config_errors(app: Flask) -> bool:
    """Return whether configuration errors may be displayed to operators.

    Args:
        app: Flask application used to read configuration defaults.

    Returns:
        ``True`` when ``SHOW_CONFIG_ERRORS`` is truthy or the app is not
        running in production.

    External dependencies:
        * Reads ``SHOW_CONFIG_ERRORS`` from :func:`os.getenv`.
        * Calls :func:`_is_production_environment` to detect production.
    """

    raw_flag = os.getenv("SHOW_CONFIG_ERRORS")
    if raw_flag is None:
        raw_flag = app.config.get("SHOW_CONFIG_ERRORS")
    if _is_truthy(raw_flag):
        return True
    return not _is_production_environment()


def _configure_logging(app: Flask) -> None:
    """Apply ``LOG_LEVEL`` to the app logger.

    The app logger is the ``zipradius`` logger, so module loggers such as
    ``zipradius.services.zipcodeapi`` inherit its level and handler.

    Unknown level names fall back to ``INFO``.
    """

    level_name = str(app.config.get("LOG_LEVEL") or "INFO").upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        app.logger.warning("Unknown LOG_LEVEL %r; using INFO.", level_name)
        level = logging.INFO
    app.logger.setLevel(level)


def create_app(config_class: Union[str, type] = "config.Config") -> Flask:
    """Application factory for the ZIP radius search service.

    Args:
        config_class: Import path or class used to configure the app.

    Returns:
        A fully initialized :class:`~flask.Flask` application.

    External dependencies:
        * Initializes :data:`limiter` (Flask-Limiter) for the API blueprint.
        * Registers :data:`zipradius.api.api_bp` under ``/api``.
    """

    app = Flask(__name__)
    app.config.from_object(config_class)
    _configure_logging(app)

    config_errors: List[str] = list(app.config.get("CONFIG_ERRORS", []))
    show_config_errors = _should_show_config_errors(app)
    app.config["SHOW_CONFIG_ERRORS"] = show_config_errors
    if config_errors:
        app.logger.error("CONFIG_ERRORS: %s", config_errors)

    limiter.init_app(app)

    from zipradius.api import api_bp  # Local import avoids circular imports.

    app.register_blueprint(api_bp, url_prefix="/api")

    @app.errorhandler(TooManyRequests)
    def _too_many_requests(exc: TooManyRequests) -> ResponseReturnValue:
        """Return limiter rejections in the API's ``{"error": ...}`` shape."""

        app.logger.info("Rate limit exceeded: %s", exc.description)
        return jsonify({"error": TOO_MANY_REQUESTS_MESSAGE}), 429

    @app.route("/healthz", methods=["GET"])
    def healthz() -> ResponseReturnValue:
        """Return a lightweight health response for infrastructure probes."""

        return "ok", 200

    @app.route("/healthz/config", methods=["GET"])
    def healthz_config() -> ResponseReturnValue:
        """Return configuration error diagnostics when explicitly allowed.

        Returns:
            A JSON payload listing configuration errors when diagnostics are
            enabled, otherwise a 404 response. The messages name missing
            settings and never include their values.
        """

        if not show_config_errors:
            abort(404)
        return jsonify({"errors": config_errors})

    return app
