import logging
import os
from typing import List, Optional

# Capture configuration errors so the application can start and report them
# through the health diagnostics instead of crashing during import time.
_CONFIG_ERRORS: List[str] = []

DEFAULT_ZIPCODEAPI_BASE_URL = "https://www.zipcodeapi.com/rest"


def _record_startup_error(message: str) -> None:
    """Record a configuration error that prevents searches from succeeding.

    Args:
        message: Human-readable description of the configuration failure.

    Returns:
        ``None``. Adds the message to the module-level error list and logs it.

    External Dependencies:
        Logs via :mod:`logging` to the ``zip_radius.config`` logger.
    """

    logging.getLogger("zip_radius.config").error(message)
    _CONFIG_ERRORS.append(message)


def _get_int_from_env(
    var_name: str, default: int, *, minimum: int = 1, maximum: Optional[int] = None
) -> int:
    """Return a bounded integer from the environment, falling back to a default.

    Args:
        var_name: Environment variable name to read.
        default: Fallback integer when the environment value is missing,
            invalid, or outside ``minimum``..``maximum``.
        minimum: Smallest accepted value.
        maximum: Largest accepted value, or ``None`` for no upper bound.

    Returns:
        int: Parsed integer value or the provided fallback.

    External Dependencies:
        Calls :func:`os.getenv` to read the environment variable value.
        Logs warnings via :func:`logging.getLogger` when parsing fails.
    """

    raw_value = os.getenv(var_name)
    if raw_value is None or not raw_value.strip():
        return default
    try:
        value = int(raw_value)
    except ValueError:
        logging.getLogger("zip_radius.config").warning(
            "Invalid %s value %r; falling back to %s.", var_name, raw_value, default
        )
        return default
    if value < minimum:
        logging.getLogger("zip_radius.config").warning(
            "%s must be at least %s; falling back to %s.", var_name, minimum, default
        )
        return default
    if maximum is not None and value > maximum:
        logging.getLogger("zip_radius.config").warning(
            "%s must be at most %s; falling back to %s.", var_name, maximum, default
        )
        return default
    return value


def _get_float_from_env(var_name: str, default: float) -> float:
    """Return a positive float from the environment.

    Args:
        var_name: Environment variable name to read.
        default: Fallback used when the value is missing, invalid, or not
            positive.

    Returns:
        float: Parsed value or ``default``.

    External Dependencies:
        Calls :func:`os.getenv`; logs warnings via :func:`logging.getLogger`.
    """

    raw_value = os.getenv(var_name)
    if raw_value is None or not raw_value.strip():
        return default
    try:
        value = float(raw_value)
    except ValueError:
        logging.getLogger("zip_radius.config").warning(
            "Invalid %s value %r; falling back to %s.", var_name, raw_value, default
        )
        return default
    if value <= 0:
        return default
    return value


def _get_bool_from_env(var_name: str, default: bool) -> bool:
    """Return a boolean flag from the environment.

    Args:
        var_name: Environment variable name to read.
        default: Value used when the variable is unset.

    Returns:
        bool: ``True`` for ``true``/``1``/``yes``/``y`` (case-insensitive),
        ``False`` for any other non-empty value.
    """

    raw_value = os.getenv(var_name)
    if raw_value is None or not raw_value.strip():
        return default
    return raw_value.strip().lower() in {"true", "1", "yes", "y"}


def _resolve_zipcodeapi_key() -> str:
    """Return the ZipCodeAPI credential, recording an error when it is absent.

    Returns:
        str: The configured ``ZIPCODEAPI_KEY`` stripped of whitespace, or an
        empty string. A missing key does not stop the app from starting; each
        search then fails with a configuration error.

    External Dependencies:
        Calls :func:`os.getenv`; records missing values via
        :func:`_record_startup_error`.
    """

    configured = (os.getenv("ZIPCODEAPI_KEY") or "").strip()
    if not configured:
        _record_startup_error(
            "ZIPCODEAPI_KEY is not set; radius searches will fail until it is "
            "configured."
        )
    return configured


def _resolve_base_url() -> str:
    """Return the ZipCodeAPI REST base URL without a trailing slash."""

    configured: Optional[str] = os.getenv("ZIPCODEAPI_BASE_URL")
    if not configured or not configured.strip():
        return DEFAULT_ZIPCODEAPI_BASE_URL
    return configured.strip().rstrip("/")


class Config:
    ZIPCODEAPI_KEY = _resolve_zipcodeapi_key()
    ZIPCODEAPI_BASE_URL = _resolve_base_url()
    ZIPCODEAPI_TIMEOUT_SECONDS = _get_float_from_env("ZIPCODEAPI_TIMEOUT_SECONDS", 10.0)
    GEOCODE_MAX_WORKERS = _get_int_from_env("GEOCODE_MAX_WORKERS", 8)
    LOG_LEVEL = (os.getenv("LOG_LEVEL") or "INFO").strip().upper()
    SHOW_CONFIG_ERRORS = os.getenv("SHOW_CONFIG_ERRORS")
    RATELIMIT_ENABLED = _get_bool_from_env("RATELIMIT_ENABLED", True)
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_HEADERS_ENABLED = _get_bool_from_env("RATELIMIT_HEADERS_ENABLED", True)
    API_RADIUS_RATE_LIMIT = os.getenv("API_RADIUS_RATE_LIMIT", "30 per minute")

    CONFIG_ERRORS = list(_CONFIG_ERRORS)
