"""Development server for the ZIP radius search API.

Builds the application with :func:`zipradius.create_app` and runs the Flask
development server. ``HOST``, ``PORT`` and ``FLASK_DEBUG`` are read through
the same env helpers as :class:`config.Config`. Production deployments point
a WSGI server at ``zipradius.wsgi:app`` instead.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from config import _get_bool_from_env, _get_int_from_env
from zipradius import create_app

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 5000


@dataclass(frozen=True)
class DevServerOptions:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    debug: bool = False

    @classmethod
    def from_env(cls) -> "DevServerOptions":
        """Read dev server options, keeping defaults for unset or bad values."""

        return cls(
            host=os.getenv("HOST", "").strip() or DEFAULT_HOST,
            port=_get_int_from_env("PORT", DEFAULT_PORT, minimum=1, maximum=65535),
            debug=_get_bool_from_env("FLASK_DEBUG", False),
        )


options = DevServerOptions.from_env()
app = create_app()
app.config["DEBUG"] = options.debug


if __name__ == "__main__":
    app.run(debug=options.debug, host=options.host, port=options.port)
