"""WSGI entrypoint for production servers such as Gunicorn."""

from __future__ import annotations

from zipradius import create_app

app = create_app()

__all__ = ["app", "create_app"]
