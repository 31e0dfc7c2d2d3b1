"""Blacklist blueprint package (routes in routes.py)."""

from .routes import blacklist_bp  # noqa: F401
