"""Campaigns blueprint package."""

from .routes import campaigns_bp  # noqa: F401
