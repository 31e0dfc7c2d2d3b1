"""
Delivery rates blueprint package.

Per-account governorate prices used to pre-fill an order's delivery cost.
"""

from .routes import delivery_rates_bp  # noqa: F401
