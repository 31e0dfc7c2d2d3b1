"""
Delivery zones and rate lookup.

A stored per-governorate rate only pre-fills the delivery cost of an order
form. A missing rate, or a rate of 0, leaves the current value alone.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any, Optional

from .finance import amount, field

GOVERNORATES = [
    "بغداد", "البصرة", "نينوى", "أربيل", "السليمانية", "دهوك",
    "الأنبار", "بابل", "كربلاء", "النجف", "صلاح الدين", "ديالى",
    "واسط", "ميسان", "المثنى", "الديوانية", "ذي قار", "كركوك",
]

DEFAULT_GOVERNORATE = GOVERNORATES[0]


def rates_map(rates: Iterable[Any]) -> dict[str, Decimal]:
    """governorate -> price for a collection of DeliveryRate rows/mappings."""
    return {field(rate, "governorate"): amount(rate, "price") for rate in rates}


def resolve_delivery_cost(
    rates: Mapping[str, Decimal],
    governorate: str,
    current: Optional[Decimal],
) -> Optional[Decimal]:
    """Return the stored rate for governorate if it is set, otherwise current."""
    rate = rates.get(governorate)
    if rate:
        return rate
    return current
