"""
orderdesk/analytics.py

Read-only statistics over an already loaded order list:
- order_stats: totals, delivery rate, busiest governorates
- campaign_stats: order attribution per campaign
- product_stats: best sellers and products with high return rates

Like finance.summarize(), everything here is pure and recomputed per call.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from decimal import Decimal, ROUND_HALF_UP
from typing import Any

from .finance import ZERO, field, net_price

TOP_N = 3
MIN_ORDERS_FOR_RETURN_RANKING = 5


def _percent(part: int, whole: int) -> Decimal:
    if whole <= 0:
        return ZERO
    return (Decimal(part) / Decimal(whole) * 100).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def order_stats(orders: Iterable[Any]) -> dict:
    orders = list(orders)
    total = len(orders)
    delivered = sum(1 for o in orders if field(o, "status") == "delivered")

    by_governorate = Counter(field(o, "governorate") for o in orders)
    top = by_governorate.most_common(TOP_N)

    return {
        "total_orders": total,
        "delivered_orders": delivered,
        "delivery_rate": int(_percent(delivered, total).quantize(Decimal("1"), rounding=ROUND_HALF_UP)),
        "top_governorate": top[0][0] if top else None,
        "top_governorates": [{"governorate": g, "count": c} for g, c in top],
    }


def campaign_stats(orders: Iterable[Any], campaigns: Iterable[Any]) -> dict:
    """
    Orders and revenue (price - discount) per campaign.

    Campaigns without orders are left out; the rest are sorted by order count.
    """
    orders = list(orders)

    rows = []
    for campaign in campaigns:
        campaign_id = field(campaign, "id")
        attributed = [o for o in orders if field(o, "campaign_id") == campaign_id]
        if not attributed:
            continue
        rows.append(
            {
                "id": campaign_id,
                "name": field(campaign, "name"),
                "platform": field(campaign, "platform"),
                "count": len(attributed),
                "revenue": sum((net_price(o) for o in attributed), ZERO),
            }
        )

    rows.sort(key=lambda r: r["count"], reverse=True)

    return {
        "campaigns": rows,
        "unknown_source_count": sum(1 for o in orders if not field(o, "campaign_id")),
    }


def product_stats(orders: Iterable[Any]) -> dict:
    """
    Per-product delivery/return figures.

    Names are grouped case-insensitively after trimming; the first spelling
    seen is kept for display.
    """
    stats: dict[str, dict] = {}

    for order in orders:
        raw_name = (field(order, "product") or "").strip()
        if not raw_name:
            continue

        entry = stats.setdefault(
            raw_name.lower(),
            {"name": raw_name, "total": 0, "delivered": 0, "returned": 0},
        )
        entry["total"] += 1
        status = field(order, "status")
        if status == "delivered":
            entry["delivered"] += 1
        elif status == "returned":
            entry["returned"] += 1

    products = []
    for entry in stats.values():
        products.append(
            {
                **entry,
                "return_rate": _percent(entry["returned"], entry["total"]),
                "success_rate": _percent(entry["delivered"], entry["total"]),
            }
        )

    top_sellers = sorted(products, key=lambda p: p["delivered"], reverse=True)[:TOP_N]
    high_returns = sorted(
        (p for p in products if p["total"] >= MIN_ORDERS_FOR_RETURN_RANKING and p["return_rate"] > 0),
        key=lambda p: p["return_rate"],
        reverse=True,
    )[:TOP_N]

    return {"products": products, "top_sellers": top_sellers, "high_returns": high_returns}
