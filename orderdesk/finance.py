"""
orderdesk/finance.py

Financial aggregation for the dashboard.

summarize() turns the raw order / expense / supplier-ledger collections of one
account into the summary figures. It is a pure function: no queries, no
caching, no hidden state. Callers load a snapshot and call it again whenever
any collection changes.

Records may be ORM instances or plain mappings. Missing or empty numeric
fields count as zero.

COURIER PASS-THROUGH:
- Order.delivery_cost is paid by the customer to the courier and kept by the
  courier. It is never merchant revenue and never merchant cost.
- Only pending_gross includes it, because that is the cash physically held by
  the courier before remittance.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

from .models import TRANSACTION_PAYMENT, TRANSACTION_PURCHASE

ZERO = Decimal("0.00")

STATUS_DELIVERED = "delivered"

VERDICT_LOSS = "loss"
VERDICT_WARNING = "warning"
VERDICT_SUCCESS = "success"
LOW_MARGIN_PERCENT = Decimal("15")


# ---------------------------------------------------------------------
# Field access
# ---------------------------------------------------------------------
def field(record: Any, name: str, default: Any = None) -> Any:
    """Read a field from an ORM instance or a mapping."""
    if isinstance(record, Mapping):
        return record.get(name, default)
    return getattr(record, name, default)


def amount(record: Any, name: str) -> Decimal:
    """Numeric field as Decimal; None, empty or garbage counts as zero."""
    value = field(record, name)
    if value is None or value == "":
        return ZERO
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return ZERO


def _money(x: Decimal) -> Decimal:
    return x.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def net_price(order: Any) -> Decimal:
    """What the merchant receives for an order: price - discount."""
    return amount(order, "price") - amount(order, "discount")


def is_delivered(order: Any) -> bool:
    return field(order, "status") == STATUS_DELIVERED


def is_collected(order: Any) -> bool:
    return bool(field(order, "is_collected", False))


# ---------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class FinancialSummary:
    cash: Decimal
    pending_gross: Decimal
    pending_net: Decimal
    total_expenses: Decimal
    net_profit: Decimal
    total_supplier_debt: Decimal

    def as_dict(self) -> dict:
        return asdict(self)


def supplier_debt(entries: Iterable[Any]) -> Decimal:
    """Sum of PURCHASE amounts minus PAYMENT amounts."""
    total = ZERO
    for entry in entries:
        kind = field(entry, "transaction_type")
        if kind == TRANSACTION_PURCHASE:
            total += amount(entry, "amount")
        elif kind == TRANSACTION_PAYMENT:
            total -= amount(entry, "amount")
    return _money(total)


def summarize(
    orders: Iterable[Any],
    expenses: Iterable[Any],
    ledger: Iterable[Any],
) -> FinancialSummary:
    """
    Compute the dashboard figures from scratch.

    - cash: delivered + collected orders, price - discount
    - pending_gross: delivered + not collected, price + delivery_cost - discount
    - pending_net: same orders, price - discount
    - total_expenses: all expenses
    - net_profit: collected revenue - collected cost_price - total_expenses
    - total_supplier_debt: PURCHASE - PAYMENT over the whole ledger
    """
    cash = ZERO
    pending_gross = ZERO
    pending_net = ZERO
    cost_of_goods = ZERO

    for order in orders:
        if not is_delivered(order):
            continue

        if is_collected(order):
            cash += net_price(order)
            cost_of_goods += amount(order, "cost_price")
        else:
            pending_gross += net_price(order) + amount(order, "delivery_cost")
            pending_net += net_price(order)

    total_expenses = sum((amount(e, "amount") for e in expenses), ZERO)

    # Revenue is the collected cash; delivery_cost appears on neither side.
    net_profit = cash - cost_of_goods - total_expenses

    return FinancialSummary(
        cash=_money(cash),
        pending_gross=_money(pending_gross),
        pending_net=_money(pending_net),
        total_expenses=_money(total_expenses),
        net_profit=_money(net_profit),
        total_supplier_debt=supplier_debt(ledger),
    )


# ---------------------------------------------------------------------
# Profit calculator (single product, what-if)
# ---------------------------------------------------------------------
def calculate_profit(
    cost: Decimal,
    selling_price: Decimal,
    other_expenses: Decimal = ZERO,
    currency: str = "IQD",
    exchange_rate: Decimal = Decimal("1500"),
) -> dict:
    """
    Margin/ROI for one product.

    A USD cost is converted to IQD with exchange_rate before anything else.
    Margin is profit over selling price, ROI is profit over total cost; both
    are 0 when their denominator is 0.
    """
    normalized_cost = cost * exchange_rate if currency == "USD" else cost
    total_cost = normalized_cost + other_expenses
    profit = selling_price - total_cost

    margin = (profit / selling_price * 100) if selling_price > 0 else ZERO
    roi = (profit / total_cost * 100) if total_cost > 0 else ZERO

    if profit < 0:
        verdict = VERDICT_LOSS
    elif margin < LOW_MARGIN_PERCENT:
        verdict = VERDICT_WARNING
    else:
        verdict = VERDICT_SUCCESS

    return {
        "final_cost": _money(normalized_cost),
        "total_cost": _money(total_cost),
        "net_profit": _money(profit),
        "margin_percent": _money(margin),
        "roi_percent": _money(roi),
        "verdict": verdict,
    }
