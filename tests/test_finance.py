from decimal import Decimal
from types import SimpleNamespace

from orderdesk.finance import calculate_profit, summarize, supplier_debt


def _order(status="delivered", collected=False, price=0, delivery=0, discount=0, cost=None):
    return {
        "status": status,
        "is_collected": collected,
        "price": price,
        "delivery_cost": delivery,
        "discount": discount,
        "cost_price": cost,
    }


def test_summary_figures():
    orders = [
        _order(collected=True, price=25000, delivery=5000, discount=1000, cost=10000),
        _order(collected=False, price=30000, delivery=5000),
        _order(status="out_for_delivery", price=99999, delivery=5000),
    ]
    expenses = [{"amount": 2000}, {"amount": "3000"}]

    summary = summarize(orders, expenses, [])

    assert summary.cash == Decimal("24000")
    assert summary.pending_gross == Decimal("35000")
    assert summary.pending_net == Decimal("30000")
    assert summary.total_expenses == Decimal("5000")
    assert summary.net_profit == Decimal("9000")
    assert summary.total_supplier_debt == Decimal("0")


def test_delivery_cost_is_never_revenue():
    orders = [_order(collected=True, price=10000, delivery=5000)]

    summary = summarize(orders, [], [])

    assert summary.cash == Decimal("10000")
    assert summary.net_profit == Decimal("10000")


def test_non_delivered_orders_contribute_nothing():
    orders = [
        _order(status=status, collected=collected, price=50000, delivery=5000, discount=100, cost=20000)
        for status in ("new", "processing", "out_for_delivery", "returned")
        for collected in (True, False)
    ]

    summary = summarize(orders, [], [])

    assert summary.cash == 0
    assert summary.pending_gross == 0
    assert summary.pending_net == 0
    assert summary.net_profit == 0


def test_pending_gross_exceeds_net_by_delivery_cost():
    orders = [
        _order(collected=True, price=1000),
        _order(price=20000, delivery=4000),
        _order(price=15000, delivery=3000, discount=500),
    ]

    summary = summarize(orders, [], [])

    assert summary.cash + summary.pending_gross > summary.cash + summary.pending_net
    assert summary.pending_gross - summary.pending_net == Decimal("7000")


def test_uncollected_cost_price_does_not_reduce_profit():
    orders = [_order(collected=False, price=20000, cost=15000)]

    assert summarize(orders, [], []).net_profit == 0


def test_net_profit_can_be_negative():
    orders = [_order(collected=True, price=10000, cost=8000)]

    summary = summarize(orders, [{"amount": 5000}], [])

    assert summary.net_profit == Decimal("-3000")


def test_missing_numbers_count_as_zero():
    orders = [
        {"status": "delivered", "is_collected": True, "price": 7500},
        {"status": "delivered", "price": 2000, "delivery_cost": None, "discount": ""},
    ]

    summary = summarize(orders, [{"title": "no amount"}], [{"transaction_type": "PURCHASE"}])

    assert summary.cash == Decimal("7500")
    assert summary.pending_gross == Decimal("2000")
    assert summary.total_expenses == 0
    assert summary.total_supplier_debt == 0


def test_supplier_debt_purchase_minus_payment():
    ledger = [
        {"transaction_type": "PURCHASE", "amount": 1000},
        {"transaction_type": "PAYMENT", "amount": 400},
        {"transaction_type": "PURCHASE", "amount": 200},
    ]

    assert supplier_debt(ledger) == Decimal("800")
    assert summarize([], [], ledger).total_supplier_debt == Decimal("800")


def test_accepts_attribute_records():
    order = SimpleNamespace(
        status="delivered", is_collected=True, price=Decimal("12000"),
        discount=Decimal("0"), delivery_cost=Decimal("5000"), cost_price=None,
    )
    expense = SimpleNamespace(amount=Decimal("2000"))

    summary = summarize([order], [expense], [])

    assert summary.cash == Decimal("12000")
    assert summary.net_profit == Decimal("10000")


def test_summarize_is_idempotent():
    orders = [_order(collected=True, price=25000, cost=10000), _order(price=30000, delivery=5000)]
    expenses = [{"amount": 1500}]
    ledger = [{"transaction_type": "PURCHASE", "amount": 900}]

    first = summarize(orders, expenses, ledger)
    second = summarize(orders, expenses, ledger)

    assert first == second
    assert first.as_dict() == second.as_dict()


def test_profit_calculator_usd_cost():
    result = calculate_profit(
        cost=Decimal("10"),
        selling_price=Decimal("25000"),
        other_expenses=Decimal("2000"),
        currency="USD",
        exchange_rate=Decimal("1500"),
    )

    assert result["final_cost"] == Decimal("15000.00")
    assert result["total_cost"] == Decimal("17000.00")
    assert result["net_profit"] == Decimal("8000.00")
    assert result["margin_percent"] == Decimal("32.00")
    assert result["roi_percent"] == Decimal("47.06")
    assert result["verdict"] == "success"


def test_profit_calculator_verdicts():
    low = calculate_profit(cost=Decimal("9000"), selling_price=Decimal("10000"))
    loss = calculate_profit(cost=Decimal("12000"), selling_price=Decimal("10000"))
    empty = calculate_profit(cost=Decimal("0"), selling_price=Decimal("0"))

    assert low["verdict"] == "warning"
    assert loss["verdict"] == "loss"
    assert empty["margin_percent"] == 0
    assert empty["roi_percent"] == 0
