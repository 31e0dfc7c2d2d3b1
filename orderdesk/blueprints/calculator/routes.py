"""
Profit calculator route. Stateless: nothing is read from or written to the database.
"""

from __future__ import annotations

from decimal import Decimal

from flask import Blueprint, current_app, jsonify
from flask_login import login_required

from ...finance import calculate_profit
from ...utils import clean_str, json_error, parse_decimal, payload

calculator_bp = Blueprint("calculator", __name__, url_prefix="/calculator")

CURRENCIES = ("IQD", "USD")
AMOUNT_FIELDS = ("cost", "selling_price", "other_expenses")


def _amount(data: dict, name: str) -> tuple[Decimal, str | None]:
    """Empty counts as 0, like an untouched form field."""
    raw = data.get(name)
    if raw in (None, ""):
        return Decimal("0"), None
    value = parse_decimal(raw)
    label = name.replace("_", " ").capitalize()
    if value is None:
        return Decimal("0"), f"Invalid {name.replace('_', ' ')}."
    if value < 0:
        return Decimal("0"), f"{label} cannot be negative."
    return value, None


@calculator_bp.route("/profit", methods=["POST"])
@login_required
def profit():
    data = payload()

    currency = (clean_str(data.get("currency")) or "IQD").upper()
    if currency not in CURRENCIES:
        return json_error("Currency must be IQD or USD.")

    raw_rate = data.get("exchange_rate")
    if raw_rate in (None, ""):
        exchange_rate = Decimal(str(current_app.config.get("DEFAULT_EXCHANGE_RATE", "1500")))
    else:
        exchange_rate = parse_decimal(raw_rate)
        if exchange_rate is None or exchange_rate <= 0:
            return json_error("Exchange rate must be positive.")

    amounts = {}
    for name in AMOUNT_FIELDS:
        value, error = _amount(data, name)
        if error:
            return json_error(error)
        amounts[name] = value

    result = calculate_profit(currency=currency, exchange_rate=exchange_rate, **amounts)
    return jsonify(result)
