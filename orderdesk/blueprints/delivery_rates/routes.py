"""
orderdesk/blueprints/delivery_rates/routes.py

Per-governorate delivery prices.

- GET lists every governorate; ones without a stored row show price 0.
- PUT upserts by (account, governorate).
- /resolve answers the order form's autofill question: which delivery cost
  to show after a governorate is picked.
"""

from __future__ import annotations

from decimal import Decimal

from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from ...audit import log_action, serialize_model
from ...delivery import GOVERNORATES, rates_map, resolve_delivery_cost
from ...extensions import db
from ...models import DeliveryRate
from ...security import owned_query
from ...utils import clean_str, json_error, parse_decimal, payload

delivery_rates_bp = Blueprint("delivery_rates", __name__, url_prefix="/delivery-rates")


def _rates_listing() -> list[dict]:
    stored = rates_map(owned_query(DeliveryRate).all())
    names = GOVERNORATES + sorted(g for g in stored if g not in GOVERNORATES)
    return [{"governorate": g, "price": stored.get(g, Decimal("0.00"))} for g in names]


def _incoming_rates(data) -> list[tuple]:
    """Accept {"rates": {gov: price}} or {"rates": [{"governorate", "price"}, ...]}."""
    raw = data.get("rates") if isinstance(data, dict) else None
    if isinstance(raw, dict):
        return list(raw.items())
    if isinstance(raw, list):
        return [
            (item.get("governorate"), item.get("price"))
            for item in raw
            if isinstance(item, dict)
        ]
    return []


@delivery_rates_bp.route("", methods=["GET"])
@login_required
def list_rates():
    return jsonify({"rates": _rates_listing()})


@delivery_rates_bp.route("", methods=["PUT", "POST"])
@login_required
def save_rates():
    items = _incoming_rates(payload())
    if not items:
        return json_error("No rates given.")

    parsed = []
    for raw_governorate, raw_price in items:
        governorate = clean_str(raw_governorate)
        if not governorate:
            return json_error("Governorate is required.")
        price = parse_decimal(raw_price)
        if price is None or price < 0:
            return json_error(f"Invalid price for {governorate}.")
        parsed.append((governorate, price))

    existing = {r.governorate: r for r in owned_query(DeliveryRate).all()}

    for governorate, price in parsed:
        rate = existing.get(governorate)
        if rate is None:
            rate = DeliveryRate(account_id=current_user.id, governorate=governorate, price=price)
            db.session.add(rate)
            db.session.flush()
            log_action(rate, "CREATE", before=None, after=serialize_model(rate))
            existing[governorate] = rate
            continue

        before_snapshot = serialize_model(rate)
        rate.price = price
        db.session.flush()
        log_action(rate, "UPDATE", before=before_snapshot, after=serialize_model(rate))

    db.session.commit()
    return jsonify({"rates": _rates_listing()})


@delivery_rates_bp.route("/resolve", methods=["GET"])
@login_required
def resolve():
    """
    Delivery cost to show after picking a governorate.

    current is the value already in the form; it survives when no rate
    (or a 0 rate) is stored.
    """
    governorate = clean_str(request.args.get("governorate")) or ""
    current = parse_decimal(request.args.get("current"))

    rates = rates_map(owned_query(DeliveryRate).filter_by(governorate=governorate).all())
    delivery_cost = resolve_delivery_cost(rates, governorate, current)

    return jsonify(
        {
            "governorate": governorate,
            "delivery_cost": delivery_cost,
            "from_rate": bool(rates.get(governorate)),
        }
    )
