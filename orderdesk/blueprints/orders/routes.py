"""
orderdesk/blueprints/orders/routes.py

Order routes.

Includes:
- list (status filter + free-text search on name / phone / id)
- create / edit / delete
- status change and "cash collected from courier" toggle
- risk pre-check for a phone number and product-name suggestions
- receipt data for a single order

IMPORTANT:
- Every query is scoped to the current account.
- Saving an order runs the risk classifier first. A blacklisted phone is
  refused; a high return rate only comes back as a warning.
- Editing an order without changing its phone skips the risk check.
"""

from __future__ import annotations

from decimal import Decimal

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required
from sqlalchemy import String, cast, func, or_

from ...audit import log_action, serialize_model
from ...delivery import DEFAULT_GOVERNORATE, rates_map, resolve_delivery_cost
from ...extensions import db
from ...models import ORDER_STATUSES, BlacklistEntry, Campaign, DeliveryRate, Order
from ...risk import classify_customer, normalize_phone
from ...security import get_owned_or_404, owned_query
from ...utils import (
    clean_str,
    json_error,
    parse_date,
    parse_decimal,
    parse_optional_int,
    payload,
)

orders_bp = Blueprint("orders", __name__, url_prefix="/orders")

MAX_PRODUCT_SUGGESTIONS = 10


# ---------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------
def _assess_phone(phone: str | None, original_phone: str | None = None):
    """Run the risk classifier against this account's blacklist and history."""
    phone = normalize_phone(phone)
    blacklist = owned_query(BlacklistEntry).filter_by(phone=phone).all()
    history = owned_query(Order).filter_by(phone=phone).all()
    return classify_customer(phone, blacklist, history, original_phone=original_phone)


def _account_rates() -> dict:
    return rates_map(owned_query(DeliveryRate).all())


def _validate_campaign(raw, current_id: int | None = None) -> tuple[int | None, str | None]:
    """
    New links need an active campaign. The order's current link is kept
    as is, even after its campaign was deactivated.
    """
    campaign_id = parse_optional_int(raw)
    if raw not in (None, "") and campaign_id is None:
        return None, "Invalid campaign."
    if campaign_id is None:
        return None, None
    if current_id is not None and campaign_id == current_id:
        return campaign_id, None
    campaign = owned_query(Campaign).filter_by(id=campaign_id, is_active=True).first()
    if campaign is None:
        return None, "Invalid campaign."
    return campaign_id, None


def _money_field(data: dict, name: str, *, required: bool = False) -> tuple[Decimal | None, str | None]:
    raw = data.get(name)
    value = parse_decimal(raw)
    if value is None:
        if raw not in (None, "") or required:
            return None, f"Invalid {name.replace('_', ' ')}."
        return None, None
    if value < 0:
        return None, f"{name.replace('_', ' ').capitalize()} cannot be negative."
    return value, None


def _order_fields(data: dict, *, existing: Order | None = None) -> tuple[dict, str | None]:
    """
    Validate an order payload.

    On edit (existing given) missing keys keep their stored values.
    """
    def pick(name):
        if existing is not None and name not in data:
            return getattr(existing, name)
        return data.get(name)

    fields = {
        "customer_name": clean_str(pick("customer_name")),
        "phone": normalize_phone(pick("phone")) or None,
        "governorate": clean_str(pick("governorate")) or DEFAULT_GOVERNORATE,
        "address": clean_str(pick("address")),
        "product": clean_str(pick("product")),
        "delivery_duration": clean_str(pick("delivery_duration")),
    }

    for name, label in (("customer_name", "Customer name"), ("phone", "Phone"), ("product", "Product")):
        if not fields[name]:
            return {}, f"{label} is required."

    if existing is None or "due_date" in data:
        raw_due = data.get("due_date")
        fields["due_date"] = parse_date(raw_due)
        if raw_due not in (None, "") and fields["due_date"] is None:
            return {}, "Invalid due date."

    for name in ("price", "delivery_cost", "cost_price", "discount"):
        if existing is not None and name not in data:
            continue
        value, error = _money_field(data, name, required=(name == "price"))
        if error:
            return {}, error
        fields[name] = value

    if existing is None or "campaign_id" in data:
        campaign_id, error = _validate_campaign(
            data.get("campaign_id"),
            existing.campaign_id if existing is not None else None,
        )
        if error:
            return {}, error
        fields["campaign_id"] = campaign_id

    return fields, None


def _blocked_response(risk):
    return json_error(risk.message or "Customer is blacklisted.", 403, risk=risk.as_dict())


# ---------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------
@orders_bp.route("", methods=["GET"])
@login_required
def list_orders():
    query = owned_query(Order)

    status = clean_str(request.args.get("status"))
    if status and status != "all":
        if status not in ORDER_STATUSES:
            return json_error("Invalid status.")
        query = query.filter(Order.status == status)

    term = clean_str(request.args.get("q"))
    if term:
        query = query.filter(
            or_(
                func.lower(Order.customer_name).contains(term.lower()),
                Order.phone.contains(term),
                cast(Order.id, String).contains(term),
            )
        )

    orders = query.order_by(Order.created_at.desc(), Order.id.desc()).all()
    return jsonify({"orders": [o.to_dict() for o in orders], "count": len(orders)})


@orders_bp.route("/<int:order_id>", methods=["GET"])
@login_required
def get_order(order_id: int):
    order = get_owned_or_404(Order, order_id)
    return jsonify(order.to_dict())


@orders_bp.route("/risk", methods=["GET"])
@login_required
def check_risk():
    """
    Risk pre-check while typing a phone.

    order_id (optional) is the order being edited; an unchanged phone is
    reported as safe without a lookup.
    """
    phone = request.args.get("phone")
    original_phone = None
    order_id = parse_optional_int(request.args.get("order_id"))
    if order_id is not None:
        original_phone = get_owned_or_404(Order, order_id).phone

    risk = _assess_phone(phone, original_phone=original_phone)
    return jsonify(risk.as_dict())


@orders_bp.route("/products", methods=["GET"])
@login_required
def product_suggestions():
    """Distinct product names already used, matching q (case-insensitive)."""
    term = clean_str(request.args.get("q"))
    if not term:
        return jsonify({"products": []})

    rows = (
        db.session.query(Order.product)
        .filter(Order.account_id == current_user.id)
        .filter(func.lower(Order.product).contains(term.lower()))
        .distinct()
        .order_by(Order.product.asc())
        .limit(MAX_PRODUCT_SUGGESTIONS)
        .all()
    )
    return jsonify({"products": [r[0] for r in rows]})


# ---------------------------------------------------------------------
# Create / edit / delete
# ---------------------------------------------------------------------
@orders_bp.route("", methods=["POST"])
@login_required
def create_order():
    data = payload()
    fields, error = _order_fields(data)
    if error:
        return json_error(error)

    risk = _assess_phone(fields["phone"])
    if risk.blocks_submission:
        return _blocked_response(risk)

    # No typed delivery cost: fall back to the stored governorate rate, else 0.
    if fields.get("delivery_cost") is None:
        fields["delivery_cost"] = resolve_delivery_cost(
            _account_rates(), fields["governorate"], Decimal("0.00")
        )

    order = Order(
        account_id=current_user.id,
        status="new",
        is_collected=False,
        customer_name=fields["customer_name"],
        phone=fields["phone"],
        governorate=fields["governorate"],
        address=fields["address"],
        product=fields["product"],
        delivery_duration=fields["delivery_duration"],
        due_date=fields["due_date"],
        price=fields["price"],
        cost_price=fields.get("cost_price"),
        delivery_cost=fields["delivery_cost"],
        discount=fields.get("discount") or Decimal("0.00"),
        campaign_id=fields["campaign_id"],
    )
    db.session.add(order)
    db.session.flush()
    log_action(order, "CREATE", before=None, after=serialize_model(order))
    db.session.commit()

    return jsonify({"order": order.to_dict(), "risk": risk.as_dict()}), 201


@orders_bp.route("/<int:order_id>", methods=["PUT", "PATCH"])
@login_required
def update_order(order_id: int):
    order = get_owned_or_404(Order, order_id)
    before_snapshot = serialize_model(order)

    data = payload()
    fields, error = _order_fields(data, existing=order)
    if error:
        return json_error(error)

    risk = _assess_phone(fields["phone"], original_phone=order.phone)
    if risk.blocks_submission:
        return _blocked_response(risk)

    if "delivery_cost" in fields and fields["delivery_cost"] is None:
        fields["delivery_cost"] = Decimal("0.00")
    if "discount" in fields and fields["discount"] is None:
        fields["discount"] = Decimal("0.00")

    for name, value in fields.items():
        setattr(order, name, value)

    db.session.flush()
    log_action(order, "UPDATE", before=before_snapshot, after=serialize_model(order))
    db.session.commit()

    return jsonify({"order": order.to_dict(), "risk": risk.as_dict()})


@orders_bp.route("/<int:order_id>", methods=["DELETE"])
@login_required
def delete_order(order_id: int):
    order = get_owned_or_404(Order, order_id)
    before_snapshot = serialize_model(order)

    db.session.delete(order)
    db.session.flush()
    log_action(order, "DELETE", before=before_snapshot, after=None)
    db.session.commit()

    return jsonify({"deleted": order_id})


# ---------------------------------------------------------------------
# Status / collection
# ---------------------------------------------------------------------
@orders_bp.route("/<int:order_id>/status", methods=["POST"])
@login_required
def update_status(order_id: int):
    order = get_owned_or_404(Order, order_id)

    status = clean_str(payload().get("status"))
    if status not in ORDER_STATUSES:
        return json_error("Invalid status.")

    before_snapshot = serialize_model(order)
    order.status = status
    db.session.flush()
    log_action(order, "UPDATE", before=before_snapshot, after=serialize_model(order))
    db.session.commit()

    current_app.logger.debug("Order %s moved to %s", order.id, status)
    return jsonify(order.to_dict())


@orders_bp.route("/<int:order_id>/toggle-collected", methods=["POST"])
@login_required
def toggle_collected(order_id: int):
    """Flip is_collected: has the courier remitted the cash for this order."""
    order = get_owned_or_404(Order, order_id)

    before_snapshot = serialize_model(order)
    order.is_collected = not bool(order.is_collected)
    db.session.flush()
    log_action(order, "UPDATE", before=before_snapshot, after=serialize_model(order))
    db.session.commit()

    return jsonify(order.to_dict())


# ---------------------------------------------------------------------
# Receipt
# ---------------------------------------------------------------------
@orders_bp.route("/<int:order_id>/receipt", methods=["GET"])
@login_required
def receipt(order_id: int):
    """Data for the customer receipt. Rendering happens client-side."""
    order = get_owned_or_404(Order, order_id)
    return jsonify(
        {
            "store_name": current_user.store_name,
            "store_phone": current_user.phone,
            "order": order.to_dict(),
            "total": order.customer_total,
        }
    )
