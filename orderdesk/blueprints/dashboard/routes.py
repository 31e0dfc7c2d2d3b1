"""
orderdesk/blueprints/dashboard/routes.py

Dashboard routes.

GET /dashboard is the full reload: every collection of the account plus the
figures computed from that same snapshot. Clients call it on start and after
any failed write to discard optimistic local changes.

The collections are read one after another without a shared transaction, so
a concurrent write can make one snapshot slightly inconsistent; the next
reload fixes it.
"""

from __future__ import annotations

from flask import Blueprint, jsonify
from flask_login import login_required

from ...analytics import campaign_stats, order_stats, product_stats
from ...finance import summarize
from ...models import Campaign, Expense, Order, Supplier, SupplierLedgerEntry
from ...security import owned_query

dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/dashboard")


def _load_orders():
    return owned_query(Order).order_by(Order.created_at.desc(), Order.id.desc()).all()


def _load_expenses():
    return owned_query(Expense).order_by(Expense.created_at.desc(), Expense.id.desc()).all()


def _load_ledger():
    return owned_query(SupplierLedgerEntry).all()


@dashboard_bp.route("", methods=["GET"])
@login_required
def snapshot():
    orders = _load_orders()
    expenses = _load_expenses()
    suppliers = owned_query(Supplier).order_by(Supplier.name.asc()).all()
    ledger = _load_ledger()
    campaigns = (
        owned_query(Campaign)
        .filter_by(is_active=True)
        .order_by(Campaign.created_at.desc(), Campaign.id.desc())
        .all()
    )

    return jsonify(
        {
            "orders": [o.to_dict() for o in orders],
            "expenses": [e.to_dict() for e in expenses],
            "suppliers": [s.to_dict() for s in suppliers],
            "ledger": [e.to_dict() for e in ledger],
            "campaigns": [c.to_dict() for c in campaigns],
            "summary": summarize(orders, expenses, ledger).as_dict(),
            "order_stats": order_stats(orders),
            "campaign_stats": campaign_stats(orders, campaigns),
        }
    )


@dashboard_bp.route("/summary", methods=["GET"])
@login_required
def summary():
    result = summarize(_load_orders(), _load_expenses(), _load_ledger())
    return jsonify(result.as_dict())


@dashboard_bp.route("/products", methods=["GET"])
@login_required
def products():
    return jsonify(product_stats(_load_orders()))
