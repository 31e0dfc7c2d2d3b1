"""
Expense routes: list, create, delete. Expenses have no edit path.
"""

from __future__ import annotations

from flask import Blueprint, jsonify
from flask_login import current_user, login_required

from ...audit import log_action, serialize_model
from ...extensions import db
from ...models import Expense
from ...security import get_owned_or_404, owned_query
from ...utils import clean_str, json_error, parse_decimal, payload

expenses_bp = Blueprint("expenses", __name__, url_prefix="/expenses")

EXPENSE_CATEGORIES = ["نثريات", "إعلانات", "رواتب", "إيجار", "شحن", "أخرى"]
DEFAULT_CATEGORY = EXPENSE_CATEGORIES[0]


@expenses_bp.route("", methods=["GET"])
@login_required
def list_expenses():
    expenses = owned_query(Expense).order_by(Expense.created_at.desc(), Expense.id.desc()).all()
    return jsonify(
        {
            "expenses": [e.to_dict() for e in expenses],
            "categories": EXPENSE_CATEGORIES,
        }
    )


@expenses_bp.route("", methods=["POST"])
@login_required
def create_expense():
    data = payload()

    title = clean_str(data.get("title"))
    if not title:
        return json_error("Title is required.")

    amount = parse_decimal(data.get("amount"))
    if amount is None:
        return json_error("Invalid amount.")
    if amount < 0:
        return json_error("Amount cannot be negative.")

    expense = Expense(
        account_id=current_user.id,
        title=title,
        amount=amount,
        category=clean_str(data.get("category")) or DEFAULT_CATEGORY,
    )
    db.session.add(expense)
    db.session.flush()
    log_action(expense, "CREATE", before=None, after=serialize_model(expense))
    db.session.commit()

    return jsonify(expense.to_dict()), 201


@expenses_bp.route("/<int:expense_id>", methods=["DELETE"])
@login_required
def delete_expense(expense_id: int):
    expense = get_owned_or_404(Expense, expense_id)
    before_snapshot = serialize_model(expense)

    db.session.delete(expense)
    db.session.flush()
    log_action(expense, "DELETE", before=before_snapshot, after=None)
    db.session.commit()

    return jsonify({"deleted": expense_id})
