"""
orderdesk/blueprints/suppliers/routes.py

Suppliers and their ledgers.

- A supplier's balance is never stored: it is PURCHASE minus PAYMENT over
  its ledger entries (see finance.supplier_debt).
- Ledger entries are append-only here.
"""

from __future__ import annotations

from datetime import date

from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required
from sqlalchemy import func, or_

from ...audit import log_action, serialize_model
from ...extensions import db
from ...models import TRANSACTION_TYPES, Supplier, SupplierLedgerEntry
from ...security import get_owned_or_404, owned_query
from ...utils import clean_str, json_error, parse_date, parse_decimal, payload

suppliers_bp = Blueprint("suppliers", __name__, url_prefix="/suppliers")


@suppliers_bp.route("", methods=["GET"])
@login_required
def list_suppliers():
    query = owned_query(Supplier)

    term = clean_str(request.args.get("q"))
    if term:
        query = query.filter(
            or_(
                func.lower(Supplier.name).contains(term.lower()),
                Supplier.phone.contains(term),
            )
        )

    suppliers = query.order_by(Supplier.name.asc()).all()
    return jsonify({"suppliers": [s.to_dict() for s in suppliers]})


@suppliers_bp.route("", methods=["POST"])
@login_required
def create_supplier():
    data = payload()

    name = clean_str(data.get("name"))
    if not name:
        return json_error("Supplier name is required.")

    supplier = Supplier(account_id=current_user.id, name=name, phone=clean_str(data.get("phone")))
    db.session.add(supplier)
    db.session.flush()
    log_action(supplier, "CREATE", before=None, after=serialize_model(supplier))
    db.session.commit()

    return jsonify(supplier.to_dict()), 201


@suppliers_bp.route("/<int:supplier_id>", methods=["GET"])
@login_required
def get_supplier(supplier_id: int):
    """Supplier with its ledger, newest transaction first."""
    supplier = get_owned_or_404(Supplier, supplier_id)
    body = supplier.to_dict()
    body["ledger"] = [e.to_dict() for e in supplier.ledger_entries]
    return jsonify(body)


@suppliers_bp.route("/<int:supplier_id>/ledger", methods=["POST"])
@login_required
def add_ledger_entry(supplier_id: int):
    """Record a PURCHASE (we owe more) or a PAYMENT (we owe less)."""
    supplier = get_owned_or_404(Supplier, supplier_id)
    data = payload()

    transaction_type = (clean_str(data.get("transaction_type")) or "").upper()
    if transaction_type not in TRANSACTION_TYPES:
        return json_error("Transaction type must be PURCHASE or PAYMENT.")

    amount = parse_decimal(data.get("amount"))
    if amount is None or amount <= 0:
        return json_error("Amount must be a positive number.")

    raw_date = data.get("transaction_date")
    transaction_date = parse_date(raw_date)
    if raw_date not in (None, "") and transaction_date is None:
        return json_error("Invalid transaction date.")

    entry = SupplierLedgerEntry(
        account_id=current_user.id,
        supplier_id=supplier.id,
        transaction_type=transaction_type,
        amount=amount,
        notes=clean_str(data.get("notes")),
        transaction_date=transaction_date or date.today(),
    )
    db.session.add(entry)
    db.session.flush()
    log_action(entry, "CREATE", before=None, after=serialize_model(entry))
    db.session.commit()

    return jsonify({"entry": entry.to_dict(), "balance": supplier.balance}), 201
