"""
Customer blacklist routes.

A phone on the blacklist blocks new orders for that number (see risk.py).
Phones are unique per account; adding one twice answers 409.
"""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError

from ...audit import log_action, serialize_model
from ...extensions import db
from ...models import BlacklistEntry
from ...risk import normalize_phone
from ...security import get_owned_or_404, owned_query
from ...utils import clean_str, json_error, payload

blacklist_bp = Blueprint("blacklist", __name__, url_prefix="/blacklist")

DEFAULT_REASON = "Refused to receive the order"


@blacklist_bp.route("", methods=["GET"])
@login_required
def list_blacklist():
    query = owned_query(BlacklistEntry)

    term = clean_str(request.args.get("q"))
    if term:
        query = query.filter(
            or_(
                BlacklistEntry.phone.contains(term),
                func.lower(BlacklistEntry.name).contains(term.lower()),
            )
        )

    entries = query.order_by(BlacklistEntry.created_at.desc(), BlacklistEntry.id.desc()).all()
    return jsonify({"entries": [e.to_dict() for e in entries]})


@blacklist_bp.route("", methods=["POST"])
@login_required
def block_phone():
    data = payload()

    phone = normalize_phone(data.get("phone"))
    if not phone:
        return json_error("Phone is required.")

    reason = clean_str(data.get("reason")) or DEFAULT_REASON

    entry = BlacklistEntry(
        account_id=current_user.id,
        phone=phone,
        name=clean_str(data.get("name")),
        reason=reason,
    )
    db.session.add(entry)
    try:
        db.session.flush()
    except IntegrityError:
        db.session.rollback()
        current_app.logger.info("Phone %s already blacklisted for account %s", phone, current_user.id)
        return json_error("This phone number is already blocked.", 409)

    log_action(entry, "CREATE", before=None, after=serialize_model(entry))
    db.session.commit()

    return jsonify(entry.to_dict()), 201


@blacklist_bp.route("/<int:entry_id>", methods=["DELETE"])
@login_required
def unblock(entry_id: int):
    entry = get_owned_or_404(BlacklistEntry, entry_id)
    before_snapshot = serialize_model(entry)

    db.session.delete(entry)
    db.session.flush()
    log_action(entry, "DELETE", before=before_snapshot, after=None)
    db.session.commit()

    return jsonify({"deleted": entry_id})
