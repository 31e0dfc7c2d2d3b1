"""
Campaign routes.

Campaigns are never hard-deleted: DELETE only sets is_active = False, so old
orders keep their attribution.
"""

from __future__ import annotations

from flask import Blueprint, jsonify
from flask_login import current_user, login_required

from ...analytics import campaign_stats
from ...audit import log_action, serialize_model
from ...extensions import db
from ...models import CAMPAIGN_PLATFORMS, Campaign, Order
from ...security import get_owned_or_404, owned_query
from ...utils import clean_str, json_error, payload

campaigns_bp = Blueprint("campaigns", __name__, url_prefix="/campaigns")


def _active_campaigns():
    return (
        owned_query(Campaign)
        .filter_by(is_active=True)
        .order_by(Campaign.created_at.desc(), Campaign.id.desc())
        .all()
    )


@campaigns_bp.route("", methods=["GET"])
@login_required
def list_campaigns():
    return jsonify(
        {
            "campaigns": [c.to_dict() for c in _active_campaigns()],
            "platforms": list(CAMPAIGN_PLATFORMS),
        }
    )


@campaigns_bp.route("", methods=["POST"])
@login_required
def create_campaign():
    data = payload()

    name = clean_str(data.get("name"))
    if not name:
        return json_error("Campaign name is required.")

    platform = (clean_str(data.get("platform")) or "other").lower()
    if platform not in CAMPAIGN_PLATFORMS:
        return json_error("Invalid platform.")

    campaign = Campaign(account_id=current_user.id, name=name, platform=platform, is_active=True)
    db.session.add(campaign)
    db.session.flush()
    log_action(campaign, "CREATE", before=None, after=serialize_model(campaign))
    db.session.commit()

    return jsonify(campaign.to_dict()), 201


@campaigns_bp.route("/<int:campaign_id>", methods=["DELETE"])
@login_required
def deactivate_campaign(campaign_id: int):
    campaign = get_owned_or_404(Campaign, campaign_id)
    before_snapshot = serialize_model(campaign)

    campaign.is_active = False
    db.session.flush()
    log_action(campaign, "UPDATE", before=before_snapshot, after=serialize_model(campaign))
    db.session.commit()

    return jsonify(campaign.to_dict())


@campaigns_bp.route("/stats", methods=["GET"])
@login_required
def stats():
    """Orders and revenue per active campaign, plus orders without a source."""
    orders = owned_query(Order).all()
    return jsonify(campaign_stats(orders, _active_campaigns()))
