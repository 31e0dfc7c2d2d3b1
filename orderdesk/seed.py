"""
orderdesk/seed.py

Seed default delivery-rate rows.

Rules:
- Safe to run multiple times (idempotent).
- Every governorate gets a row per account, priced 0 when missing.
  A 0 rate never overrides a typed delivery cost, so seeding changes no behavior;
  it only gives the settings screen a complete list.
- Existing prices are never touched.
"""

from __future__ import annotations

from decimal import Decimal

from .delivery import GOVERNORATES
from .extensions import db
from .models import Account, DeliveryRate


def seed_delivery_rates(account: Account) -> int:
    """Create missing 0-priced rates for one account. Returns rows created."""
    existing = {
        r.governorate
        for r in DeliveryRate.query.filter_by(account_id=account.id).all()
    }

    created = 0
    for governorate in GOVERNORATES:
        if governorate in existing:
            continue
        db.session.add(
            DeliveryRate(account_id=account.id, governorate=governorate, price=Decimal("0.00"))
        )
        created += 1

    return created


def seed_all_delivery_rates() -> int:
    created = 0
    for account in Account.query.order_by(Account.id.asc()).all():
        created += seed_delivery_rates(account)
    db.session.commit()
    return created
