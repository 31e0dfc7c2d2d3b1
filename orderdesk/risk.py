"""
orderdesk/risk.py

Customer risk classification for order entry.

Decision table, evaluated top to bottom, first hit wins:

  1. phone is on the account blacklist       -> blocked (message carries the reason)
  2. >= 2 prior orders and >= 50% returned   -> warning (message carries returned/total)
  3. otherwise                               -> safe

blocked must stop the order from being saved; warning is only a banner.

When an existing order is edited and its phone did not change, nothing is
re-evaluated and the previous assessment is kept.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, Optional

from .finance import field

RISK_SAFE = "safe"
RISK_WARNING = "warning"
RISK_BLOCKED = "blocked"

MIN_PHONE_LENGTH = 10
MIN_ORDERS_FOR_RETURN_RATE = 2
RETURN_RATE_THRESHOLD = Decimal("50")


@dataclass(frozen=True)
class RiskAssessment:
    status: str
    message: Optional[str] = None
    returned: int = 0
    total: int = 0

    @property
    def blocks_submission(self) -> bool:
        return self.status == RISK_BLOCKED

    def as_dict(self) -> dict:
        return {
            "status": self.status,
            "message": self.message,
            "returned": self.returned,
            "total": self.total,
        }


SAFE = RiskAssessment(RISK_SAFE)


def normalize_phone(phone: Optional[str]) -> str:
    return (phone or "").strip()


def _blacklist_rule(phone: str, blacklist: list, history: list) -> Optional[RiskAssessment]:
    for entry in blacklist:
        if normalize_phone(field(entry, "phone")) == phone:
            reason = field(entry, "reason") or ""
            return RiskAssessment(RISK_BLOCKED, f"Customer is blacklisted. Reason: {reason}")
    return None


def _return_rate_rule(phone: str, blacklist: list, history: list) -> Optional[RiskAssessment]:
    total = len(history)
    if total < MIN_ORDERS_FOR_RETURN_RATE:
        return None

    returned = sum(1 for order in history if field(order, "status") == "returned")
    rate = Decimal(returned) / Decimal(total) * 100
    if rate < RETURN_RATE_THRESHOLD:
        return None

    return RiskAssessment(
        RISK_WARNING,
        f"High return rate: {returned} of {total} previous orders were returned.",
        returned=returned,
        total=total,
    )


RULES: tuple[Callable[[str, list, list], Optional[RiskAssessment]], ...] = (
    _blacklist_rule,
    _return_rate_rule,
)


def classify_customer(
    phone: Optional[str],
    blacklist: Iterable[Any],
    history: Iterable[Any],
    *,
    original_phone: Optional[str] = None,
    previous: Optional[RiskAssessment] = None,
) -> RiskAssessment:
    """
    Classify a phone number against the blacklist and its order history.

    original_phone is the stored phone of the order being edited (None for a
    new order). If it equals phone, previous (or safe) is returned untouched.
    history must hold the account's orders for this phone only.
    """
    phone = normalize_phone(phone)

    if original_phone is not None and normalize_phone(original_phone) == phone:
        return previous or SAFE

    if len(phone) < MIN_PHONE_LENGTH:
        return SAFE

    blacklist = list(blacklist)
    history = list(history)

    for rule in RULES:
        result = rule(phone, blacklist, history)
        if result is not None:
            return result

    return SAFE
