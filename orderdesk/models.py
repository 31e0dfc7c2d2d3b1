"""
Order Desk – Domain Models

Every business entity belongs to exactly one Account (account_id) and is never
visible to another account. Routes must always filter on the owner.

Entities:
- Account (login user / store)
- Order, Expense
- Supplier + SupplierLedgerEntry (balance is derived, never stored)
- Campaign (soft-deleted via is_active)
- BlacklistEntry, DeliveryRate
- AuditLog

MONEY:
- Numeric(12, 2) columns, handled as Decimal.
- delivery_cost on an Order is collected from the customer and kept by the
  courier. It is never merchant revenue (see orderdesk/finance.py).
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP

from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash

from .extensions import db


ORDER_STATUSES = ("new", "processing", "out_for_delivery", "delivered", "returned")

TRANSACTION_PURCHASE = "PURCHASE"
TRANSACTION_PAYMENT = "PAYMENT"
TRANSACTION_TYPES = (TRANSACTION_PURCHASE, TRANSACTION_PAYMENT)

CAMPAIGN_PLATFORMS = ("facebook", "instagram", "tiktok", "snapchat", "google", "other")


# ---------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------
def _to_decimal(value) -> Decimal:
    """Convert Numeric/None to Decimal safely."""
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value))


def _money(x: Decimal) -> Decimal:
    return x.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def _iso(value) -> str | None:
    if value is None:
        return None
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


# ---------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------
class Account(UserMixin, db.Model):
    """Store owner login. All business data hangs off an Account."""

    __tablename__ = "accounts"

    id = db.Column(db.Integer, primary_key=True)

    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)

    store_name = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(30), nullable=True)

    is_active = db.Column(db.Boolean, default=True, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    def set_password(self, password: str):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "store_name": self.store_name,
            "phone": self.phone,
        }

    def __repr__(self):
        return f"<Account {self.email}>"


# ---------------------------------------------------------------------
# Orders & expenses
# ---------------------------------------------------------------------
class Order(db.Model):
    __tablename__ = "orders"

    id = db.Column(db.Integer, primary_key=True)

    account_id = db.Column(
        db.Integer,
        db.ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    customer_name = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(30), nullable=False, index=True)
    governorate = db.Column(db.String(100), nullable=False, index=True)
    address = db.Column(db.String(255), nullable=True)

    delivery_duration = db.Column(db.String(50), nullable=True)
    due_date = db.Column(db.Date, nullable=True)

    product = db.Column(db.String(255), nullable=False, index=True)

    # Net item price (what the merchant sells the product for)
    price = db.Column(db.Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    cost_price = db.Column(db.Numeric(12, 2), nullable=True)
    # Courier pass-through: collected from the customer, kept by the courier
    delivery_cost = db.Column(db.Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    discount = db.Column(db.Numeric(12, 2), nullable=False, default=Decimal("0.00"))

    status = db.Column(db.String(30), nullable=False, default="new", index=True)
    is_collected = db.Column(db.Boolean, nullable=False, default=False, index=True)

    campaign_id = db.Column(
        db.Integer,
        db.ForeignKey("campaigns.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    campaign = db.relationship("Campaign", backref=db.backref("orders", lazy=True))

    @property
    def customer_total(self) -> Decimal:
        """Amount the courier collects from the customer (receipt total)."""
        return _money(
            _to_decimal(self.price) + _to_decimal(self.delivery_cost) - _to_decimal(self.discount)
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customer_name": self.customer_name,
            "phone": self.phone,
            "governorate": self.governorate,
            "address": self.address,
            "delivery_duration": self.delivery_duration,
            "due_date": _iso(self.due_date),
            "product": self.product,
            "price": _to_decimal(self.price),
            "cost_price": None if self.cost_price is None else _to_decimal(self.cost_price),
            "delivery_cost": _to_decimal(self.delivery_cost),
            "discount": _to_decimal(self.discount),
            "status": self.status,
            "is_collected": bool(self.is_collected),
            "campaign_id": self.campaign_id,
            "created_at": _iso(self.created_at),
        }

    def __repr__(self):
        return f"<Order {self.id} {self.status}>"


class Expense(db.Model):
    """Operating expense. Created and deleted, never edited."""

    __tablename__ = "expenses"

    id = db.Column(db.Integer, primary_key=True)

    account_id = db.Column(
        db.Integer,
        db.ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    title = db.Column(db.String(255), nullable=False)
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    category = db.Column(db.String(100), nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "amount": _to_decimal(self.amount),
            "category": self.category,
            "created_at": _iso(self.created_at),
        }


# ---------------------------------------------------------------------
# Suppliers
# ---------------------------------------------------------------------
class Supplier(db.Model):
    __tablename__ = "suppliers"

    id = db.Column(db.Integer, primary_key=True)

    account_id = db.Column(
        db.Integer,
        db.ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(30), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    ledger_entries = db.relationship(
        "SupplierLedgerEntry",
        back_populates="supplier",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="SupplierLedgerEntry.transaction_date.desc()",
    )

    @property
    def balance(self) -> Decimal:
        """What the account still owes this supplier."""
        from .finance import supplier_debt

        return supplier_debt(self.ledger_entries)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "balance": self.balance,
            "created_at": _iso(self.created_at),
        }

    def __repr__(self):
        return f"<Supplier {self.name}>"


class SupplierLedgerEntry(db.Model):
    """PURCHASE increases the debt to a supplier, PAYMENT decreases it."""

    __tablename__ = "supplier_ledger"

    id = db.Column(db.Integer, primary_key=True)

    account_id = db.Column(
        db.Integer,
        db.ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    supplier_id = db.Column(
        db.Integer,
        db.ForeignKey("suppliers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    transaction_type = db.Column(db.String(20), nullable=False, index=True)
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    notes = db.Column(db.Text, nullable=True)
    transaction_date = db.Column(db.Date, nullable=False, default=date.today, index=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    supplier = db.relationship("Supplier", back_populates="ledger_entries")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "supplier_id": self.supplier_id,
            "transaction_type": self.transaction_type,
            "amount": _to_decimal(self.amount),
            "notes": self.notes,
            "transaction_date": _iso(self.transaction_date),
        }


# ---------------------------------------------------------------------
# Marketing, blacklist, delivery rates
# ---------------------------------------------------------------------
class Campaign(db.Model):
    """Marketing campaign used for order attribution. Never hard-deleted."""

    __tablename__ = "campaigns"

    id = db.Column(db.Integer, primary_key=True)

    account_id = db.Column(
        db.Integer,
        db.ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name = db.Column(db.String(255), nullable=False)
    platform = db.Column(db.String(30), nullable=False, default="other")
    is_active = db.Column(db.Boolean, default=True, nullable=False, index=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "platform": self.platform,
            "is_active": bool(self.is_active),
            "created_at": _iso(self.created_at),
        }


class BlacklistEntry(db.Model):
    __tablename__ = "customer_blacklist"

    id = db.Column(db.Integer, primary_key=True)

    account_id = db.Column(
        db.Integer,
        db.ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    phone = db.Column(db.String(30), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=True)
    reason = db.Column(db.String(255), nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    __table_args__ = (db.UniqueConstraint("account_id", "phone", name="uq_blacklist_account_phone"),)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "phone": self.phone,
            "name": self.name,
            "reason": self.reason,
            "created_at": _iso(self.created_at),
        }


class DeliveryRate(db.Model):
    """Per-account delivery price for a governorate. Only pre-fills forms."""

    __tablename__ = "delivery_rates"

    id = db.Column(db.Integer, primary_key=True)

    account_id = db.Column(
        db.Integer,
        db.ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    governorate = db.Column(db.String(100), nullable=False)
    price = db.Column(db.Numeric(12, 2), nullable=False, default=Decimal("0.00"))

    __table_args__ = (
        db.UniqueConstraint("account_id", "governorate", name="uq_delivery_rate_account_governorate"),
    )

    def to_dict(self) -> dict:
        return {"governorate": self.governorate, "price": _to_decimal(self.price)}


# ---------------------------------------------------------------------
# Audit
# ---------------------------------------------------------------------
class AuditLog(db.Model):
    """Mutation log: who changed which record, with before/after snapshots."""

    __tablename__ = "audit_logs"

    id = db.Column(db.Integer, primary_key=True)

    account_id = db.Column(db.Integer, db.ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True, index=True)
    email_snapshot = db.Column(db.String(255), nullable=True)

    entity_type = db.Column(db.String(50), nullable=False, index=True)
    entity_id = db.Column(db.Integer, nullable=False, index=True)

    action = db.Column(db.String(20), nullable=False, index=True)

    before_data = db.Column(db.Text, nullable=True)
    after_data = db.Column(db.Text, nullable=True)

    ip_address = db.Column(db.String(45), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
