"""
orderdesk/audit.py

Audit logging helper utilities.

Goals:
- Capture WHO did WHAT to WHICH record, with BEFORE/AFTER snapshots.
- Store an email snapshot to preserve identity even if the email changes later.
- Store IP address for traceability.

IMPORTANT:
- This helper ADDS AuditLog entries to the current SQLAlchemy session.
  The calling route controls transaction boundaries (commit/rollback).
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

from flask import request
from flask_login import current_user

from .extensions import db
from .models import AuditLog


def _safe_str(value: Any) -> Optional[str]:
    """Stable string form of a column value (Decimal, datetime, ...)."""
    if value is None:
        return None
    try:
        return str(value)
    except Exception:
        return repr(value)


def serialize_model(instance: Any) -> Dict[str, Optional[str]]:
    """
    Snapshot a SQLAlchemy model instance as {column: str(value)}.

    Captures only scalar column values (not relationships).
    """
    data: Dict[str, Optional[str]] = {}
    for column in instance.__table__.columns:
        data[column.name] = _safe_str(getattr(instance, column.name))
    return data


def log_action(
    entity: Any,
    action: str,
    *,
    before: Optional[Dict[str, Any]] = None,
    after: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Add an AuditLog entry to the current db session.

    Parameters:
        entity: SQLAlchemy model instance with .id (flush first on CREATE)
        action: CREATE / UPDATE / DELETE
        before: dict snapshot (optional)
        after: dict snapshot (optional)
    """
    entity_id = getattr(entity, "id", None)
    if entity_id is None:
        raise ValueError("log_action entity must have an 'id' attribute (after flush).")

    authenticated = current_user.is_authenticated

    entry = AuditLog(
        account_id=current_user.id if authenticated else None,
        email_snapshot=current_user.email if authenticated else None,
        entity_type=entity.__class__.__name__,
        entity_id=int(entity_id),
        action=str(action),
        before_data=json.dumps(before, ensure_ascii=False) if before else None,
        after_data=json.dumps(after, ensure_ascii=False) if after else None,
        ip_address=request.remote_addr,
    )
    db.session.add(entry)
