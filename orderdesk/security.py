"""
orderdesk/security.py

Access control helpers.

Key rules:
- Every record belongs to one Account. Lookups always filter on the owner;
  another account's record is reported as 404, never 403, so ids do not leak.
- The access lock is an app-level feature flag (purchase code), not a security
  boundary. Once a valid code is entered, the browser session stays unlocked.

access_lock_guard() is wired via app.before_request in the app factory.
"""

from __future__ import annotations

from typing import Any, Optional

from flask import abort, current_app, request, session
from flask_login import current_user

from .utils import json_error

UNLOCK_SESSION_KEY = "access_granted"

# Reachable while locked
LOCK_EXEMPT_ENDPOINTS = {"auth.unlock", "auth.csrf_token", "static"}


def _locked():
    return json_error("Application is locked. Enter your access code.", 403, locked=True)


def is_unlocked() -> bool:
    if not current_app.config.get("ACCESS_LOCK_ENABLED", False):
        return True
    return bool(session.get(UNLOCK_SESSION_KEY))


def verify_access_code(code: Optional[str]) -> bool:
    """Codes are compared trimmed and upper-cased."""
    if not code:
        return False
    valid = {c.strip().upper() for c in current_app.config.get("ACCESS_CODES", [])}
    return code.strip().upper() in valid


def grant_access() -> None:
    session[UNLOCK_SESSION_KEY] = True
    session.permanent = True


def access_lock_guard():
    """Global guard: block everything except the unlock endpoints while locked."""
    if is_unlocked():
        return None

    endpoint = (request.endpoint or "").strip()
    if endpoint in LOCK_EXEMPT_ENDPOINTS:
        return None

    return _locked()


def owned_query(model: Any):
    """Base query for model rows owned by the current account."""
    return model.query.filter_by(account_id=current_user.id)


def get_owned_or_404(model: Any, record_id: int) -> Any:
    """Load a record of the current account or abort with 404."""
    record = owned_query(model).filter_by(id=record_id).first()
    if record is None:
        abort(404)
    return record
