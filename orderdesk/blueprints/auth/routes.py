"""
Authentication Routes

Provides:
- /auth/register
- /auth/login
- /auth/logout
- /auth/me
- /auth/csrf   (token for the X-CSRFToken header)
- /auth/unlock (app-level access code, works before login)

Rules:
- Emails are stored lower-cased and must be unique.
- Only active accounts may log in.
"""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required, login_user, logout_user
from flask_wtf.csrf import generate_csrf

from ...extensions import db
from ...models import Account
from ...security import grant_access, is_unlocked, verify_access_code
from ...utils import clean_str, json_error, payload

auth_bp = Blueprint("auth", __name__, url_prefix="/auth")

MIN_PASSWORD_LENGTH = 6
DUPLICATE_EMAIL_ERROR = "An account with this email already exists."


def create_account(
    email: str | None,
    password: str | None,
    *,
    store_name: str | None = None,
    phone: str | None = None,
) -> tuple[Account | None, str | None]:
    """
    Validate and add a new Account to the session (caller commits).

    Returns (account, None) on success or (None, error message).
    """
    email = (clean_str(email) or "").lower()
    if not email or "@" not in email:
        return None, "A valid email is required."
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        return None, f"Password must be at least {MIN_PASSWORD_LENGTH} characters."
    if Account.query.filter_by(email=email).first():
        return None, DUPLICATE_EMAIL_ERROR

    account = Account(email=email, store_name=clean_str(store_name), phone=clean_str(phone))
    account.set_password(password)
    db.session.add(account)
    db.session.flush()
    return account, None


# ============================================================
# REGISTER / LOGIN / LOGOUT
# ============================================================

@auth_bp.route("/register", methods=["POST"])
def register():
    data = payload()
    account, error = create_account(
        data.get("email"),
        data.get("password"),
        store_name=data.get("store_name"),
        phone=data.get("phone"),
    )
    if error:
        status = 409 if error == DUPLICATE_EMAIL_ERROR else 400
        return json_error(error, status)

    db.session.commit()
    login_user(account)
    current_app.logger.info("Account %s registered", account.email)
    return jsonify(account.to_dict()), 201


@auth_bp.route("/login", methods=["POST"])
def login():
    """
    Authenticate an account.

    - Credentials validated via password hash
    - Inactive accounts are refused
    """
    data = payload()
    email = (clean_str(data.get("email")) or "").lower()
    password = data.get("password") or ""

    account = Account.query.filter_by(email=email).first()

    if not account or not account.check_password(password):
        return json_error("Wrong email or password.", 401)

    if not account.is_active:
        return json_error("This account is disabled.", 403)

    login_user(account, remember=bool(data.get("remember")))
    return jsonify(account.to_dict())


@auth_bp.route("/logout", methods=["POST"])
@login_required
def logout():
    logout_user()
    return jsonify({"ok": True})


@auth_bp.route("/me")
@login_required
def me():
    return jsonify(current_user.to_dict())


# ============================================================
# CSRF / ACCESS LOCK
# ============================================================

@auth_bp.route("/csrf")
def csrf_token():
    return jsonify({"csrf_token": generate_csrf()})


@auth_bp.route("/unlock", methods=["GET", "POST"])
def unlock():
    """
    GET reports the lock state; POST checks an access code.

    A valid code unlocks the whole app for this browser session.
    """
    if request.method == "GET":
        return jsonify({"unlocked": is_unlocked()})

    code = clean_str(payload().get("code"))
    if not verify_access_code(code):
        current_app.logger.info("Rejected access code attempt from %s", request.remote_addr)
        return json_error("Invalid access code.", 403, locked=True)

    grant_access()
    return jsonify({"unlocked": True})
