"""
orderdesk/__init__.py

Flask application factory for the Order Desk backend.

The single-page dashboard talks to this app over JSON:
- every business record is owned by one Account (server-side scoping)
- dashboard figures are computed by pure functions over the loaded records
- any store failure is logged, rolled back and reported with a generic
  message; the client then reloads the full snapshot (GET /dashboard)
"""

from __future__ import annotations

import click
from flask import Flask, jsonify
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from werkzeug.exceptions import HTTPException

from .extensions import csrf, db, login_manager, migrate
from .models import Account
from .security import access_lock_guard
from .utils import json_error

GENERIC_STORE_ERROR = "Something went wrong while saving. Please reload and try again."
DUPLICATE_ERROR = "This record already exists."


def create_app(config_object: str | object = "config.Config") -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_object)
    app.json.ensure_ascii = False

    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Extensions
    db.init_app(app)
    migrate.init_app(app, db)
    csrf.init_app(app)

    login_manager.init_app(app)

    @login_manager.user_loader
    def load_account(account_id: str) -> Account | None:
        """Load account for Flask-Login."""
        try:
            account = db.session.get(Account, int(account_id))
        except (TypeError, ValueError):
            return None
        if account is None or not account.is_active:
            return None
        return account

    @login_manager.unauthorized_handler
    def unauthorized():
        return json_error("Login required.", 401)

    # ----------------------------------------------------------------------
    # Access lock (app-level unlock flag)
    # ----------------------------------------------------------------------
    @app.before_request
    def _access_lock_hook():
        return access_lock_guard()

    # ----------------------------------------------------------------------
    # Blueprints
    # ----------------------------------------------------------------------
    from .blueprints.auth import auth_bp
    from .blueprints.orders import orders_bp
    from .blueprints.expenses import expenses_bp
    from .blueprints.suppliers import suppliers_bp
    from .blueprints.campaigns import campaigns_bp
    from .blueprints.blacklist import blacklist_bp
    from .blueprints.delivery_rates import delivery_rates_bp
    from .blueprints.dashboard import dashboard_bp
    from .blueprints.calculator import calculator_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(orders_bp)
    app.register_blueprint(expenses_bp)
    app.register_blueprint(suppliers_bp)
    app.register_blueprint(campaigns_bp)
    app.register_blueprint(blacklist_bp)
    app.register_blueprint(delivery_rates_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(calculator_bp)

    # ----------------------------------------------------------------------
    # Errors: one JSON shape, every store failure treated the same way
    # ----------------------------------------------------------------------
    @app.errorhandler(HTTPException)
    def _http_error(exc: HTTPException):
        return json_error(exc.description or exc.name, exc.code or 500)

    @app.errorhandler(IntegrityError)
    def _integrity_error(exc: IntegrityError):
        db.session.rollback()
        app.logger.warning("Constraint violation: %s", exc.orig)
        return json_error(DUPLICATE_ERROR, 409, reload=True)

    @app.errorhandler(SQLAlchemyError)
    def _store_error(exc: SQLAlchemyError):
        db.session.rollback()
        app.logger.exception("Store operation failed")
        return json_error(GENERIC_STORE_ERROR, 500, reload=True)

    # ----------------------------------------------------------------------
    # CLI
    # ----------------------------------------------------------------------
    @app.cli.command("init-db")
    def init_db_command():
        """Create all tables (development without migrations)."""
        db.create_all()
        click.echo("Database tables created.")

    @app.cli.command("seed-rates")
    def seed_rates_command():
        """Seed 0-priced delivery rates for every governorate and account."""
        from .seed import seed_all_delivery_rates

        created = seed_all_delivery_rates()
        click.echo(f"Delivery rates seeded ({created} created).")

    @app.cli.command("create-account")
    @click.argument("email")
    @click.password_option()
    @click.option("--store-name", default=None)
    def create_account_command(email: str, password: str, store_name: str | None):
        """Create a store account."""
        from .blueprints.auth.routes import create_account

        account, error = create_account(email, password, store_name=store_name)
        if error:
            raise click.ClickException(error)
        db.session.commit()
        click.echo(f"Account {account.email} created.")

    # ----------------------------------------------------------------------
    # Home
    # ----------------------------------------------------------------------
    @app.route("/")
    def index():
        """Health/identity probe."""
        return jsonify({"app": app.config.get("APP_NAME"), "status": "ok"})

    return app
