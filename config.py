"""
Application configuration.

Settings for the Order Desk backend: database connection, secret key, the
access-lock codes and logging. Sensitive values come from environment variables
with development defaults. In production set SECRET_KEY, DATABASE_URL and
ACCESS_CODES explicitly.
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent


def _split_codes(raw: str) -> list[str]:
    return [code.strip().upper() for code in raw.split(",") if code.strip()]


class Config:
    """Base configuration shared by all environments."""

    # IMPORTANT: change this in production
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-change-me-please")

    # Database: SQLite for development (simple file in project folder)
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        f"sqlite:///{BASE_DIR / 'orderdesk.db'}"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # CSRF protection; the SPA sends the token in the X-CSRFToken header
    WTF_CSRF_ENABLED = True

    # App-level unlock gate (purchase codes). Not a security boundary.
    ACCESS_LOCK_ENABLED = os.environ.get("ACCESS_LOCK_ENABLED", "1") == "1"
    ACCESS_CODES = _split_codes(os.environ.get("ACCESS_CODES", "ORDERDESK-DEV-0001"))

    # IQD per USD, used by the profit calculator when no rate is given
    DEFAULT_EXCHANGE_RATE = os.environ.get("DEFAULT_EXCHANGE_RATE", "1500")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    APP_NAME = "Order Desk"


class TestingConfig(Config):
    """Configuration used by the test suite."""

    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    WTF_CSRF_ENABLED = False
    ACCESS_LOCK_ENABLED = False
    ACCESS_CODES = ["ORDERDESK-TEST-0001"]
    LOG_LEVEL = "DEBUG"
