"""
Utility functions shared across the blueprints:
- request payload access (JSON body or form data)
- parsing helpers for money, ints and dates typed by users
- json_error: the single error response shape
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from flask import jsonify, request


def payload() -> dict:
    """Request body as a dict. Accepts JSON and classic form posts."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def clean_str(value) -> str | None:
    """Strip a text field; empty becomes None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_decimal(value) -> Decimal | None:
    """
    Parse a money amount from user input.

    Thousands separators are allowed ("25,000" -> 25000).
    Returns None for empty/invalid input, including NaN and Infinity.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        result = Decimal(str(value))
    else:
        raw = str(value).strip().replace(",", "")
        if raw == "":
            return None
        try:
            result = Decimal(raw)
        except (InvalidOperation, ValueError):
            return None
    if not result.is_finite():
        return None
    return result


def parse_optional_int(value) -> int | None:
    """Parse optional int from form/query/json."""
    if value is None or isinstance(value, bool):
        return None
    raw = str(value).strip()
    if raw == "":
        return None
    try:
        return int(raw)
    except ValueError:
        return None


def parse_date(value) -> date | None:
    """Parse an ISO date (YYYY-MM-DD). Returns None for empty/invalid input."""
    raw = clean_str(value)
    if raw is None:
        return None
    try:
        return datetime.strptime(raw[:10], "%Y-%m-%d").date()
    except ValueError:
        return None


def json_error(message: str, status: int = 400, **extra):
    """Consistent error body: {"error": message, ...extra}."""
    body = {"error": message}
    body.update(extra)
    return jsonify(body), status
