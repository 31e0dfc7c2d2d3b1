from decimal import Decimal

import pytest

from orderdesk.utils import parse_decimal


@pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf"), Decimal("NaN"), "Infinity", "nan"])
def test_parse_decimal_rejects_non_finite(value):
    assert parse_decimal(value) is None


def test_parse_decimal_accepts_numbers_and_separators():
    assert parse_decimal(2500) == Decimal("2500")
    assert parse_decimal(12.5) == Decimal("12.5")
    assert parse_decimal(" 25,000 ") == Decimal("25000")
    assert parse_decimal("") is None
    assert parse_decimal(True) is None
