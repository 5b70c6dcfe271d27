"""Tests for amount parsing utilities."""

import pytest
from decimal import Decimal

from hangarledger.utils.amount_parser import (
    parse_amount,
    parse_amount_lenient,
    parse_gallons,
    parse_number_prefix,
)


class TestParseNumberPrefix:
    """Tests for leading-number extraction."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("500", Decimal("500")),
            ("12.50", Decimal("12.50")),
            ("  42", Decimal("42")),
            ("12.50 USD", Decimal("12.50")),
            (".5", Decimal(".5")),
            ("-3", Decimal("-3")),
            ("1e3", Decimal("1e3")),
        ],
    )
    def test_reads_leading_number(self, value, expected):
        assert parse_number_prefix(value) == expected

    @pytest.mark.parametrize("value", ["", None, "$12.50", "abc", "  ", "."])
    def test_no_leading_number(self, value):
        assert parse_number_prefix(value) is None


def test_parse_amount_rejects_garbage():
    """Strict parsing raises for values without a numeric prefix."""
    with pytest.raises(ValueError):
        parse_amount("N/A")
    with pytest.raises(ValueError):
        parse_amount("   ")


def test_parse_amount_lenient_coerces_to_zero():
    """Lenient parsing never fails and never yields a non-finite value."""
    assert parse_amount_lenient("garbage") == Decimal("0")
    assert parse_amount_lenient("") == Decimal("0")
    assert parse_amount_lenient(None) == Decimal("0")
    assert parse_amount_lenient("75.25") == Decimal("75.25")


def test_parse_gallons():
    assert parse_gallons("") is None
    assert parse_gallons(None) is None
    assert parse_gallons("lots") is None
    assert parse_gallons("100.5") == Decimal("100.5")
