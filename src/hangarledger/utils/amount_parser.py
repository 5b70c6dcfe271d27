"""Amount parsing utilities.

Source exports are parsed the way a browser's ``parseFloat`` reads them: the
longest leading decimal number wins and anything after it is ignored, so
``"12.50 USD"`` is 12.50 while ``"$12.50"`` has no number at all.
"""

from decimal import Decimal, InvalidOperation
import re
from typing import Optional

_LEADING_NUMBER = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_number_prefix(value: Optional[str]) -> Optional[Decimal]:
    """Return the leading decimal number of ``value``, or None if there is none."""
    if not value:
        return None
    match = _LEADING_NUMBER.match(value)
    if match is None:
        return None
    try:
        number = Decimal(match.group(1))
    except InvalidOperation:
        return None
    if not number.is_finite():
        return None
    return number


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If the string does not start with a number
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")
    amount = parse_number_prefix(amount_str)
    if amount is None:
        raise ValueError(f"Could not parse amount '{amount_str}'")
    return amount


def parse_amount_lenient(amount_str: Optional[str]) -> Decimal:
    """Parse an amount, coercing anything unparseable to zero."""
    amount = parse_number_prefix(amount_str)
    if amount is None:
        return Decimal("0")
    return amount


def parse_gallons(gallons_str: Optional[str]) -> Optional[Decimal]:
    """Parse an optional fuel quantity; blank or unparseable values give None."""
    if not gallons_str:
        return None
    return parse_number_prefix(gallons_str)
