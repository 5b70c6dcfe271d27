"""Utility functions for hangarledger."""

from hangarledger.utils.amount_parser import (
    parse_amount,
    parse_amount_lenient,
    parse_gallons,
    parse_number_prefix,
)

__all__ = ["parse_amount", "parse_amount_lenient", "parse_gallons", "parse_number_prefix"]
