"""Utility functions for billwise."""

from billwise.utils.date_parser import parse_date
from billwise.utils.amount_parser import parse_amount
from billwise.utils.merchant import normalize_merchant_pattern

__all__ = ["parse_date", "parse_amount", "normalize_merchant_pattern"]
