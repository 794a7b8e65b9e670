"""Merchant name normalization."""

import re


def normalize_merchant_pattern(merchant_name: str) -> str:
    """Normalize a merchant name into the pattern used as a join key.

    The pattern is upper-cased, trimmed, and has internal runs of whitespace
    collapsed to a single space.

    Args:
        merchant_name: Raw merchant name

    Returns:
        Normalized merchant pattern (empty string for blank input)
    """
    if not merchant_name:
        return ""
    return re.sub(r"\s+", " ", merchant_name.strip()).upper()


def patterns_overlap(pattern: str, other: str) -> bool:
    """Check whether two normalized patterns refer to the same merchant.

    Matches when either pattern contains the other, mirroring a SQL
    ``LIKE '%pattern%'`` lookup in both directions.
    """
    if not pattern or not other:
        return False
    return pattern in other or other in pattern
