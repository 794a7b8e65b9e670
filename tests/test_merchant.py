"""Tests for merchant normalization."""

import pytest

from billwise.utils.merchant import normalize_merchant_pattern, patterns_overlap


@pytest.mark.parametrize(
    "name,expected",
    [
        ("Netflix", "NETFLIX"),
        ("  netflix  ", "NETFLIX"),
        ("Amazon   Prime\tVideo", "AMAZON PRIME VIDEO"),
        ("", ""),
        ("   ", ""),
        (None, ""),
    ],
)
def test_normalize_merchant_pattern(name, expected):
    assert normalize_merchant_pattern(name) == expected


def test_patterns_overlap():
    assert patterns_overlap("NETFLIX", "NETFLIX")
    assert patterns_overlap("NETFLIX", "NETFLIX.COM")
    assert patterns_overlap("AMAZON PRIME VIDEO", "AMAZON PRIME")
    assert not patterns_overlap("NETFLIX", "SPOTIFY")
    assert not patterns_overlap("", "NETFLIX")
