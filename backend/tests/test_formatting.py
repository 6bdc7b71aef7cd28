"""
Unit tests for formatting.py
"""

from dcf_engine.services.modeling.formatting import (
    format_currency,
    format_number,
    format_percent,
)


def test_format_currency_compact():
    assert format_currency(1_500_000_000) == "$1.50B"
    assert format_currency(42_150_000) == "$42.15M"
    assert format_currency(500_000) == "$500.00K"
    assert format_currency(999) == "$999"


def test_format_currency_full():
    assert format_currency(1_500, compact=False) == "$1,500"
    assert format_currency(-1_234_567, compact=False) == "-$1,234,567"


def test_format_percent():
    assert format_percent(10.456) == "10.5%"
    assert format_percent(2.5, decimals=2) == "2.50%"


def test_format_number():
    assert format_number(1_234_567.4) == "1,234,567"
    assert format_number(999.6) == "1,000"
