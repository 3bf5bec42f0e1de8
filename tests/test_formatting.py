"""Tests for price and large-number formatting."""

import math

from coinboard.formatting import (
    NOT_AVAILABLE,
    format_change,
    format_count,
    format_currency,
    format_large_number,
    format_percent,
)


class TestFormatCurrency:
    """Tests for format_currency."""

    def test_whole_units_grouped_two_decimals(self):
        assert format_currency(1234.5) == "$1,234.50"
        assert format_currency(1) == "$1.00"
        assert format_currency(67_432.129) == "$67,432.13"

    def test_sub_dollar_four_decimals(self):
        assert format_currency(0.5) == "$0.5000"
        assert format_currency(0.01) == "$0.0100"

    def test_sub_cent_eight_decimals(self):
        assert format_currency(0.000001234) == "$0.00000123"
        assert format_currency(0) == "$0.00000000"

    def test_negative_uses_magnitude(self):
        assert format_currency(-1234.5) == "-$1,234.50"
        assert format_currency(-0.5) == "-$0.5000"

    def test_undefined_input_is_not_available(self):
        assert format_currency(None) == NOT_AVAILABLE
        assert format_currency(math.nan) == NOT_AVAILABLE
        assert format_currency(math.inf) == NOT_AVAILABLE


class TestFormatLargeNumber:
    """Tests for format_large_number."""

    def test_suffixes(self):
        assert format_large_number(2_500_000_000_000) == "$2.50T"
        assert format_large_number(1_500_000_000) == "$1.50B"
        assert format_large_number(12_340_000) == "$12.34M"
        assert format_large_number(1_500) == "$1.50K"

    def test_below_thousand_raw(self):
        assert format_large_number(999) == "$999.00"
        assert format_large_number(0.25) == "$0.25"

    def test_falsy_and_undefined_not_available(self):
        assert format_large_number(0) == NOT_AVAILABLE
        assert format_large_number(0.0) == NOT_AVAILABLE
        assert format_large_number(None) == NOT_AVAILABLE
        assert format_large_number(math.nan) == NOT_AVAILABLE

    def test_negative(self):
        assert format_large_number(-2_000_000) == "-$2.00M"


def test_format_change_arrows():
    assert format_change(2.5) == "↑ 2.50%"
    assert format_change(-1.2) == "↓ 1.20%"
    assert format_change(0) == "↑ 0.00%"
    assert format_change(None) == "↑ 0.00%"


def test_format_percent_and_count():
    assert format_percent(52.34) == "52.3%"
    assert format_percent(None) == NOT_AVAILABLE
    assert format_count(12345.7) == "12,345"
    assert format_count(None) == NOT_AVAILABLE
