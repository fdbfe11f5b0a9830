from decimal import Decimal

import pytest

from src.shared.utils.money import format_money, round_money, to_decimal


class TestRoundMoney:
    """Tests for round_money function."""

    def test_round_half_up(self):
        """Test ROUND_HALF_UP behavior."""
        assert round_money(10.125) == Decimal("10.13")
        assert round_money(10.124) == Decimal("10.12")
        assert round_money(10.115) == Decimal("10.12")  # banker's rounding edge case
        assert round_money(10.145) == Decimal("10.15")

    def test_from_decimal(self):
        """Test rounding from Decimal input."""
        assert round_money(Decimal("10.125")) == Decimal("10.13")
        assert round_money(Decimal("99.999")) == Decimal("100.00")

    def test_from_string(self):
        """Test rounding from string input."""
        assert round_money("10.125") == Decimal("10.13")
        assert round_money("0.001") == Decimal("0.00")

    def test_from_int(self):
        """Test rounding from int input."""
        assert round_money(100) == Decimal("100.00")
        assert round_money(0) == Decimal("0.00")

    def test_negative_numbers(self):
        """Test rounding negative numbers."""
        assert round_money(-10.125) == Decimal("-10.12")  # rounds toward zero
        assert round_money(-10.126) == Decimal("-10.13")

    def test_precision(self):
        """Test that result always has 2 decimal places."""
        result = round_money(10)
        assert str(result) == "10.00"

        result = round_money(10.1)
        assert str(result) == "10.10"


class TestToDecimal:
    """Tests for the lenient upstream number conversion."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("12.5", Decimal("12.5")),
            (1500.5, Decimal("1500.5")),
            (7, Decimal("7")),
            ("1,500.50", Decimal("1500.50")),
            (" 42 ", Decimal("42")),
        ],
    )
    def test_numeric_input(self, raw, expected):
        assert to_decimal(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "abc", True, "NaN", "Infinity"])
    def test_missing_or_garbage_is_zero(self, raw):
        assert to_decimal(raw) == Decimal("0")

    def test_decimal_passes_through(self):
        value = Decimal("3.14159")
        assert to_decimal(value) is value


class TestFormatMoney:
    """Tests for the report cell money format."""

    def test_thousands_and_two_decimals(self):
        assert format_money(1234.5) == "1,234.50"
        assert format_money("1000000") == "1,000,000.00"
        assert format_money(Decimal("0.005")) == "0.01"

    def test_missing_value(self):
        assert format_money(None) == "0.00"
        assert format_money("n/a") == "0.00"

    def test_negative(self):
        assert format_money(-1234.567) == "-1,234.57"
