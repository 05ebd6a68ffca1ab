"""
Tests for the shared display formatters.
"""

import pytest

from receipt_engine.core.formatting import (
    format_currency,
    format_date,
    format_indian_number,
    format_number_limited,
    format_time,
    to_display,
    to_number,
)


class TestToNumber:
    """Best-effort numeric coercion."""

    def test_numbers_pass_through(self):
        assert to_number(12) == 12.0
        assert to_number(2.5) == 2.5

    def test_numeric_strings(self):
        assert to_number("  7.5 ") == 7.5
        assert to_number("12.5kg") == 12.5
        assert to_number("-3") == -3.0

    def test_garbage_is_zero(self):
        assert to_number("abc") == 0.0
        assert to_number(None) == 0.0
        assert to_number([1, 2]) == 0.0

    def test_booleans_and_non_finite_are_zero(self):
        assert to_number(True) == 0.0
        assert to_number(float("nan")) == 0.0
        assert to_number(float("inf")) == 0.0

    def test_int_beyond_float_range_is_zero(self):
        """json.load turns a long integer literal into an int float() cannot hold."""
        assert to_number(10 ** 400) == 0.0
        assert to_number(-(10 ** 400)) == 0.0


class TestToDisplay:
    def test_integral_float_drops_fraction(self):
        assert to_display(1040.0) == "1040"

    def test_other_scalars(self):
        assert to_display(2.5) == "2.5"
        assert to_display(7) == "7"
        assert to_display("x") == "x"
        assert to_display(True) == "true"
        assert to_display(None) == ""


class TestFormatCurrency:
    def test_western_grouping(self):
        assert format_currency(1234567.5) == "₹1,234,567.50"

    def test_small_values(self):
        assert format_currency(0) == "₹0.00"
        assert format_currency(45) == "₹45.00"

    def test_unparseable_is_zero(self):
        assert format_currency("abc") == "₹0.00"
        assert format_currency(None) == "₹0.00"

    def test_huge_int_does_not_raise(self):
        assert format_currency(10 ** 400) == "₹0.00"
        assert format_indian_number(10 ** 400) == "0.00"
        assert format_number_limited(10 ** 400, 7) == "0.00"

    def test_string_input(self):
        assert format_currency("1000") == "₹1,000.00"

    def test_negative(self):
        assert format_currency(-1234) == "₹-1,234.00"

    def test_tie_rounds_away_from_zero(self):
        """0.125 is exact in binary, so it is a true tie."""
        assert format_currency(0.125) == "₹0.13"


class TestFormatIndianNumber:
    def test_lakh_grouping(self):
        assert format_indian_number(1234567.5) == "12,34,567.50"

    def test_five_digits(self):
        assert format_indian_number(12345) == "12,345.00"

    def test_crore_grouping(self):
        assert format_indian_number(123456789) == "12,34,56,789.00"

    def test_negative(self):
        assert format_indian_number(-1234567) == "-12,34,567.00"

    def test_unparseable_is_zero(self):
        assert format_indian_number("n/a") == "0.00"

    @pytest.mark.parametrize("value", [0, 5, 42, 99.99, 100, 999, "42", -7.5])
    def test_agrees_with_western_below_a_thousand(self, value):
        """No grouping comma appears for integer parts of at most 3 digits."""
        assert format_indian_number(value) == format_currency(value)[1:]


class TestFormatNumberLimited:
    def test_fits(self):
        assert format_number_limited(100, 7) == "100.00"

    def test_truncates_without_rounding(self):
        # 99999.995 is stored as 99999.99499..., formats to "99,999.99"
        result = format_number_limited(99999.995, 7)
        assert result == "99,999."
        assert len(result) == 7

    def test_truncates_amount_budget(self):
        assert format_number_limited(1234567.891, 8) == "1,234,56"

    @pytest.mark.parametrize("limit", range(0, 14))
    @pytest.mark.parametrize("value", [0, 1.5, 999.99, 12345.678, -98765432.1, "junk"])
    def test_never_longer_than_limit(self, value, limit):
        assert len(format_number_limited(value, limit)) <= limit


class TestFormatDateTime:
    def test_utc_timestamp(self):
        assert format_date("2025-01-15T14:30:00Z") == "15/01/2025"
        assert format_time("2025-01-15T14:30:00Z") == "14:30:00"

    def test_offset_kept_as_wall_clock(self):
        assert format_time("2025-01-15T23:45:10+05:30") == "23:45:10"
        assert format_date("2025-01-15T23:45:10+05:30") == "15/01/2025"

    def test_fractional_seconds_of_any_length(self):
        assert format_time("2025-01-15T14:30:00.5Z") == "14:30:00"
        assert format_date("2025-01-15T14:30:00.5Z") == "15/01/2025"
        assert format_time("2025-01-15T14:30:07.123456789+05:30") == "14:30:07"
        assert format_time("2025-01-15T14:30:07.1234") == "14:30:07"

    def test_date_only(self):
        assert format_date("2025-03-09") == "09/03/2025"
        assert format_time("2025-03-09") == "00:00:00"

    def test_unparseable_returned_unchanged(self):
        assert format_date("not a date") == "not a date"
        assert format_time("yesterday") == "yesterday"

    def test_empty(self):
        assert format_date(None) == ""
        assert format_date("") == ""
        assert format_time(None) == ""
