"""Tests for lenient amount and text coercion."""

import math

import pytest

from annexure.utils.amounts import MAX_BILL_AMOUNT, coerce_amount, coerce_text


class TestCoerceAmount:

    @pytest.mark.parametrize("value, expected", [
        (150.5, 150.5),
        (42, 42.0),
        ("150.5", 150.5),
        ("  99 ", 99.0),
        ("₹1,200.50", 1200.5),
        ("$ 2,180", 2180.0),
        ("€15", 15.0),
    ])
    def test_parses_numbers_and_currency_strings(self, value, expected):
        assert coerce_amount(value) == pytest.approx(expected)

    @pytest.mark.parametrize("value", [
        None, "", "abc", "12abc", "N/A", True, False, [], {}, "-", "1.2.3",
    ])
    def test_unparseable_values_become_zero(self, value):
        assert coerce_amount(value) == 0.0

    @pytest.mark.parametrize("value", [
        float("nan"), float("inf"), "-inf", "nan", -5, "-12.5",
    ])
    def test_non_finite_and_negative_values_become_zero(self, value):
        result = coerce_amount(value)
        assert result == 0.0
        assert math.isfinite(result)

    @pytest.mark.parametrize("value", ["1e30", 1e308, 10 ** 400, MAX_BILL_AMOUNT * 2])
    def test_implausibly_large_values_become_zero(self, value):
        assert coerce_amount(value) == 0.0

    def test_cap_is_inclusive(self):
        assert coerce_amount(MAX_BILL_AMOUNT) == MAX_BILL_AMOUNT
        assert coerce_amount("1,000,000,000,000") == MAX_BILL_AMOUNT


class TestCoerceText:

    def test_absent_is_empty_string(self):
        assert coerce_text(None) == ""

    def test_numbers_keep_their_printed_form(self):
        assert coerce_text(123456789012) == "123456789012"
        assert coerce_text(12345.0) == "12345"
        assert coerce_text(12.5) == "12.5"

    def test_nested_values_are_dropped(self):
        assert coerce_text({"a": 1}) == ""
        assert coerce_text(["x"]) == ""
