"""Tests for numeric coercion and the shared input guard."""

import math

import pytest

from carbon_impact.coercion import (
    MISSING_FIELDS_MESSAGE,
    NON_NUMERIC_MESSAGE,
    NON_POSITIVE_MESSAGE,
    as_text,
    coerce_number,
    finite_or_none,
    guard_positive_inputs,
    is_missing,
    parse_number,
)
from carbon_impact.exceptions import ValidationError


class TestCoerceNumber:
    """coerce_number returns a finite float or the default."""

    @pytest.mark.parametrize("value,expected", [
        (5, 5.0),
        (2.5, 2.5),
        ("2500", 2500.0),
        ("  12.5  ", 12.5),
        ("-3", -3.0),
        (0, 0.0),
    ])
    def test_numeric_values_parse(self, value, expected):
        assert coerce_number(value, 99.0) == expected

    @pytest.mark.parametrize("value", [
        None, "", "   ", "abc", "12abc", True, False,
        float("nan"), float("inf"), float("-inf"), "inf", "nan",
        [], {}, object(),
    ])
    def test_non_numeric_values_fall_back(self, value):
        assert coerce_number(value, 99.0) == 99.0

    def test_never_returns_nan_for_finite_default(self):
        assert not math.isnan(coerce_number("nope", 0.0))

    @pytest.mark.parametrize("value", [10 ** 400, -(10 ** 400)])
    def test_integers_beyond_float_range_fall_back(self, value):
        assert coerce_number(value, 99.0) == 99.0


class TestParseNumber:

    def test_number_parses(self):
        assert parse_number("7") == 7.0

    def test_garbage_is_nan(self):
        assert math.isnan(parse_number("abc"))
        assert math.isnan(parse_number(None))

    def test_huge_integer_is_nan(self):
        assert math.isnan(parse_number(-(10 ** 400)))


class TestHelpers:

    @pytest.mark.parametrize("value", [None, False, "", "  ", 0, 0.0])
    def test_missing_values(self, value):
        assert is_missing(value) is True

    @pytest.mark.parametrize("value", ["0", "x", 1, -1, 0.5])
    def test_present_values(self, value):
        assert is_missing(value) is False

    def test_finite_or_none_is_recursive(self):
        data = {"a": float("nan"), "b": [1.0, float("inf")], "c": {"d": 2.0}}
        assert finite_or_none(data) == {"a": None, "b": [1.0, None], "c": {"d": 2.0}}

    def test_as_text(self):
        assert as_text(None) is None
        assert as_text(12) == "12"
        assert as_text("Large") == "Large"


class TestGuardPositiveInputs:
    """The guard checks presence, then numeric parse, then positivity."""

    REQUIRED = ("name", "a", "b")
    NUMERIC = ("a", "b")

    def test_valid_payload_returns_parsed_numbers(self):
        parsed = guard_positive_inputs(
            {"name": "x", "a": "1.5", "b": 2}, self.REQUIRED, self.NUMERIC,
        )
        assert parsed == {"a": 1.5, "b": 2.0}

    def test_missing_field(self):
        with pytest.raises(ValidationError) as exc_info:
            guard_positive_inputs({"name": "x", "a": 1}, self.REQUIRED, self.NUMERIC, "t")
        exc = exc_info.value
        assert exc.message == MISSING_FIELDS_MESSAGE
        assert exc.context["reason"] == "missing"
        assert exc.invalid_fields == {"b": "missing"}
        assert exc.calculator == "t"

    def test_numeric_zero_counts_as_missing(self):
        with pytest.raises(ValidationError) as exc_info:
            guard_positive_inputs({"name": "x", "a": 0, "b": 1}, self.REQUIRED, self.NUMERIC)
        assert exc_info.value.message == MISSING_FIELDS_MESSAGE

    def test_non_numeric_field(self):
        with pytest.raises(ValidationError) as exc_info:
            guard_positive_inputs({"name": "x", "a": "abc", "b": 1}, self.REQUIRED, self.NUMERIC)
        assert exc_info.value.message == NON_NUMERIC_MESSAGE
        assert "a" in exc_info.value.invalid_fields

    @pytest.mark.parametrize("value", [-1, "-0.5", "0"])
    def test_non_positive_field(self, value):
        with pytest.raises(ValidationError) as exc_info:
            guard_positive_inputs({"name": "x", "a": value, "b": 1}, self.REQUIRED, self.NUMERIC)
        assert exc_info.value.message == NON_POSITIVE_MESSAGE
        assert exc_info.value.context["reason"] == "non_positive"

    def test_missing_checked_before_numeric(self):
        with pytest.raises(ValidationError) as exc_info:
            guard_positive_inputs({"a": "abc", "b": 1}, self.REQUIRED, self.NUMERIC)
        assert exc_info.value.message == MISSING_FIELDS_MESSAGE
