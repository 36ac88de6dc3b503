"""Tests for per-field validation rules and date parsing."""

from datetime import date

import pytest

from recordforge.metadata.loader import FieldDescriptor, ForeignKeyConfig
from recordforge.validation.field_rules import (
    INVALID_DATE_MESSAGE,
    NOT_A_NUMBER_MESSAGE,
    NOT_POSITIVE_MESSAGE,
    REQUIRED_MESSAGE,
    coerce_value,
    format_date,
    is_empty,
    parse_date,
    parse_integer,
    validate_value,
)

DOCTOR_FK = ForeignKeyConfig(table="doctor", key_column="doctorid", display_expression="surname")


@pytest.fixture
def date_field():
    return FieldDescriptor(name="dateofvisit", type="date")


@pytest.fixture
def int_field():
    return FieldDescriptor(name="experience", type="integer")


class TestRequired:
    @pytest.mark.parametrize("raw", ["", None, "   "])
    def test_required_field_rejects_empty(self, raw):
        result = validate_value(FieldDescriptor(name="surname", required=True), raw)
        assert not result.valid
        assert result.error_message == REQUIRED_MESSAGE

    @pytest.mark.parametrize("raw", ["", None])
    def test_primary_key_is_always_required(self, raw):
        result = validate_value(FieldDescriptor(name="doctorid", primary_key=True), raw)
        assert not result.valid

    @pytest.mark.parametrize("raw", ["", None])
    def test_foreign_key_required_even_when_flag_is_off(self, raw):
        descriptor = FieldDescriptor(name="doctorid", required=False, foreign_key=DOCTOR_FK)
        result = validate_value(descriptor, raw)
        assert not result.valid
        assert result.error_message == "Foreign key reference to doctor is required"

    @pytest.mark.parametrize("field_type", ["text", "integer", "date"])
    def test_optional_empty_is_valid(self, field_type):
        descriptor = FieldDescriptor(name="comment", type=field_type, max_length=3)
        assert validate_value(descriptor, "").valid
        assert validate_value(descriptor, None).valid


class TestDates:
    def test_impossible_date_is_invalid(self, date_field):
        result = validate_value(date_field, "2024-02-30")
        assert not result.valid
        assert result.error_message == INVALID_DATE_MESSAGE

    def test_leap_day_is_valid(self, date_field):
        assert validate_value(date_field, "2024-02-29").valid

    def test_non_leap_year_feb_29_is_invalid(self, date_field):
        assert not validate_value(date_field, "2023-02-29").valid

    @pytest.mark.parametrize("raw", ["02/29/2024", "2024-2-29", "20240229", "2024-02-29T00:00"])
    def test_wrong_format_is_invalid(self, date_field, raw):
        assert validate_value(date_field, raw).error_message == INVALID_DATE_MESSAGE

    def test_required_date_passes_through_unmodified(self):
        descriptor = FieldDescriptor(name="dateofvisit", type="date", required=True)
        assert validate_value(descriptor, "2023-01-01").valid
        assert coerce_value(descriptor, "2023-01-01") == "2023-01-01"


class TestParseDate:
    def test_strict_parses_exact_date(self):
        assert parse_date("2024-02-29", strict=True) == date(2024, 2, 29)

    def test_strict_rejects_single_digit_parts(self):
        assert parse_date("2024-2-9", strict=True) is None

    def test_lenient_accepts_single_digit_parts(self):
        assert parse_date("2024-2-9", strict=False) == date(2024, 2, 9)

    def test_lenient_rolls_day_overflow_forward(self):
        assert parse_date("2023-02-30", strict=False) == date(2023, 3, 2)

    def test_lenient_rolls_month_overflow_forward(self):
        assert parse_date("2023-13-01", strict=False) == date(2024, 1, 1)

    def test_lenient_still_rejects_other_formats(self):
        assert parse_date("01/02/2023", strict=False) is None

    def test_format_date(self):
        assert format_date(date(2023, 1, 5)) == "2023-01-05"


class TestIntegers:
    def test_negative_is_not_positive(self, int_field):
        result = validate_value(int_field, "-1")
        assert not result.valid
        assert result.error_message == NOT_POSITIVE_MESSAGE

    def test_positive_is_valid(self, int_field):
        assert validate_value(int_field, "12").valid

    def test_zero_is_valid(self, int_field):
        assert validate_value(int_field, "0").valid

    @pytest.mark.parametrize("raw", ["abc", "1.5", "12a", "--3"])
    def test_non_numeric_is_not_a_number(self, int_field, raw):
        result = validate_value(int_field, raw)
        assert not result.valid
        assert result.error_message == NOT_A_NUMBER_MESSAGE

    def test_parse_integer(self):
        assert parse_integer(" 42 ") == 42
        assert parse_integer("+7") == 7
        assert parse_integer("x") is None

    def test_coerce_integer(self, int_field):
        assert coerce_value(int_field, " 12 ") == 12
        assert coerce_value(int_field, "") is None


class TestMaxLength:
    def test_over_limit_is_invalid(self):
        descriptor = FieldDescriptor(name="postcode", max_length=5)
        result = validate_value(descriptor, "123456")
        assert not result.valid
        assert result.error_message == "Value too long (max 5 characters)"

    def test_at_limit_is_valid(self):
        assert validate_value(FieldDescriptor(name="postcode", max_length=5), "12345").valid

    def test_zero_means_unbounded(self):
        assert validate_value(FieldDescriptor(name="comment"), "x" * 10_000).valid

    def test_length_checked_before_type(self):
        descriptor = FieldDescriptor(name="dateofvisit", type="date", max_length=4)
        assert validate_value(descriptor, "2024-01-01").error_message.startswith("Value too long")


class TestIsEmpty:
    def test_values(self):
        assert is_empty(None)
        assert is_empty("")
        assert is_empty("  ")
        assert not is_empty("0")
        assert not is_empty(0)
