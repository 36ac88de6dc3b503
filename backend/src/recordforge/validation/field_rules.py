"""Field-level validation rules.

Every function here is pure: no shared formatter state, strictness is an
explicit argument.
"""

import re
from datetime import date, timedelta
from typing import Any

from recordforge.metadata.loader import FieldDescriptor
from recordforge.validation.types import ValidationResult

DATE_PATTERN = "%Y-%m-%d"
DATE_FORMAT_HINT = "YYYY-MM-DD"

_STRICT_DATE = re.compile(r"^(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})$")
_LENIENT_DATE = re.compile(r"^(?P<year>\d{1,4})-(?P<month>\d{1,2})-(?P<day>\d{1,2})$")
_INTEGER = re.compile(r"^[+-]?\d+$")

REQUIRED_MESSAGE = "This field is required"
INVALID_DATE_MESSAGE = f"Invalid date format (use {DATE_FORMAT_HINT})"
NOT_A_NUMBER_MESSAGE = "Value must be a number"
NOT_POSITIVE_MESSAGE = "Value must be positive"


def is_empty(value: Any) -> bool:
    """Check if a raw form value is considered empty."""
    if value is None:
        return True
    if isinstance(value, str) and value.strip() == "":
        return True
    return False


def parse_date(value: str, *, strict: bool = True) -> date | None:
    """Parse a YYYY-MM-DD string.

    Strict parsing requires exactly four-digit year, two-digit month and day,
    and a real calendar date. Lenient parsing also accepts one-digit parts
    and rolls out-of-range months and days forward (2023-02-30 becomes
    2023-03-02).

    Returns:
        The parsed date, or None if the value does not parse.
    """
    text = value.strip()
    if strict:
        match = _STRICT_DATE.match(text)
        if not match:
            return None
        try:
            return date(int(match["year"]), int(match["month"]), int(match["day"]))
        except ValueError:
            return None

    match = _LENIENT_DATE.match(text)
    if not match:
        return None
    year, month, day = int(match["year"]), int(match["month"]), int(match["day"])
    if year < 1:
        return None
    # Roll months first, then days, from the first of the month
    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    try:
        return date(year, month, 1) + timedelta(days=day - 1)
    except OverflowError:
        return None


def format_date(value: date) -> str:
    return value.strftime(DATE_PATTERN)


def parse_integer(value: str) -> int | None:
    text = value.strip()
    if not _INTEGER.match(text):
        return None
    return int(text)


def validate_value(descriptor: FieldDescriptor, raw_value: Any) -> ValidationResult:
    """Validate one raw form value against a field descriptor.

    Order of checks: required, empty-optional short circuit, max length,
    then type-specific parsing.
    """
    if descriptor.is_required and is_empty(raw_value):
        if descriptor.foreign_key:
            return ValidationResult.fail(
                f"Foreign key reference to {descriptor.foreign_key.table} is required"
            )
        return ValidationResult.fail(REQUIRED_MESSAGE)

    if is_empty(raw_value):
        return ValidationResult.ok()

    value = str(raw_value).strip()

    if descriptor.max_length > 0 and len(value) > descriptor.max_length:
        return ValidationResult.fail(
            f"Value too long (max {descriptor.max_length} characters)"
        )

    if descriptor.type == "date":
        if parse_date(value, strict=True) is None:
            return ValidationResult.fail(INVALID_DATE_MESSAGE)
    elif descriptor.type == "integer":
        number = parse_integer(value)
        if number is None:
            return ValidationResult.fail(NOT_A_NUMBER_MESSAGE)
        if number < 0:
            return ValidationResult.fail(NOT_POSITIVE_MESSAGE)

    return ValidationResult.ok()


def coerce_value(descriptor: FieldDescriptor, raw_value: Any) -> Any:
    """Convert a validated raw form value into its persisted form.

    Empty values become None, integers become int, and everything else
    (dates included) is passed through as the trimmed string.
    """
    if is_empty(raw_value):
        return None
    value = str(raw_value).strip()
    if descriptor.type == "integer":
        return int(value)
    return value
