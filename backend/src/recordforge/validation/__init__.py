"""Form validation - per-field rules and aggregated reports."""

from recordforge.validation.field_rules import parse_date, validate_value
from recordforge.validation.services import FormValidation, FormValidationService
from recordforge.validation.types import ValidationError, ValidationErrors, ValidationResult

__all__ = [
    "FormValidation",
    "FormValidationService",
    "ValidationError",
    "ValidationErrors",
    "ValidationResult",
    "parse_date",
    "validate_value",
]
