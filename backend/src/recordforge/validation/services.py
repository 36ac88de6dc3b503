"""Form validation service.

Validates every visible field of a form and aggregates all failures into
one report; it never stops at the first failure. Display-only fields are
not part of a form and are never validated or persisted.
"""

from dataclasses import dataclass
from typing import Any

from recordforge.metadata.loader import EntitySchema
from recordforge.validation.field_rules import coerce_value, validate_value
from recordforge.validation.types import ValidationError, ValidationErrors


@dataclass
class FormValidation:
    """Result of validating a full form."""

    errors: ValidationErrors
    payload: dict[str, Any]

    @property
    def valid(self) -> bool:
        return not self.errors


class FormValidationService:
    """Validates form values for an entity schema and builds the payload."""

    def validate_form(
        self,
        schema: EntitySchema,
        values: dict[str, Any],
    ) -> FormValidation:
        """Validate all form fields of a schema.

        Args:
            schema: The entity schema
            values: Raw form values keyed by field name; display-only
                fields and unknown keys are ignored

        Returns:
            FormValidation with the aggregated errors and, when valid,
            the create/update payload.
        """
        errors = ValidationErrors()
        payload: dict[str, Any] = {}

        for descriptor in schema.form_fields():
            raw_value = values.get(descriptor.name)
            result = validate_value(descriptor, raw_value)
            if not result.valid:
                errors.add(ValidationError(
                    field=descriptor.name,
                    label=descriptor.label,
                    message=result.error_message or "Invalid value",
                ))
                continue
            payload[descriptor.name] = coerce_value(descriptor, raw_value)

        if errors:
            payload = {}
        return FormValidation(errors=errors, payload=payload)
