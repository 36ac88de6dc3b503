"""Core types for form validation.

Validation runs locally, before any I/O. Per-field results are collected
into a single ValidationErrors report so every problem on a form is shown
at once rather than one at a time.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one raw value against one field."""

    valid: bool
    error_message: str | None = None

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(valid=True)

    @classmethod
    def fail(cls, message: str) -> "ValidationResult":
        return cls(valid=False, error_message=message)


@dataclass(frozen=True)
class ValidationError:
    """A single field-level validation failure.

    Attributes:
        field: Field name the error relates to
        label: Friendly label of the field, used when reporting
        message: Human-readable message
    """

    field: str
    label: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"field": self.field, "label": self.label, "message": self.message}

    def __str__(self) -> str:
        return f"{self.label}: {self.message}"


@dataclass
class ValidationErrors:
    """Aggregated multi-field validation report."""

    errors: list[ValidationError] = field(default_factory=list)

    def add(self, error: ValidationError) -> None:
        self.errors.append(error)

    @property
    def fields(self) -> list[str]:
        return [e.field for e in self.errors]

    def __bool__(self) -> bool:
        return bool(self.errors)

    def __len__(self) -> int:
        return len(self.errors)

    def __iter__(self):
        return iter(self.errors)

    def report(self) -> str:
        """One line per error, in form order."""
        return "\n".join(str(e) for e in self.errors)

    def to_list(self) -> list[dict[str, Any]]:
        return [e.to_dict() for e in self.errors]
