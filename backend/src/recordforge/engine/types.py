"""Engine types: table models, form controls, session states and outcomes.

Everything here is render-ready for a presentation layer and serialises
to plain dicts for the API.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from recordforge.persistence.errors import ErrorKind
from recordforge.validation.types import ValidationErrors


class FormMode(str, Enum):
    ADD = "add"
    EDIT = "edit"


class SessionState(str, Enum):
    IDLE = "idle"
    FORM_OPEN = "form_open"
    VALIDATING = "validating"
    PERSISTING = "persisting"


@dataclass(frozen=True)
class TableColumn:
    name: str
    label: str
    display_only: bool = False
    alignment: str = "left"

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "label": self.label,
            "displayOnly": self.display_only,
            "alignment": self.alignment,
        }


@dataclass
class EntityView:
    """A listed row: the persisted record plus separately derived display values.

    The record is exactly what the repository returned; derived values never
    leak into it, so it can be handed back to an edit form as-is.
    """

    record: dict[str, Any]
    display: dict[str, Any] = field(default_factory=dict)

    def value(self, name: str) -> Any:
        if name in self.display:
            return self.display[name]
        return self.record.get(name)


@dataclass
class TableModel:
    """Columns plus rows of formatted cell text, in display order."""

    entity: str
    columns: list[TableColumn]
    rows: list[list[str]]
    views: list[EntityView] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "entity": self.entity,
            "columns": [c.to_dict() for c in self.columns],
            "rows": self.rows,
            "records": [v.record for v in self.views],
            "warnings": self.warnings,
        }


@dataclass
class FormControl:
    """A form-build request for one field."""

    name: str
    label: str
    kind: str  # "text" | "date" | "select"
    required: bool = False
    initial_value: str = ""
    locked: bool = False
    options: list[tuple[str, str]] = field(default_factory=list)
    warning: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "name": self.name,
            "label": self.label,
            "kind": self.kind,
            "required": self.required,
            "initialValue": self.initial_value,
            "locked": self.locked,
        }
        if self.kind == "select":
            result["options"] = [{"key": k, "display": d} for k, d in self.options]
        if self.warning:
            result["warning"] = self.warning
        return result


@dataclass
class Outcome:
    """Result of a save or delete.

    Attributes:
        success: Whether the operation completed
        message: User-facing summary
        error_kind: Classified data access failure, if any
        errors: Field-level validation errors, if validation failed
        warnings: Non-fatal problems on an otherwise successful operation
        confirmation_required: Delete was requested without confirmation
        key: Primary key of the record written or deleted
    """

    success: bool
    message: str
    error_kind: ErrorKind | None = None
    errors: ValidationErrors | None = None
    warnings: list[str] = field(default_factory=list)
    confirmation_required: bool = False
    key: Any = None

    @property
    def has_validation_errors(self) -> bool:
        return bool(self.errors)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"success": self.success, "message": self.message}
        if self.key is not None:
            result["key"] = self.key
        if self.error_kind is not None:
            result["errorKind"] = self.error_kind.value
        if self.errors:
            result["errors"] = self.errors.to_list()
        if self.warnings:
            result["warnings"] = self.warnings
        if self.confirmation_required:
            result["confirmationRequired"] = True
        return result


@dataclass
class ListOutcome:
    """Result of listing entities.

    On failure, table holds the last successfully loaded table (or None).
    """

    success: bool
    table: TableModel | None
    message: str | None = None
    error_kind: ErrorKind | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"success": self.success}
        if self.table is not None:
            result["table"] = self.table.to_dict()
        if self.message:
            result["message"] = self.message
        if self.error_kind is not None:
            result["errorKind"] = self.error_kind.value
        return result
