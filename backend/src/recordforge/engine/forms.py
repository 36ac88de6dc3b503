"""Form sessions and form-control construction."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from recordforge.core.types import SELECT_CONTROL, get_field_type
from recordforge.engine.messages import lookup_failed
from recordforge.engine.types import FormControl, FormMode, Outcome, SessionState
from recordforge.metadata.loader import EntitySchema
from recordforge.persistence.adapter import EntityRepository
from recordforge.persistence.errors import DataAccessError
from recordforge.validation.field_rules import format_date
from recordforge.validation.types import ValidationErrors

if TYPE_CHECKING:
    from recordforge.engine.service import EntityTableEngine
    from recordforge.registry import FieldMetadataRegistry

logger = logging.getLogger(__name__)


@dataclass
class FormSession:
    """One add or edit session.

    State machine: FORM_OPEN -> VALIDATING -> PERSISTING -> IDLE on success,
    back to FORM_OPEN when validation or persistence fails, and IDLE on
    cancel from FORM_OPEN.
    """

    engine: EntityTableEngine
    mode: FormMode
    controls: list[FormControl]
    key: Any = None
    original: dict[str, Any] | None = None
    state: SessionState = SessionState.FORM_OPEN
    errors: ValidationErrors | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def entity(self) -> str:
        return self.engine.schema.name

    @property
    def is_open(self) -> bool:
        return self.state == SessionState.FORM_OPEN

    def control(self, name: str) -> FormControl | None:
        for control in self.controls:
            if control.name == name:
                return control
        return None

    def initial_values(self) -> dict[str, str]:
        return {c.name: c.initial_value for c in self.controls}

    def save(self, values: dict[str, Any]) -> Outcome:
        return self.engine.save(self, values)

    def cancel(self) -> None:
        self.engine.cancel(self)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "entity": self.entity,
            "mode": self.mode.value,
            "state": self.state.value,
            "controls": [c.to_dict() for c in self.controls],
        }
        if self.key is not None:
            result["key"] = self.key
        if self.warnings:
            result["warnings"] = self.warnings
        return result


def build_controls(
    schema: EntitySchema,
    registry: FieldMetadataRegistry,
    repository: EntityRepository,
    mode: FormMode,
    record: dict[str, Any] | None = None,
) -> tuple[list[FormControl], list[str]]:
    """Build one control per persisted field, in display order.

    Returns:
        The controls and any foreign-key lookup warnings. A failed lookup
        leaves its select control without options; the form still opens.
    """
    record = record or {}
    controls: list[FormControl] = []
    warnings: list[str] = []
    option_cache: dict[tuple[str, str, str], list[tuple[str, str]]] = {}

    for descriptor in schema.form_fields():
        initial = _initial_value(record.get(descriptor.name))
        locked = descriptor.primary_key and mode == FormMode.EDIT
        control = FormControl(
            name=descriptor.name,
            label=descriptor.label,
            kind=get_field_type(descriptor.type).ui.edit_control,
            required=descriptor.is_required,
            initial_value=initial,
            locked=locked,
        )

        fk = descriptor.foreign_key
        if fk is not None:
            control.kind = SELECT_CONTROL
            cache_key = (fk.table, fk.key_column, fk.display_expression)
            try:
                if cache_key not in option_cache:
                    option_cache[cache_key] = registry.resolve_foreign_key_options(
                        descriptor, repository
                    )
                control.options = option_cache[cache_key]
            except DataAccessError as e:
                control.warning = lookup_failed(fk.table, e)
                logger.warning(
                    "Options for %s.%s unavailable: %s", schema.name, descriptor.name, e
                )
                if control.warning not in warnings:
                    warnings.append(control.warning)
        elif descriptor.primary_key and mode == FormMode.ADD:
            control.initial_value = registry.generate_primary_key(schema.name)
            control.locked = True

        controls.append(control)

    return controls, warnings


def _initial_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return format_date(value.date())
    if isinstance(value, date):
        return format_date(value)
    return str(value)
