"""Generic entity table/form engine.

Orchestrates list display and add/edit/delete workflows for any entity
governed by an EntitySchema. Validation and data access failures come back
as outcomes, never as exceptions.
"""

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from recordforge.engine import messages
from recordforge.engine.forms import FormSession, build_controls
from recordforge.engine.table import build_table
from recordforge.engine.types import (
    EntityView,
    FormMode,
    ListOutcome,
    Outcome,
    SessionState,
    TableModel,
)
from recordforge.hooks.service import HookService
from recordforge.hooks.types import HookContext
from recordforge.metadata.loader import EntitySchema
from recordforge.persistence.adapter import EntityRepository
from recordforge.persistence.errors import DataAccessError, ErrorKind
from recordforge.registry import FieldMetadataRegistry
from recordforge.validation.field_rules import parse_integer
from recordforge.validation.services import FormValidationService

logger = logging.getLogger(__name__)


class RecordNotFoundError(LookupError):
    """Raised when an edit or delete names a key with no record."""


@dataclass
class _KeyLock:
    lock: threading.Lock = field(default_factory=threading.Lock)
    holders: int = 0


class EntityTableEngine:
    """Table/form engine for one entity.

    Writes to the same record are serialised: at most one create, update or
    delete per (entity, key) is in flight at a time.
    """

    def __init__(
        self,
        schema: EntitySchema,
        repository: EntityRepository,
        registry: FieldMetadataRegistry | None = None,
        hook_service: HookService | None = None,
    ):
        self.schema = schema
        self.repository = repository
        self.registry = registry or FieldMetadataRegistry({schema.name: schema})
        self.hook_service = hook_service or HookService()
        self.validation = FormValidationService()
        self._table: TableModel | None = None
        self._write_locks: dict[Any, _KeyLock] = {}
        self._locks_guard = threading.Lock()

    @property
    def table(self) -> TableModel | None:
        """The last successfully loaded table."""
        return self._table

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def list_entities(self) -> ListOutcome:
        """Load all rows and build the table model.

        On failure the previously loaded table is kept and returned with
        the classified message.
        """
        try:
            records = self.repository.list_all(self.schema)
        except DataAccessError as e:
            logger.warning("Listing %s failed: %s", self.schema.name, e)
            return ListOutcome(
                success=False,
                table=self._table,
                message=messages.load_failed(self.schema.table, e),
                error_kind=e.kind,
            )

        self._table = build_table(self.schema, records, self.repository)
        return ListOutcome(success=True, table=self._table)

    def refresh(self) -> ListOutcome:
        """Reload the table, e.g. after an external bulk load."""
        return self.list_entities()

    # ------------------------------------------------------------------
    # Forms
    # ------------------------------------------------------------------

    def open_add_form(self) -> FormSession:
        controls, warnings = build_controls(
            self.schema, self.registry, self.repository, FormMode.ADD
        )
        return FormSession(
            engine=self,
            mode=FormMode.ADD,
            controls=controls,
            warnings=warnings,
        )

    def open_edit_form(self, entity: EntityView | dict[str, Any] | Any) -> FormSession:
        """Open an edit form for a listed row, a record dict or a key.

        Raises:
            RecordNotFoundError: If a key is given and no record has it
            DataAccessError: If fetching the record by key fails
        """
        record = self._resolve_record(entity)
        controls, warnings = build_controls(
            self.schema, self.registry, self.repository, FormMode.EDIT, record
        )
        return FormSession(
            engine=self,
            mode=FormMode.EDIT,
            controls=controls,
            key=record.get(self._primary_key()),
            original=dict(record),
            warnings=warnings,
        )

    def save(self, session: FormSession, values: dict[str, Any]) -> Outcome:
        """Validate and persist a form.

        Every visible field is validated before anything is reported, and
        the repository is not called unless all of them pass.

        Raises:
            RuntimeError: If the session is not open
        """
        if session.engine is not self:
            raise ValueError("Form session belongs to a different entity")
        if not session.is_open:
            raise RuntimeError(f"Cannot save a form in state '{session.state.value}'")

        session.state = SessionState.VALIDATING
        submitted = dict(values)
        for control in session.controls:
            if control.locked:
                submitted[control.name] = control.initial_value

        validation = self.validation.validate_form(self.schema, submitted)
        if not validation.valid:
            session.state = SessionState.FORM_OPEN
            session.errors = validation.errors
            return Outcome(
                success=False,
                message=f"{messages.VALIDATION_FAILED_MESSAGE}:\n{validation.errors.report()}",
                errors=validation.errors,
            )

        session.state = SessionState.PERSISTING
        session.errors = None
        payload = validation.payload
        pk = self._primary_key()
        key = session.key if session.mode == FormMode.EDIT else payload.get(pk)

        with self._write_lock(key):
            try:
                if session.mode == FormMode.ADD:
                    self.repository.create(self.schema, payload)
                else:
                    self.repository.update(self.schema, key, payload)
            except DataAccessError as e:
                logger.warning("Saving %s %s failed: %s", self.schema.name, key, e)
                session.state = SessionState.FORM_OPEN
                return Outcome(
                    success=False,
                    message=messages.save_failed(e),
                    error_kind=e.kind,
                )

            hook_point = "afterCreate" if session.mode == FormMode.ADD else "afterUpdate"
            record = {**(session.original or {}), **payload}
            warnings = self._run_after_write_hooks(hook_point, record, session.original)

        session.state = SessionState.IDLE
        warnings.extend(self._refresh_warnings())
        message = (
            messages.CREATED_MESSAGE if session.mode == FormMode.ADD
            else messages.UPDATED_MESSAGE
        )
        return Outcome(success=True, message=message, warnings=warnings, key=key)

    def cancel(self, session: FormSession) -> None:
        """Close a form without saving."""
        if session.state == SessionState.FORM_OPEN:
            session.state = SessionState.IDLE

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    def delete(self, entity: EntityView | dict[str, Any] | Any, confirm: bool = False) -> Outcome:
        """Delete a record once the caller has confirmed it.

        Without confirmation nothing is dispatched and the outcome asks for it.
        """
        if not confirm:
            return Outcome(
                success=False,
                message=messages.CONFIRM_DELETE_MESSAGE,
                confirmation_required=True,
            )

        try:
            record = self._resolve_record(entity)
        except RecordNotFoundError as e:
            return Outcome(success=False, message=str(e), error_kind=ErrorKind.NOT_FOUND)
        except DataAccessError as e:
            return Outcome(success=False, message=messages.delete_failed(e), error_kind=e.kind)

        key = record.get(self._primary_key())
        with self._write_lock(key):
            abort = self._run_before_delete_hooks(record)
            if abort:
                return Outcome(
                    success=False,
                    message=f"Unable to delete this record. {abort}",
                )
            try:
                self.repository.delete(self.schema, key)
            except DataAccessError as e:
                logger.warning("Deleting %s %s failed: %s", self.schema.name, key, e)
                return Outcome(
                    success=False,
                    message=messages.delete_failed(e),
                    error_kind=e.kind,
                )

        return Outcome(
            success=True,
            message=messages.DELETED_MESSAGE,
            warnings=self._refresh_warnings(),
            key=key,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _primary_key(self) -> str:
        pk = self.schema.primary_key
        if not pk:
            raise ValueError(f"Entity '{self.schema.name}' has no primary key field")
        return pk

    def _coerce_key(self, key: Any) -> Any:
        """Keys arriving as text (URL segments) take the key field's type."""
        descriptor = self.schema.get_field(self._primary_key())
        if descriptor is not None and descriptor.type == "integer" and isinstance(key, str):
            number = parse_integer(key)
            if number is not None:
                return number
        return key

    def _resolve_record(self, entity: EntityView | dict[str, Any] | Any) -> dict[str, Any]:
        if isinstance(entity, EntityView):
            return dict(entity.record)
        if isinstance(entity, dict):
            return dict(entity)
        record = self.repository.get(self.schema, self._coerce_key(entity))
        if record is None:
            raise RecordNotFoundError(f"No {self.schema.display_name} record with key {entity}")
        return record

    @contextmanager
    def _write_lock(self, key: Any) -> Iterator[None]:
        """Hold the write lock for one record key.

        The entry is dropped once no writer holds or waits on it, so the map
        only ever contains keys with a write in flight.
        """
        with self._locks_guard:
            entry = self._write_locks.get(key)
            if entry is None:
                entry = self._write_locks[key] = _KeyLock()
            entry.holders += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._locks_guard:
                entry.holders -= 1
                if entry.holders == 0:
                    del self._write_locks[key]

    def _hook_context(
        self,
        operation: str,
        record: dict[str, Any],
        original: dict[str, Any] | None,
    ) -> HookContext:
        return HookContext(
            entity_name=self.schema.name,
            operation=operation,
            record=record,
            original=original,
            repository=self.repository,
            schemas=self.registry.schemas,
        )

    def _run_after_write_hooks(
        self,
        hook_point: str,
        record: dict[str, Any],
        original: dict[str, Any] | None,
    ) -> list[str]:
        configs = self.schema.hooks.get(hook_point, ())
        if not configs:
            return []
        operation = "create" if hook_point == "afterCreate" else "update"
        results = self.hook_service.run_hooks(
            hook_point, configs, self._hook_context(operation, record, original)
        )
        return [r.warning for r in results if r.warning]

    def _run_before_delete_hooks(self, record: dict[str, Any]) -> str | None:
        configs = self.schema.hooks.get("beforeDelete", ())
        if not configs:
            return None
        results = self.hook_service.run_hooks(
            "beforeDelete", configs, self._hook_context("delete", record, record)
        )
        for result in results:
            if result.abort:
                return result.abort
        return None

    def _refresh_warnings(self) -> list[str]:
        outcome = self.list_entities()
        if outcome.success or not outcome.message:
            return []
        return [outcome.message]
