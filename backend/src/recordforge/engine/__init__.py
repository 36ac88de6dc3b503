"""Generic entity table/form engine."""

from recordforge.engine.forms import FormSession
from recordforge.engine.service import EntityTableEngine, RecordNotFoundError
from recordforge.engine.types import (
    EntityView,
    FormControl,
    FormMode,
    ListOutcome,
    Outcome,
    SessionState,
    TableColumn,
    TableModel,
)

__all__ = [
    "EntityTableEngine",
    "EntityView",
    "FormControl",
    "FormMode",
    "FormSession",
    "ListOutcome",
    "Outcome",
    "RecordNotFoundError",
    "SessionState",
    "TableColumn",
    "TableModel",
]
