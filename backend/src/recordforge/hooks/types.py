"""Hook system types.

- HookContext: runtime state passed to hook functions
- HookResult: return value from hook functions
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from recordforge.metadata.loader import EntitySchema


@dataclass
class HookContext:
    """Runtime context passed to every hook function.

    Attributes:
        entity_name: Name of the entity being operated on
        operation: "create", "update" or "delete"
        record: Record state as written (or about to be deleted)
        original: Previous record state (update and delete), None for create
        repository: Repository the engine writes through
        schemas: Every loaded entity schema by name, for hooks that touch
            related entities
    """

    entity_name: str
    operation: str
    record: dict[str, Any]
    original: dict[str, Any] | None = None
    repository: Any = None
    schemas: Mapping[str, EntitySchema] = field(default_factory=dict)


@dataclass
class HookResult:
    """Return value from hooks.

    Attributes:
        abort: Error message that stops the pending operation (beforeDelete)
        warning: Message reported alongside an otherwise successful write
    """

    abort: str | None = None
    warning: str | None = None
