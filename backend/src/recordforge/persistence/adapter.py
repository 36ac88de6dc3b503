"""EntityRepository Protocol: the data access capability the engine consumes."""

from typing import Any, Protocol, runtime_checkable

from recordforge.metadata.loader import EntitySchema


@runtime_checkable
class EntityRepository(Protocol):
    """Interface all repositories must implement.

    Every method raises DataAccessError on failure and nothing else.
    """

    def create(self, schema: EntitySchema, data: dict[str, Any]) -> None: ...

    def update(self, schema: EntitySchema, key: Any, data: dict[str, Any]) -> None: ...

    def delete(self, schema: EntitySchema, key: Any) -> None: ...

    def get(self, schema: EntitySchema, key: Any) -> dict[str, Any] | None: ...

    def list_all(self, schema: EntitySchema) -> list[dict[str, Any]]: ...

    def lookup(
        self,
        table: str,
        key_column: str,
        display_expression: str,
    ) -> list[tuple[str, str]]: ...
