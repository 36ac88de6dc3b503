"""In-memory collaborators shared by the engine, registry and hook tests."""

from pathlib import Path
from typing import Any

from recordforge.metadata.loader import EntitySchema, MetadataLoader
from recordforge.persistence.errors import DataAccessError, ErrorKind


def make_schema(data: dict[str, Any]) -> EntitySchema:
    """Resolve an entity definition dict the same way YAML files are resolved."""
    return MetadataLoader(Path(".")).resolve_entity(data)


class FakeRepository:
    """EntityRepository over plain lists, recording every call.

    Set ``fail[operation]`` (or ``fail["lookup:<table>"]``) to a
    DataAccessError to make that operation raise it.
    """

    def __init__(
        self,
        records: dict[str, list[dict[str, Any]]] | None = None,
        lookups: dict[str, list[tuple[str, str]]] | None = None,
    ):
        self.records = records or {}
        self.lookups = lookups or {}
        self.calls: list[tuple[Any, ...]] = []
        self.fail: dict[str, DataAccessError] = {}

    def _check(self, operation: str) -> None:
        error = self.fail.get(operation)
        if error is not None:
            raise error

    def _rows(self, schema: EntitySchema) -> list[dict[str, Any]]:
        return self.records.setdefault(schema.table, [])

    def _find(self, schema: EntitySchema, key: Any) -> dict[str, Any] | None:
        pk = schema.primary_key
        for row in self._rows(schema):
            if str(row.get(pk)) == str(key):
                return row
        return None

    def create(self, schema: EntitySchema, data: dict[str, Any]) -> None:
        self.calls.append(("create", schema.name, dict(data)))
        self._check("create")
        if self._find(schema, data.get(schema.primary_key)) is not None:
            raise DataAccessError(ErrorKind.DUPLICATE_KEY, "duplicate key", table=schema.table)
        self._rows(schema).append(dict(data))

    def update(self, schema: EntitySchema, key: Any, data: dict[str, Any]) -> None:
        self.calls.append(("update", schema.name, key, dict(data)))
        self._check("update")
        row = self._find(schema, key)
        if row is None:
            raise DataAccessError(ErrorKind.NOT_FOUND, "no row", table=schema.table)
        row.update({k: v for k, v in data.items() if k != schema.primary_key})

    def delete(self, schema: EntitySchema, key: Any) -> None:
        self.calls.append(("delete", schema.name, key))
        self._check("delete")
        row = self._find(schema, key)
        if row is None:
            raise DataAccessError(ErrorKind.NOT_FOUND, "no row", table=schema.table)
        self._rows(schema).remove(row)

    def get(self, schema: EntitySchema, key: Any) -> dict[str, Any] | None:
        self.calls.append(("get", schema.name, key))
        self._check("get")
        row = self._find(schema, key)
        return dict(row) if row else None

    def list_all(self, schema: EntitySchema) -> list[dict[str, Any]]:
        self.calls.append(("list_all", schema.name))
        self._check("list_all")
        return [dict(row) for row in self._rows(schema)]

    def lookup(self, table: str, key_column: str, display_expression: str) -> list[tuple[str, str]]:
        self.calls.append(("lookup", table, key_column, display_expression))
        self._check("lookup")
        self._check(f"lookup:{table}")
        return list(self.lookups.get(table, []))

    def operations(self, name: str) -> list[tuple[Any, ...]]:
        return [c for c in self.calls if c[0] == name]
