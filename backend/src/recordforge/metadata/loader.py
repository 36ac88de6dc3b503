"""Load and resolve entity schemas from YAML files."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml

from recordforge.core.types import is_known_type
from recordforge.metadata.expressions import (
    DisplayExpression,
    ExpressionError,
    parse_display_expression,
)
from recordforge.metadata.labels import to_friendly_name


@dataclass(frozen=True)
class ForeignKeyConfig:
    """Reference from a field to a key column of another table."""

    table: str
    key_column: str
    display_expression: str

    @property
    def expression(self) -> DisplayExpression:
        return parse_display_expression(self.display_expression)


@dataclass(frozen=True)
class FieldDescriptor:
    name: str
    type: str = "text"
    primary_key: bool = False
    required: bool = False
    foreign_key: ForeignKeyConfig | None = None
    max_length: int = 0  # 0 means unbounded
    display_name: str | None = None

    @property
    def is_required(self) -> bool:
        """Primary keys and foreign keys are always required."""
        return self.required or self.primary_key or self.foreign_key is not None

    @property
    def has_relation(self) -> bool:
        return self.foreign_key is not None

    @property
    def label(self) -> str:
        if self.display_name:
            return self.display_name
        return to_friendly_name(self.name, is_key=self.primary_key or self.has_relation)


@dataclass(frozen=True)
class DisplayFieldConfig:
    """A display-only field computed by looking up another field's value.

    Never part of a create/update payload.
    """

    name: str
    source_field: str
    table: str
    key_column: str
    display_expression: str
    missing: str | None = None  # shown when the source value is empty
    unknown: str | None = None  # shown when the lookup finds no row
    display_name: str | None = None

    @property
    def label(self) -> str:
        return self.display_name or to_friendly_name(self.name)


@dataclass(frozen=True)
class SortConfig:
    field: str
    direction: str = "asc"  # "asc" | "desc"

    @property
    def descending(self) -> bool:
        return self.direction == "desc"


@dataclass(frozen=True)
class HookConfig:
    """Hook reference from YAML metadata."""

    name: str
    description: str = ""


@dataclass(frozen=True)
class EntitySchema:
    name: str
    table: str
    display_name: str
    abbreviation: str
    fields: tuple[FieldDescriptor, ...]
    display_fields: tuple[DisplayFieldConfig, ...] = ()
    column_order: tuple[str, ...] = ()
    default_sort: SortConfig | None = None
    key_format: str = "prefixed"  # "prefixed" | "numeric"
    hooks: Mapping[str, tuple[HookConfig, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @property
    def primary_key(self) -> str | None:
        for f in self.fields:
            if f.primary_key:
                return f.name
        return None

    @property
    def field_map(self) -> dict[str, FieldDescriptor]:
        return {f.name: f for f in self.fields}

    @property
    def display_field_map(self) -> dict[str, DisplayFieldConfig]:
        return {d.name: d for d in self.display_fields}

    def get_field(self, name: str) -> FieldDescriptor | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def is_display_only(self, name: str) -> bool:
        return any(d.name == name for d in self.display_fields)

    def columns(self) -> list[str]:
        """Column names in display order."""
        if self.column_order:
            return list(self.column_order)
        return [f.name for f in self.fields] + [d.name for d in self.display_fields]

    def form_fields(self) -> list[FieldDescriptor]:
        """Persisted fields in display order, followed by any the order omits."""
        by_name = self.field_map
        ordered = [by_name[name] for name in self.columns() if name in by_name]
        seen = {f.name for f in ordered}
        ordered.extend(f for f in self.fields if f.name not in seen)
        return ordered

    def label_for(self, name: str) -> str:
        descriptor = self.get_field(name)
        if descriptor:
            return descriptor.label
        display = self.display_field_map.get(name)
        if display:
            return display.label
        return to_friendly_name(name)


VALID_HOOK_POINTS = ("afterCreate", "afterUpdate", "beforeDelete")
VALID_KEY_FORMATS = ("prefixed", "numeric")


class MetadataLoader:
    """Loads entity schema definitions from YAML files."""

    def __init__(self, metadata_path: Path):
        self.metadata_path = metadata_path
        self.entities: dict[str, EntitySchema] = {}

    def load_all(self) -> None:
        """Load all entities."""
        self._load_entities()
        self._validate_abbreviations()

    def _load_entities(self) -> None:
        entities_path = self.metadata_path / "entities"
        if not entities_path.exists():
            return

        for yaml_file in sorted(entities_path.glob("*.yaml")):
            with open(yaml_file) as f:
                data = yaml.safe_load(f)
                if data and "entity" in data:
                    entity = self.resolve_entity(data)
                    self.entities[entity.name] = entity

    def _validate_abbreviations(self) -> None:
        """Validate entity abbreviations are unique and properly formatted."""
        seen: dict[str, str] = {}  # abbreviation -> entity name

        for entity_name, entity in self.entities.items():
            abbrev = entity.abbreviation

            if len(abbrev) < 2 or len(abbrev) > 5:
                raise ValueError(
                    f"Entity '{entity_name}' abbreviation '{abbrev}' must be 2-5 characters"
                )
            if not abbrev.isalnum():
                raise ValueError(
                    f"Entity '{entity_name}' abbreviation '{abbrev}' must be alphanumeric"
                )
            if abbrev in seen:
                raise ValueError(
                    f"Duplicate abbreviation '{abbrev}' used by both "
                    f"'{seen[abbrev]}' and '{entity_name}'"
                )
            seen[abbrev] = entity_name

    def resolve_entity(self, data: dict) -> EntitySchema:
        """Resolve an entity definition dict into an EntitySchema."""
        name = data["entity"]

        fields = tuple(self._resolve_field(name, f) for f in data.get("fields", []))
        if not fields:
            raise ValueError(f"Entity '{name}' declares no fields")

        names = [f.name for f in fields]
        duplicates = {n for n in names if names.count(n) > 1}
        if duplicates:
            raise ValueError(f"Entity '{name}' declares duplicate fields: {sorted(duplicates)}")

        display_fields = tuple(
            self._resolve_display_field(name, d, set(names))
            for d in data.get("displayFields", [])
        )
        clashes = {d.name for d in display_fields} & set(names)
        if clashes:
            raise ValueError(
                f"Entity '{name}' display-only fields shadow persisted fields: {sorted(clashes)}"
            )

        known_columns = set(names) | {d.name for d in display_fields}
        column_order = tuple(data.get("columns", []))
        unknown = [c for c in column_order if c not in known_columns]
        if unknown:
            raise ValueError(f"Entity '{name}' column order references unknown fields: {unknown}")

        default_sort = None
        sort_data = data.get("defaultSort")
        if sort_data:
            default_sort = SortConfig(
                field=sort_data["field"],
                direction=str(sort_data.get("direction", "asc")).lower(),
            )
            if default_sort.field not in known_columns:
                raise ValueError(
                    f"Entity '{name}' default sort field '{default_sort.field}' is not a column"
                )
            if default_sort.direction not in ("asc", "desc"):
                raise ValueError(
                    f"Entity '{name}' default sort direction must be 'asc' or 'desc'"
                )

        key_format = data.get("keyFormat", "prefixed")
        if key_format not in VALID_KEY_FORMATS:
            raise ValueError(f"Entity '{name}' keyFormat must be one of {VALID_KEY_FORMATS}")

        # Auto-generate abbreviation from name when absent (first 2 chars)
        abbreviation = str(data.get("abbreviation") or name[:2]).upper()

        return EntitySchema(
            name=name,
            table=data.get("table", name.lower()),
            display_name=data.get("displayName", to_friendly_name(name)),
            abbreviation=abbreviation,
            fields=fields,
            display_fields=display_fields,
            column_order=column_order,
            default_sort=default_sort,
            key_format=key_format,
            hooks=self._resolve_hooks(data.get("hooks", {})),
        )

    def _resolve_field(self, entity_name: str, data: dict) -> FieldDescriptor:
        """Convert field dict to FieldDescriptor."""
        name = data["name"]
        field_type = data.get("type", "text")
        if not is_known_type(field_type):
            raise ValueError(f"Field '{entity_name}.{name}' has unknown type '{field_type}'")

        foreign_key = None
        fk_data = data.get("foreignKey")
        if fk_data:
            foreign_key = ForeignKeyConfig(
                table=fk_data["table"],
                key_column=fk_data.get("keyColumn", name),
                display_expression=fk_data.get("display", fk_data.get("keyColumn", name)),
            )
            self._check_expression(entity_name, name, foreign_key.display_expression)

        max_length = int(data.get("maxLength", 0) or 0)
        if max_length < 0:
            raise ValueError(f"Field '{entity_name}.{name}' maxLength must not be negative")

        return FieldDescriptor(
            name=name,
            type=field_type,
            primary_key=data.get("primaryKey", False),
            required=data.get("required", False),
            foreign_key=foreign_key,
            max_length=max_length,
            display_name=data.get("displayName"),
        )

    def _resolve_display_field(
        self, entity_name: str, data: dict, persisted: set[str]
    ) -> DisplayFieldConfig:
        name = data["name"]
        source = data["source"]
        if source not in persisted:
            raise ValueError(
                f"Display field '{entity_name}.{name}' source '{source}' is not a persisted field"
            )
        display = DisplayFieldConfig(
            name=name,
            source_field=source,
            table=data["table"],
            key_column=data.get("keyColumn", source),
            display_expression=data["display"],
            missing=data.get("missing"),
            unknown=data.get("unknown"),
            display_name=data.get("displayName"),
        )
        self._check_expression(entity_name, name, display.display_expression)
        return display

    def _check_expression(self, entity_name: str, field_name: str, expression: str) -> None:
        try:
            parse_display_expression(expression)
        except ExpressionError as e:
            raise ValueError(f"Field '{entity_name}.{field_name}': {e}") from e

    def _resolve_hooks(self, data: dict[str, Any]) -> Mapping[str, tuple[HookConfig, ...]]:
        """Convert hooks dict from YAML to a read-only mapping of HookConfig tuples."""
        hooks: dict[str, tuple[HookConfig, ...]] = {}
        for point, hook_list in (data or {}).items():
            if point not in VALID_HOOK_POINTS:
                raise ValueError(f"Unknown hook point '{point}'")
            if isinstance(hook_list, list):
                hooks[point] = tuple(
                    HookConfig(
                        name=h["name"] if isinstance(h, dict) else str(h),
                        description=h.get("description", "") if isinstance(h, dict) else "",
                    )
                    for h in hook_list
                )
        return MappingProxyType(hooks)

    def get_entity(self, name: str) -> EntitySchema | None:
        """Get a resolved entity by name (case-insensitive fallback)."""
        entity = self.entities.get(name)
        if entity:
            return entity
        lowered = name.lower()
        for entity_name, candidate in self.entities.items():
            if entity_name.lower() == lowered:
                return candidate
        return None

    def list_entities(self) -> list[str]:
        """List all entity names."""
        return list(self.entities.keys())
