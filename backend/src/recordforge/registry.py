"""Field Metadata Registry.

Holds the resolved entity schemas and answers the three questions the
table/form engine asks about a field: is this raw value valid, what are
the selectable options for this foreign key, and what key should a new
record get.
"""

import logging

from recordforge.metadata.loader import EntitySchema, FieldDescriptor, MetadataLoader
from recordforge.persistence.adapter import EntityRepository
from recordforge.persistence.keys import generate_primary_key
from recordforge.validation.field_rules import validate_value
from recordforge.validation.types import ValidationResult

logger = logging.getLogger(__name__)


class FieldMetadataRegistry:
    """Lookup facade over loaded entity schemas."""

    def __init__(self, schemas: dict[str, EntitySchema] | None = None):
        self._schemas: dict[str, EntitySchema] = dict(schemas or {})

    @classmethod
    def from_loader(cls, loader: MetadataLoader) -> "FieldMetadataRegistry":
        return cls(loader.entities)

    def register(self, schema: EntitySchema) -> None:
        self._schemas[schema.name] = schema

    def get_schema(self, entity_name: str) -> EntitySchema:
        """Get a schema by entity name (case-insensitive fallback).

        Raises:
            ValueError: If no entity has that name
        """
        schema = self._schemas.get(entity_name)
        if schema is None:
            lowered = entity_name.lower()
            schema = next(
                (s for name, s in self._schemas.items() if name.lower() == lowered),
                None,
            )
        if schema is None:
            raise ValueError(f"Unknown entity: {entity_name}")
        return schema

    @property
    def schemas(self) -> dict[str, EntitySchema]:
        return dict(self._schemas)

    def entity_names(self) -> list[str]:
        return list(self._schemas.keys())

    def validate(self, field: FieldDescriptor, raw_value: object) -> ValidationResult:
        return validate_value(field, raw_value)

    def resolve_foreign_key_options(
        self,
        field: FieldDescriptor,
        repository: EntityRepository,
    ) -> list[tuple[str, str]]:
        """Selectable (key, display) pairs for a foreign-key field.

        Ordered by display value ascending, ties broken by key. Fields
        without a relation have no options.

        Raises:
            DataAccessError: If the referenced table or columns are missing
        """
        fk = field.foreign_key
        if fk is None:
            return []

        options = repository.lookup(fk.table, fk.key_column, fk.display_expression)
        logger.debug("Resolved %d options for %s from %s", len(options), field.name, fk.table)
        return sorted(options, key=lambda option: (option[1], option[0]))

    def generate_primary_key(self, entity_name: str) -> str:
        return generate_primary_key(self.get_schema(entity_name))
