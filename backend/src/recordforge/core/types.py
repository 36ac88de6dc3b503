"""Field type registry with storage and form defaults."""

from dataclasses import dataclass


@dataclass(frozen=True)
class UIDefaults:
    edit_control: str
    alignment: str = "left"


@dataclass(frozen=True)
class FieldType:
    name: str
    storage_type: str
    ui: UIDefaults


# Built-in field types
FIELD_TYPES: dict[str, FieldType] = {
    "text": FieldType(
        name="text",
        storage_type="TEXT",
        ui=UIDefaults(edit_control="text"),
    ),
    "integer": FieldType(
        name="integer",
        storage_type="INTEGER",
        ui=UIDefaults(edit_control="text", alignment="right"),
    ),
    "date": FieldType(
        name="date",
        storage_type="TEXT",  # ISO format, YYYY-MM-DD
        ui=UIDefaults(edit_control="date"),
    ),
}

# Control used for any field with a foreign key, regardless of its type
SELECT_CONTROL = "select"


def get_field_type(type_name: str) -> FieldType:
    """Get field type definition, defaulting to text if unknown."""
    return FIELD_TYPES.get(type_name, FIELD_TYPES["text"])


def get_storage_type(type_name: str) -> str:
    """Get SQL storage type for a field type."""
    return get_field_type(type_name).storage_type


def is_known_type(type_name: str) -> bool:
    return type_name in FIELD_TYPES
