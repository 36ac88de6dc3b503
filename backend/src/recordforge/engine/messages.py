"""User-facing messages for classified data access failures."""

from recordforge.persistence.errors import DataAccessError, ErrorKind

CONFIRM_DELETE_MESSAGE = "Are you sure you want to delete this record?"
CREATED_MESSAGE = "Record created successfully"
UPDATED_MESSAGE = "Record updated successfully"
DELETED_MESSAGE = "Record deleted successfully"
VALIDATION_FAILED_MESSAGE = "Validation failed"

_SAVE_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.DUPLICATE_KEY: "A record with this ID already exists.",
    ErrorKind.FOREIGN_KEY_VIOLATION: "One of the selected references does not exist in the database.",
    ErrorKind.REQUIRED_FIELD_VIOLATION: "Required fields cannot be empty.",
    ErrorKind.DATA_TOO_LONG: "Some fields contain invalid data or are too long.",
    ErrorKind.PERMISSION_DENIED: "You don't have permission to save records.",
    ErrorKind.NOT_FOUND: "The record no longer exists.",
}

_DELETE_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.FOREIGN_KEY_VIOLATION: (
        "This record is referenced by other data in the system and cannot be deleted."
    ),
    ErrorKind.PERMISSION_DENIED: "You don't have permission to delete records.",
    ErrorKind.NOT_FOUND: "The record no longer exists.",
}

_LOAD_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.MISSING_TABLE: "The table does not exist in the database.",
    ErrorKind.MISSING_COLUMN: "One or more columns are missing in the table.",
    ErrorKind.PERMISSION_DENIED: "You don't have permission to view this data.",
    ErrorKind.CONNECTION: "Cannot connect to the database. Please check your connection.",
}

_LOOKUP_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.MISSING_TABLE: "The reference table does not exist in the database.",
    ErrorKind.MISSING_COLUMN: "One or more columns are missing in the reference table.",
    ErrorKind.PERMISSION_DENIED: "Database access denied. Please check your database permissions.",
    ErrorKind.CONNECTION: "Cannot connect to the database. Please check your connection.",
}


def _detail(catalog: dict[ErrorKind, str], error: DataAccessError) -> str:
    return catalog.get(error.kind, f"Database error: {error.message}")


def save_failed(error: DataAccessError) -> str:
    return f"Unable to save the record. {_detail(_SAVE_MESSAGES, error)}"


def delete_failed(error: DataAccessError) -> str:
    return f"Unable to delete this record. {_detail(_DELETE_MESSAGES, error)}"


def load_failed(table: str, error: DataAccessError) -> str:
    return f"Unable to load data from {table}. {_detail(_LOAD_MESSAGES, error)}"


def lookup_failed(table: str, error: DataAccessError) -> str:
    return f"Unable to load reference data for {table}. {_detail(_LOOKUP_MESSAGES, error)}"
