"""Structured data access errors.

Driver exceptions are translated once, at the repository boundary, into a
DataAccessError carrying an ErrorKind. Callers switch on the kind and never
inspect driver message text.
"""

from enum import Enum

from sqlalchemy import exc as sa_exc


class ErrorKind(Enum):
    DUPLICATE_KEY = "duplicate_key"
    FOREIGN_KEY_VIOLATION = "foreign_key_violation"
    REQUIRED_FIELD_VIOLATION = "required_field_violation"
    DATA_TOO_LONG = "data_too_long"
    PERMISSION_DENIED = "permission_denied"
    MISSING_TABLE = "missing_table"
    MISSING_COLUMN = "missing_column"
    CONNECTION = "connection"
    NOT_FOUND = "not_found"
    UNKNOWN = "unknown"


class DataAccessError(Exception):
    """Raised by repositories for any failed database operation."""

    def __init__(self, kind: ErrorKind, message: str, table: str | None = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.table = table

    def __repr__(self) -> str:
        return f"DataAccessError({self.kind.name}, {self.message!r}, table={self.table!r})"


# SQLSTATE classes / codes reported by PostgreSQL and MySQL drivers
_SQLSTATE_KINDS: dict[str, ErrorKind] = {
    "23505": ErrorKind.DUPLICATE_KEY,
    "23503": ErrorKind.FOREIGN_KEY_VIOLATION,
    "23502": ErrorKind.REQUIRED_FIELD_VIOLATION,
    "22001": ErrorKind.DATA_TOO_LONG,
    "22007": ErrorKind.DATA_TOO_LONG,
    "22008": ErrorKind.DATA_TOO_LONG,
    "42501": ErrorKind.PERMISSION_DENIED,
    "42P01": ErrorKind.MISSING_TABLE,
    "42703": ErrorKind.MISSING_COLUMN,
    "42S02": ErrorKind.MISSING_TABLE,
    "42S22": ErrorKind.MISSING_COLUMN,
    "28000": ErrorKind.PERMISSION_DENIED,
}

# MySQL server error numbers
_MYSQL_ERRNO_KINDS: dict[int, ErrorKind] = {
    1062: ErrorKind.DUPLICATE_KEY,
    1451: ErrorKind.FOREIGN_KEY_VIOLATION,
    1452: ErrorKind.FOREIGN_KEY_VIOLATION,
    1048: ErrorKind.REQUIRED_FIELD_VIOLATION,
    1364: ErrorKind.REQUIRED_FIELD_VIOLATION,
    1406: ErrorKind.DATA_TOO_LONG,
    1265: ErrorKind.DATA_TOO_LONG,
    1292: ErrorKind.DATA_TOO_LONG,
    1044: ErrorKind.PERMISSION_DENIED,
    1045: ErrorKind.PERMISSION_DENIED,
    1142: ErrorKind.PERMISSION_DENIED,
    1146: ErrorKind.MISSING_TABLE,
    1054: ErrorKind.MISSING_COLUMN,
}

# Extended result codes exposed by sqlite3 on Python 3.11+
_SQLITE_ERRORNAMES: dict[str, ErrorKind] = {
    "SQLITE_CONSTRAINT_UNIQUE": ErrorKind.DUPLICATE_KEY,
    "SQLITE_CONSTRAINT_PRIMARYKEY": ErrorKind.DUPLICATE_KEY,
    "SQLITE_CONSTRAINT_FOREIGNKEY": ErrorKind.FOREIGN_KEY_VIOLATION,
    "SQLITE_CONSTRAINT_NOTNULL": ErrorKind.REQUIRED_FIELD_VIOLATION,
    "SQLITE_READONLY": ErrorKind.PERMISSION_DENIED,
    "SQLITE_AUTH": ErrorKind.PERMISSION_DENIED,
    "SQLITE_CANTOPEN": ErrorKind.CONNECTION,
}

# Older interpreters only expose the message, whose prefixes are fixed
_SQLITE_PREFIXES: tuple[tuple[str, ErrorKind], ...] = (
    ("UNIQUE constraint failed", ErrorKind.DUPLICATE_KEY),
    ("PRIMARY KEY constraint failed", ErrorKind.DUPLICATE_KEY),
    ("FOREIGN KEY constraint failed", ErrorKind.FOREIGN_KEY_VIOLATION),
    ("NOT NULL constraint failed", ErrorKind.REQUIRED_FIELD_VIOLATION),
    ("CHECK constraint failed", ErrorKind.DATA_TOO_LONG),
    ("no such table", ErrorKind.MISSING_TABLE),
    ("no such column", ErrorKind.MISSING_COLUMN),
    ("attempt to write a readonly database", ErrorKind.PERMISSION_DENIED),
    ("unable to open database file", ErrorKind.CONNECTION),
)


def translate_error(error: Exception, table: str | None = None) -> DataAccessError:
    """Translate a SQLAlchemy / DBAPI exception into a DataAccessError."""
    if isinstance(error, DataAccessError):
        return error

    original = getattr(error, "orig", None) or error
    message = str(original)
    kind = _kind_from_driver(original)

    if kind is None:
        if isinstance(error, sa_exc.IntegrityError):
            kind = ErrorKind.UNKNOWN
        elif isinstance(error, sa_exc.DataError):
            kind = ErrorKind.DATA_TOO_LONG
        elif isinstance(error, sa_exc.InterfaceError):
            kind = ErrorKind.CONNECTION
        elif isinstance(error, sa_exc.OperationalError) and getattr(
            error, "connection_invalidated", False
        ):
            kind = ErrorKind.CONNECTION
        else:
            kind = ErrorKind.UNKNOWN

    return DataAccessError(kind, message, table=table)


def _kind_from_driver(original: BaseException) -> ErrorKind | None:
    sqlstate = getattr(original, "sqlstate", None) or getattr(original, "pgcode", None)
    if sqlstate and sqlstate in _SQLSTATE_KINDS:
        return _SQLSTATE_KINDS[sqlstate]

    args = getattr(original, "args", ())
    if args and isinstance(args[0], int) and args[0] in _MYSQL_ERRNO_KINDS:
        return _MYSQL_ERRNO_KINDS[args[0]]

    errorname = getattr(original, "sqlite_errorname", None)
    if errorname in _SQLITE_ERRORNAMES:
        return _SQLITE_ERRORNAMES[errorname]

    if type(original).__module__.startswith("sqlite3"):
        text = str(original)
        for prefix, kind in _SQLITE_PREFIXES:
            if text.startswith(prefix):
                return kind

    return None
