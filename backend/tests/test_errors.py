"""Tests for translating driver exceptions into structured error kinds."""

import sqlite3

import pytest
from sqlalchemy import exc as sa_exc

from recordforge.persistence.errors import DataAccessError, ErrorKind, translate_error


class FakePgError(Exception):
    def __init__(self, message, sqlstate):
        super().__init__(message)
        self.sqlstate = sqlstate


class FakeMySQLError(Exception):
    """Shaped like pymysql errors: args = (errno, message)."""


def wrap(orig, cls=sa_exc.IntegrityError):
    return cls("INSERT ...", {}, orig)


class TestSQLState:
    @pytest.mark.parametrize(
        "sqlstate,kind",
        [
            ("23505", ErrorKind.DUPLICATE_KEY),
            ("23503", ErrorKind.FOREIGN_KEY_VIOLATION),
            ("23502", ErrorKind.REQUIRED_FIELD_VIOLATION),
            ("22001", ErrorKind.DATA_TOO_LONG),
            ("42501", ErrorKind.PERMISSION_DENIED),
            ("42P01", ErrorKind.MISSING_TABLE),
            ("42703", ErrorKind.MISSING_COLUMN),
        ],
    )
    def test_postgres_codes(self, sqlstate, kind):
        error = translate_error(wrap(FakePgError("boom", sqlstate)), table="doctor")
        assert error.kind == kind
        assert error.table == "doctor"
        assert error.message == "boom"


class TestMySQLErrno:
    @pytest.mark.parametrize(
        "errno,kind",
        [
            (1062, ErrorKind.DUPLICATE_KEY),
            (1451, ErrorKind.FOREIGN_KEY_VIOLATION),
            (1452, ErrorKind.FOREIGN_KEY_VIOLATION),
            (1048, ErrorKind.REQUIRED_FIELD_VIOLATION),
            (1406, ErrorKind.DATA_TOO_LONG),
            (1142, ErrorKind.PERMISSION_DENIED),
            (1146, ErrorKind.MISSING_TABLE),
            (1054, ErrorKind.MISSING_COLUMN),
        ],
    )
    def test_mysql_errnos(self, errno, kind):
        assert translate_error(wrap(FakeMySQLError(errno, "boom"))).kind == kind


class TestSQLite:
    @pytest.mark.parametrize(
        "message,kind",
        [
            ("UNIQUE constraint failed: doctor.doctorid", ErrorKind.DUPLICATE_KEY),
            ("FOREIGN KEY constraint failed", ErrorKind.FOREIGN_KEY_VIOLATION),
            ("NOT NULL constraint failed: doctor.surname", ErrorKind.REQUIRED_FIELD_VIOLATION),
            ("no such table: doctor", ErrorKind.MISSING_TABLE),
            ("no such column: nope", ErrorKind.MISSING_COLUMN),
        ],
    )
    def test_message_prefixes(self, message, kind):
        orig = sqlite3.IntegrityError(message)
        assert translate_error(wrap(orig)).kind == kind

    def test_real_driver_error(self):
        conn = sqlite3.connect(":memory:")
        conn.execute("CREATE TABLE t (id TEXT PRIMARY KEY)")
        conn.execute("INSERT INTO t VALUES ('a')")
        with pytest.raises(sqlite3.IntegrityError) as info:
            conn.execute("INSERT INTO t VALUES ('a')")
        conn.close()
        assert translate_error(wrap(info.value)).kind == ErrorKind.DUPLICATE_KEY


class TestFallbacks:
    def test_unrecognised_integrity_error(self):
        assert translate_error(wrap(Exception("odd"))).kind == ErrorKind.UNKNOWN

    def test_data_error(self):
        assert translate_error(wrap(Exception("odd"), sa_exc.DataError)).kind == ErrorKind.DATA_TOO_LONG

    def test_interface_error(self):
        error = translate_error(wrap(Exception("gone"), sa_exc.InterfaceError))
        assert error.kind == ErrorKind.CONNECTION

    def test_data_access_error_passes_through(self):
        original = DataAccessError(ErrorKind.NOT_FOUND, "no row")
        assert translate_error(original) is original

    def test_repr(self):
        error = DataAccessError(ErrorKind.DUPLICATE_KEY, "dup", table="doctor")
        assert "DUPLICATE_KEY" in repr(error)
        assert str(error) == "dup"
