import uuid

import pytest

from dbshell.sqlite_meta import Filter
from dbshell.sqlserver import (
    NullUniqueIdentifier,
    SqlServerMetadataReader,
    is_sqlserver_password_error,
    sqlserver_change_password_sql,
    sqlserver_data_type,
    sqlserver_error_message,
    sqlserver_placeholder,
)


class FakeCursor:
    def __init__(self, rows, log):
        self.rows = rows
        self.log = log
        self.closed = False

    def execute(self, query, params):
        self.log.append((query, params))

    def fetchall(self):
        return self.rows

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self, rows=()):
        self.rows = list(rows)
        self.log = []

    def cursor(self):
        return FakeCursor(self.rows, self.log)


@pytest.mark.parametrize(
    "data_type,size,digits,want",
    [
        ("bigint", 19, 0, "bigint"),
        ("numeric", 18, 0, "numeric"),
        ("numeric", 4, 2, "numeric(4,2)"),
        ("decimal", 18, 0, "decimal"),
        ("decimal", 4, 2, "decimal(4,2)"),
        ("datetimeoffset", 7, 0, "datetimeoffset"),
        ("datetimeoffset", 5, 0, "datetimeoffset(5)"),
        ("datetime2", 7, 0, "datetime2"),
        ("datetime2", 5, 0, "datetime2(5)"),
        ("time", 7, 0, "time"),
        ("time", 5, 0, "time(5)"),
        ("char", 1, 0, "char"),
        ("char", 3, 0, "char(3)"),
        ("varchar", 1, 0, "varchar"),
        ("varchar", 12, 0, "varchar(12)"),
        ("varchar", -1, 0, "varchar(max)"),
        ("nchar", 2, 0, "nchar(2)"),
        ("nchar", 1, 0, "nchar"),
        ("nvarchar", 12, 0, "nvarchar(12)"),
        ("nvarchar", 1, 0, "nvarchar"),
        ("nvarchar", -1, 0, "nvarchar(max)"),
        ("binary", 12, 0, "binary(12)"),
        ("binary", 1, 0, "binary"),
        ("varbinary", 12, 0, "varbinary(12)"),
        ("varbinary", 1, 0, "varbinary"),
        ("varbinary", -1, 0, "varbinary(max)"),
        ("text", 2147483647, 0, "text"),
        ("uniqueidentifier", 16, 0, "uniqueidentifier"),
        ("xml", -1, 0, "xml"),
        ("geography", -1, 0, "geography"),
    ],
)
def test_data_type(data_type, size, digits, want):
    assert sqlserver_data_type(data_type, size, digits) == want


def test_placeholder():
    assert sqlserver_placeholder(3) == "@p3"


def test_error_message_trimmed():
    assert sqlserver_error_message("conn: sqlserver: boom") == "sqlserver: boom"
    assert sqlserver_error_message("other failure") == "other failure"


def test_password_error():
    assert is_sqlserver_password_error("mssql: Login failed for user 'sa'.")
    assert not is_sqlserver_password_error("timeout")


def test_change_password_sql():
    assert (
        sqlserver_change_password_sql("bob", "secret", "password")
        == "ALTER LOGIN bob WITH password = 'secret' old_password = 'password'"
    )


def test_null_unique_identifier_none():
    n = NullUniqueIdentifier()
    n.scan(None)
    assert not n.valid
    assert str(n) == ""


def test_null_unique_identifier_wire_bytes():
    value = uuid.UUID("6F9619FF-8B86-D011-B42D-00C04FC964FF")
    n = NullUniqueIdentifier()
    n.scan(value.bytes_le)
    assert n.valid
    assert str(n) == "6F9619FF-8B86-D011-B42D-00C04FC964FF"


def test_null_unique_identifier_text_round_trip():
    n = NullUniqueIdentifier()
    n.scan("6f9619ff-8b86-d011-b42d-00c04fc964ff")
    assert str(n) == "6F9619FF-8B86-D011-B42D-00C04FC964FF"


def test_null_unique_identifier_bad_length():
    n = NullUniqueIdentifier()
    with pytest.raises(ValueError):
        n.scan(b"\x00\x01")
    assert not n.valid


def test_catalogs():
    conn = FakeConnection([("master",), ("sakila",)])
    result = SqlServerMetadataReader(conn).catalogs(Filter())
    assert [c.catalog for c in result] == ["master", "sakila"]
    query, params = conn.log[0]
    assert query.endswith("FROM sys.databases\nORDER BY name")
    assert params == ()


def test_indexes_filters_and_limit():
    conn = FakeConnection(
        [("sakila", "dbo", "actor", "pk_actor", "YES", "YES", "CLUSTERED")]
    )
    reader = SqlServerMetadataReader(conn, limit=5)
    result = reader.indexes(Filter(schema="dbo", parent="actor"))
    assert len(result) == 1
    assert result[0].table == "actor"
    assert result[0].name == "pk_actor"
    assert result[0].type == "CLUSTERED"
    query, params = conn.log[0]
    assert "s.name LIKE @p1" in query
    assert "t.name LIKE @p2" in query
    assert "s.name NOT IN (" in query
    assert query.endswith("ORDER BY s.name, t.name, i.name\nFETCH FIRST 5 ROWS ONLY")
    assert params == ("dbo", "actor")


def test_index_columns_with_system_and_visible():
    conn = FakeConnection(
        [("sakila", "dbo", "actor", "idx_actor", "last_name", "actor", 1)]
    )
    reader = SqlServerMetadataReader(conn)
    result = reader.index_columns(Filter(name="idx%", with_system=True, only_visible=True))
    assert result[0].name == "last_name"
    assert result[0].index_name == "idx_actor"
    assert result[0].ordinal_position == 1
    query, params = conn.log[0]
    assert "NOT IN" not in query
    assert "s.name = schema_name()" in query
    assert "i.name LIKE @p1" in query
    assert params == ("idx%",)
    assert "FETCH FIRST" not in query