"""Metadata reading, type formatting and error handling for Microsoft SQL Server."""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from dbshell.sqlite_meta import Catalog, Filter, Index, IndexColumn

_SYSTEM_SCHEMAS_COND = (
    "s.name NOT IN ('db_accessadmin', 'db_backupoperator', 'db_datareader', "
    "'db_datawriter', 'db_ddladmin', 'db_denydatareader', 'db_denydatawriter', "
    "'db_owner', 'db_securityadmin', 'INFORMATION_SCHEMA', 'sys')"
)

_CATALOGS_SQL = """SELECT name
FROM sys.databases"""

_INDEXES_SQL = """
SELECT
  db_name(),
  s.name,
  t.name,
  COALESCE(i.name, ''),
  CASE WHEN i.is_primary_key = 1 THEN 'YES' ELSE 'NO' END,
  CASE WHEN i.is_unique = 1 THEN 'YES' ELSE 'NO' END,
  i.type_desc
FROM sys.schemas s
JOIN sys.tables t on t.schema_id = s.schema_id
JOIN sys.indexes i ON i.object_id = t.object_id
"""

_INDEX_COLUMNS_SQL = """
SELECT
  db_name(),
  s.name,
  t.name,
  COALESCE(i.name, ''),
  c.name,
  t.name,
  ic.key_ordinal
FROM sys.schemas s
JOIN sys.tables t on t.schema_id = s.schema_id
JOIN sys.indexes i ON i.object_id = t.object_id
JOIN sys.index_columns ic ON i.object_id = ic.object_id and i.index_id = ic.index_id
JOIN sys.columns c ON ic.object_id = c.object_id and ic.column_id = c.column_id
JOIN sys.types ty ON ty.user_type_id = c.user_type_id
"""

VERSION_QUERY = (
    "SELECT SERVERPROPERTY('productversion'), SERVERPROPERTY ('productlevel'), "
    "SERVERPROPERTY ('edition')"
)


def sqlserver_placeholder(n: int) -> str:
    """The bind placeholder for parameter ``n``."""
    return f"@p{n}"


def sqlserver_data_type(data_type: str, column_size: int, decimal_digits: int) -> str:
    """Render a column type the way it would be declared, omitting default sizes."""
    if data_type in ("numeric", "decimal"):
        if column_size == 18 and decimal_digits == 0:
            return data_type
        return f"{data_type}({column_size},{decimal_digits})"
    if data_type in ("datetimeoffset", "datetime2", "time"):
        if column_size == 7:
            return data_type
        return f"{data_type}({column_size})"
    if data_type in ("char", "nchar", "binary"):
        if column_size == 1:
            return data_type
        return f"{data_type}({column_size})"
    if data_type in ("varchar", "nvarchar", "varbinary"):
        if column_size == -1:
            return data_type + "(max)"
        if column_size == 1:
            return data_type
        return f"{data_type}({column_size})"
    return data_type


def sqlserver_error_message(message: str) -> str:
    """Trim a driver error message to its last ``sqlserver:`` part."""
    i = message.rfind("sqlserver:")
    return message[i:] if i != -1 else message


def is_sqlserver_password_error(message: str) -> bool:
    """Whether an error message reports a failed login."""
    return "Login failed for" in message


def sqlserver_change_password_sql(user: str, newpw: str, oldpw: str) -> str:
    """The statement that changes ``user``'s password."""
    return f"ALTER LOGIN {user} WITH password = '{newpw}' old_password = '{oldpw}'"


@dataclass
class NullUniqueIdentifier:
    """A nullable SQL Server ``uniqueidentifier`` value."""

    id: uuid.UUID | None = None
    valid: bool = False

    def scan(self, value: Any) -> None:
        """Load ``value`` (``None``, 16 wire bytes, a UUID or its text)."""
        self.valid = False
        if value is None:
            return
        if isinstance(value, uuid.UUID):
            parsed = value
        elif isinstance(value, (bytes, bytearray)):
            if len(value) != 16:
                raise ValueError("invalid UniqueIdentifier length")
            parsed = uuid.UUID(bytes_le=bytes(value))
        elif isinstance(value, str):
            parsed = uuid.UUID(value)
        else:
            raise TypeError(f"cannot convert type {type(value).__name__} to UniqueIdentifier")
        self.id = parsed
        self.valid = True

    def __str__(self) -> str:
        if self.valid and self.id is not None:
            return str(self.id).upper()
        return ""


class SqlServerMetadataReader:
    """Reads catalogs, indexes and index columns from SQL Server system views."""

    def __init__(self, conn: Any, limit: int = 0) -> None:
        self.conn = conn
        self.limit = limit

    def _query(
        self, qstr: str, conds: list[str], order: str, vals: Sequence[Any] = ()
    ) -> list[tuple]:
        if conds:
            qstr += "\nWHERE " + " AND ".join(conds)
        if order:
            qstr += "\nORDER BY " + order
        if self.limit:
            qstr += f"\nFETCH FIRST {self.limit} ROWS ONLY"
        cursor = self.conn.cursor()
        try:
            cursor.execute(qstr, tuple(vals))
            return list(cursor.fetchall())
        finally:
            cursor.close()

    @staticmethod
    def _conditions(f: Filter) -> tuple[list[str], list[Any]]:
        conds: list[str] = []
        vals: list[Any] = []
        if f.only_visible:
            conds.append("s.name = schema_name()")
        if not f.with_system:
            conds.append(_SYSTEM_SCHEMAS_COND)
        for column, value in (("s.name", f.schema), ("t.name", f.parent), ("i.name", f.name)):
            if value:
                vals.append(value)
                conds.append(f"{column} LIKE {sqlserver_placeholder(len(vals))}")
        return conds, vals

    def catalogs(self, f: Filter) -> list[Catalog]:
        """All databases on the server, ordered by name."""
        rows = self._query(_CATALOGS_SQL, [], "name")
        return [Catalog(catalog=name) for (name,) in rows]

    def indexes(self, f: Filter) -> list[Index]:
        """Indexes matching ``f``, ordered by schema, table and name."""
        conds, vals = self._conditions(f)
        rows = self._query(_INDEXES_SQL, conds, "s.name, t.name, i.name", vals)
        # Column order follows the reader this mirrors: unique, then primary.
        return [
            Index(
                catalog=cat,
                schema=sch,
                table=tbl,
                name=name,
                is_unique=first,
                is_primary=second,
                type=typ,
            )
            for cat, sch, tbl, name, first, second, typ in rows
        ]

    def index_columns(self, f: Filter) -> list[IndexColumn]:
        """Columns of the indexes matching ``f``, in index order."""
        conds, vals = self._conditions(f)
        rows = self._query(
            _INDEX_COLUMNS_SQL, conds, "s.name, t.name, i.name, ic.index_column_id", vals
        )
        return [
            IndexColumn(
                catalog=cat,
                schema=sch,
                table=tbl,
                index_name=idx,
                name=name,
                data_type=dtype,
                ordinal_position=pos,
            )
            for cat, sch, tbl, idx, name, dtype, pos in rows
        ]