"""Metadata reading for SQLite databases."""

from __future__ import annotations

import sqlite3
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any


@dataclass
class Filter:
    """Criteria for selecting metadata records; empty values match all."""

    catalog: str = ""
    schema: str = ""
    name: str = ""
    parent: str = ""
    reference: str = ""
    types: Sequence[str] = ()
    with_system: bool = False
    only_visible: bool = False


@dataclass
class Catalog:
    catalog: str = ""


@dataclass
class Table:
    catalog: str = ""
    schema: str = ""
    name: str = ""
    type: str = ""
    rows: int = 0
    size: str = ""
    comment: str = ""


@dataclass
class Column:
    catalog: str = ""
    schema: str = ""
    table: str = ""
    name: str = ""
    ordinal_position: int = 0
    data_type: str = ""
    default: str = ""
    is_nullable: str = ""
    column_size: int = 0
    decimal_digits: int = 0
    num_prec_radix: int = 0
    char_octet_length: int = 0


@dataclass
class Schema:
    schema: str = ""
    catalog: str = ""


@dataclass
class Function:
    catalog: str = ""
    schema: str = ""
    name: str = ""
    specific_name: str = ""
    type: str = ""
    result_type: str = ""
    arg_types: str = ""
    volatility: str = ""
    security: str = ""
    language: str = ""
    source: str = ""


@dataclass
class Index:
    catalog: str = ""
    schema: str = ""
    table: str = ""
    name: str = ""
    is_primary: str = ""
    is_unique: str = ""
    type: str = ""
    columns: str = ""


@dataclass
class IndexColumn:
    catalog: str = ""
    schema: str = ""
    table: str = ""
    index_name: str = ""
    name: str = ""
    data_type: str = ""
    ordinal_position: int = 0


_TABLES_SQL = r"""SELECT
  '' AS table_catalog,
  '' AS table_schem,
  table_name,
  table_type
FROM (
    SELECT
      name AS table_name,
      UPPER(type) AS table_type
    FROM sqlite_master
    WHERE name NOT LIKE 'sqlite\_%' ESCAPE '\' AND UPPER(type) IN ('TABLE', 'VIEW')
    UNION ALL
    SELECT
      name AS table_name,
      'GLOBAL TEMPORARY' AS table_type
    FROM sqlite_temp_master
    UNION ALL
    SELECT
      name AS table_name,
      'SYSTEM TABLE' AS table_type
    FROM sqlite_master
    WHERE name LIKE 'sqlite\_%' ESCAPE '\' AND UPPER(type) IN ('TABLE', 'VIEW')
    UNION ALL
    SELECT
      name AS table_name,
      'SYSTEM TABLE' AS table_type
    FROM pragma_module_list
)"""

_COLUMNS_SQL = """SELECT
  cid,
  name,
  type,
  CASE WHEN "notnull" = 1 THEN 'NO' ELSE 'YES' END,
  COALESCE(dflt_value, '')
FROM pragma_table_info(?)"""

_SCHEMAS_SQL = """SELECT
  name AS schema_name,
  '' AS catalog_name
FROM pragma_database_list"""

_FUNCTIONS_SQL = """SELECT
  name AS specific_name,
  name AS routine_name,
  type AS routine_type
FROM pragma_function_list"""

_INDEXES_SQL = """SELECT
  m.name,
  i.name,
  CASE WHEN i."unique" = 1 THEN 'YES' ELSE 'NO' END,
  CASE WHEN i.origin = 'pk' THEN 'YES' ELSE 'NO' END
FROM sqlite_master m
JOIN pragma_index_list(m.name) i"""

_INDEX_COLUMNS_SQL = """SELECT
  m.name,
  i.name,
  ic.name,
  ic.seqno
FROM sqlite_master m
JOIN pragma_index_list(m.name) i
JOIN pragma_index_xinfo(i.name) ic"""

# SQLite records neither names nor types for the parameters of its functions.
_FUNCTION_PARAMETERS: tuple[Column, ...] = ()


def _in_clause(column: str, types: Sequence[str]) -> str:
    return f"{column} IN (" + ", ".join("?" for _ in types) + ")"


class SqliteMetadataReader:
    """Reads tables, columns, schemas, functions and indexes of a SQLite database."""

    def __init__(self, conn: sqlite3.Connection, limit: int = 0) -> None:
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
            qstr += f"\nLIMIT {self.limit}"
        return self.conn.execute(qstr, tuple(vals)).fetchall()

    def tables(self, f: Filter) -> list[Table]:
        """Tables and views matching ``f``, ordered by type and name."""
        conds: list[str] = []
        vals: list[Any] = []
        if f.catalog:
            vals.append(f.catalog)
            conds.append("table_catalog = ?")
        if f.schema:
            vals.append(f.schema)
            conds.append("table_schema LIKE ?")
        if f.name:
            vals.append(f.name)
            conds.append("table_name LIKE ?")
        if f.types:
            vals.extend(f.types)
            conds.append(_in_clause("table_type", f.types))
        rows = self._query(_TABLES_SQL, conds, "table_type, table_name", vals)
        return [Table(catalog=c, schema=s, name=n, type=t) for c, s, n, t in rows]

    def columns(self, f: Filter) -> list[Column]:
        """Columns of the tables whose names match ``f.parent``."""
        results: list[Column] = []
        for table in self.tables(Filter(catalog=f.catalog, schema=f.schema, name=f.parent)):
            for cid, name, data_type, nullable, default in self._query(
                _COLUMNS_SQL, [], "name", (table.name,)
            ):
                results.append(
                    Column(
                        catalog=table.catalog,
                        schema=table.schema,
                        table=table.name,
                        ordinal_position=cid,
                        name=name,
                        data_type=data_type,
                        is_nullable=nullable,
                        default=default,
                    )
                )
        return results

    def schemas(self, f: Filter) -> list[Schema]:
        """Attached databases matching ``f.name``."""
        conds: list[str] = []
        vals: list[Any] = []
        if f.name:
            vals.append(f.name)
            conds.append("schema_name LIKE ?")
        rows = self._query(_SCHEMAS_SQL, conds, "seq", vals)
        return [Schema(schema=s, catalog=c) for s, c in rows]

    def functions(self, f: Filter) -> list[Function]:
        """Known SQL functions matching ``f``, ordered by name and type."""
        conds: list[str] = []
        vals: list[Any] = []
        if f.name:
            vals.append(f.name)
            conds.append("name LIKE ?")
        if f.types:
            vals.extend(f.types)
            conds.append(_in_clause("type", f.types))
        rows = self._query(_FUNCTIONS_SQL, conds, "name, type", vals)
        return [Function(specific_name=s, name=n, type=t) for s, n, t in rows]

    def function_columns(self, f: Filter) -> list[Column]:
        """Function parameters; SQLite keeps none, so the list is always empty."""
        return list(_FUNCTION_PARAMETERS)

    def indexes(self, f: Filter) -> list[Index]:
        """Indexes of tables matching ``f.parent`` whose names match ``f.name``."""
        conds = ["m.type = 'table'"]
        vals: list[Any] = []
        if f.parent:
            vals.append(f.parent)
            conds.append("m.name LIKE ?")
        if f.name:
            vals.append(f.name)
            conds.append("i.name LIKE ?")
        rows = self._query(_INDEXES_SQL, conds, "m.name, i.seq", vals)
        return [
            Index(table=t, name=n, is_unique=u, is_primary=p) for t, n, u, p in rows
        ]

    def index_columns(self, f: Filter) -> list[IndexColumn]:
        """Key columns of the indexes matching ``f``."""
        conds = ["m.type = 'table' AND ic.cid >= 0"]
        vals: list[Any] = []
        if f.parent:
            vals.append(f.parent)
            conds.append("m.name LIKE ?")
        if f.name:
            vals.append(f.name)
            conds.append("i.name LIKE ?")
        rows = self._query(_INDEX_COLUMNS_SQL, conds, "m.name, i.seq, ic.seqno", vals)
        return [
            IndexColumn(table=t, index_name=i, name=n, ordinal_position=p)
            for t, i, n, p in rows
        ]