# dbshell

Building blocks for an interactive SQL command-line client. The package is a
library with no dependencies outside the standard library.

## Modules

- `dbshell.qtype`: `query_exec_type(prefix, sqlstr)` takes the upper-cased
  leading words of a statement, separated by single spaces, and returns a pair:
  the statement type and whether the statement returns rows. Modifiers after
  `CREATE` (such as `OR REPLACE`, `TEMP` or `UNIQUE`) are ignored, as is
  `PROCEDURAL` after `DROP`. The longest known prefix is chosen. `PRAGMA`
  counts as a query only when the statement contains no `=`.
- `dbshell.variables.Variables` holds three kinds of variable:
  - standard variables: `get`, `set`, `unset`, `dump`;
  - print (display) variables: `get_print`, `set_print`, `toggle_print`,
    `dump_print`, `print_time_format`;
  - named connection variables: `set_conn`, `get_conn`, `dump_conn`.

  `Variables.defaults()` fills in the defaults from the environment. Invalid
  names raise `InvalidIdentifier`, invalid values raise `InvalidValue`, and
  unknown print variables raise `KeyError`.
- `dbshell.environ` has environment helpers:
  - `unquote`, `quote` and `untick` handle quoting; `untick` can run
    backticked text through the shell;
  - `valid_identifier`, `parse_bool` and `parse_keyword_bool` validate input;
  - `history_file` and `rc_file` return `~/.dbshell_history` and
    `~/.dbshellrc`, which `DBSHELL_HISTORY` and `DBSHELLRC` override;
  - `get_shell`, `run_shell`, `exec_shell` and `open_pipe` run commands in the
    user's shell;
  - `edit_file` opens a file, or a temporary file holding a buffer, in an
    editor and returns its contents;
  - `open_file`, `chdir`, `expand_path` and `getenv` work with paths and the
    environment.

  Errors are subclasses of `EnvError`.
- `dbshell.listing`: `listing(out)` writes the help text that lists the
  specially treated variables. `build_config_dir(name)` returns the config
  file path shown in that text and the resolved path.
- `dbshell.sqlitetime`: `parse_sqlite_time` parses the timestamp layouts that
  SQLite stores. A value with no offset is taken as UTC. `convert_bytes`
  reformats such a value with a `strftime` format and returns any other value
  unchanged.
- `dbshell.sqlite_meta`: `SqliteMetadataReader(conn, limit)` reads metadata
  from a `sqlite3` connection. It provides `tables`, `columns`, `schemas`,
  `functions`, `function_columns` and `indexes`, plus `index_columns`. Each
  takes a `Filter` and returns a list of dataclasses. Name filters use SQL
  `LIKE`.
- `dbshell.sqlserver`:
  - `SqlServerMetadataReader(conn, limit)` reads catalogs, indexes and index
    columns through a DB-API connection. Its queries use `@pN` placeholders.
  - `sqlserver_data_type` renders a column type and omits sizes that are the
    default.
  - `NullUniqueIdentifier` holds a nullable `uniqueidentifier`.
  - There are also error-message, password-error and change-password helpers.
- `dbshell.oracle`: the `oracle_process` and `trim_statement_end` helpers
  remove a trailing `;` from a statement, unless it ends in `END;`. The module
  also has:
  - `oracle_force_params`, which reads the service name from `ORACLE_SID` or
    `ORASID`;
  - helpers for errors, placeholders and password changes.
- `dbshell.odbc`: `odbc_process`, which removes the trailing `;` when trimming
  is switched on, and `is_odbc_password_error`.
- `dbshell.vertica`: the `vertica_error` and `is_vertica_password_error`
  helpers handle errors. `vertica_tls_dsn` loads `ca_path` into an
  `ssl.SSLContext` and requires `tlsmode=server-strict`. There is also
  `vertica_change_password_sql`.
- `dbshell.sapase`: error-message, password-error and change-password helpers.

## Examples

```python
from dbshell.qtype import query_exec_type

query_exec_type("SELECT", "select 1")            # ("SELECT", True)
query_exec_type("CREATE OR REPLACE VIEW", "...") # ("CREATE VIEW", False)
```

```python
import sys
from dbshell.variables import Variables

v = Variables.defaults()
v.set_print("format", "csv")
v.toggle_print("footer", "")
v.dump_print(sys.stdout)
```

```python
import sqlite3
from dbshell.sqlite_meta import Filter, SqliteMetadataReader

conn = sqlite3.connect("example.db")
reader = SqliteMetadataReader(conn, 0)
for table in reader.tables(Filter(types=["TABLE", "VIEW"])):
    print(table.name, table.type)
```

## What it does not do

- It has no command and no interactive prompt.
- It does not open connections to SQL Server, Oracle, Vertica, SAP ASE or ODBC
  databases. The helpers for those systems only work on strings and on
  connections that you provide.
- It does not render result tables. The print variables are stored and
  validated, but nothing in the package formats rows with them.

## Tests

```
pip install -e .[test]
pytest
```