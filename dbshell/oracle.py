"""Statement and error handling for Oracle Database connections."""

from __future__ import annotations

import re

from dbshell.environ import getenv
from dbshell.qtype import query_exec_type

_END_RE = re.compile(r";?[\t\n\f\r ]*\Z")
_END_ANCHOR_RE = re.compile(r"[\t\n\f\r ]end[\t\n\f\r ]*;[\t\n\f\r ]*\Z", re.IGNORECASE)

VERSION_QUERY = "SELECT version FROM v$instance"
USER_QUERY = "SELECT user FROM dual"


def oracle_error(message: str, code: int | None = None) -> tuple[str, str]:
    """Return the ``ORA-`` code and trimmed message of an Oracle error."""
    code_str = f"ORA-{code:05d}" if code is not None else ""
    return code_str, message.strip()


def is_oracle_password_error(message: str) -> bool:
    """Whether an error message reports a missing password."""
    return "empty password" in message


def trim_statement_end(sqlstr: str) -> str:
    """Remove a trailing semicolon, unless the statement ends in ``END;``."""
    if _END_ANCHOR_RE.search(sqlstr):
        return sqlstr
    return _END_RE.sub("", sqlstr, count=1)


def oracle_process(prefix: str, sqlstr: str) -> tuple[str, str, bool]:
    """Prepare a statement; return its type, text, and whether it returns rows."""
    sqlstr = trim_statement_end(sqlstr)
    typ, is_query = query_exec_type(prefix, sqlstr)
    return typ, sqlstr, is_query


def oracle_force_params(path: str, host: str) -> tuple[str, str]:
    """Fill in the service name from ``ORACLE_SID``/``ORASID`` when none is given.

    Returns the URL path and host to use.
    """
    if path.removeprefix("/") == "":
        name = getenv("ORACLE_SID", "ORASID")
        if name:
            path = "/" + name
            if host == "":
                host = "localhost"
    return path, host


def oracle_placeholder(n: int) -> str:
    """The bind placeholder for parameter ``n``."""
    return f":{n}"


def oracle_change_password_sql(user: str, newpw: str) -> str:
    """The statement that changes ``user``'s password."""
    return f"ALTER USER {user} IDENTIFIED BY {newpw}"