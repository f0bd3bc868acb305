"""Statement handling for ODBC connections."""

from __future__ import annotations

import re

from dbshell.qtype import query_exec_type

_END_RE = re.compile(r";?[\t\n\f\r ]*\Z")
_END_ANCHOR_RE = re.compile(r"[\t\n\f\r ]end[\t\n\f\r ]*;[\t\n\f\r ]*\Z", re.IGNORECASE)


def odbc_process(trim: str, prefix: str, sqlstr: str) -> tuple[str, str, bool]:
    """Prepare a statement for ODBC.

    ``trim`` is the connection's trim setting; when it is set and not a false
    value, a trailing semicolon is removed unless the statement ends in
    ``END;``. Returns the statement type, the statement, and whether it
    returns rows.
    """
    if trim.lower() not in ("", "off", "0", "false"):
        if not _END_ANCHOR_RE.search(sqlstr):
            sqlstr = _END_RE.sub("", sqlstr, count=1)
    typ, is_query = query_exec_type(prefix, sqlstr)
    return typ, sqlstr, is_query


def is_odbc_password_error(message: str) -> bool:
    """Whether an ODBC error message reports a failed login."""
    msg = message.lower()
    return "failed" in msg and any(
        word in msg for word in ("login", "authentication", "password")
    )