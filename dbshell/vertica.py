"""Connection, error and statement helpers for Vertica."""

from __future__ import annotations

import re
import ssl
from pathlib import Path
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

_ERR_CODE_RE = re.compile(r"^\[([0-9a-z]+)\][\t\n\f\r ]+(.+)", re.IGNORECASE)

VERSION_QUERY = "SELECT version()"
CUSTOM_TLS_CONFIG = "custom_tls_config"


def vertica_error(message: str) -> tuple[str, str]:
    """Split a Vertica error message into its code and text."""
    msg = message.removeprefix("Error:").strip()
    match = _ERR_CODE_RE.match(msg)
    if match:
        return match.group(1), match.group(2).strip()
    return "", msg


def is_vertica_password_error(message: str) -> bool:
    """Whether an error message reports bad credentials."""
    return message.strip().endswith("Invalid username or password")


def vertica_tls_dsn(dsn: str) -> tuple[str, ssl.SSLContext | None]:
    """Apply the ``ca_path`` option of ``dsn``.

    When ``ca_path`` is set, ``tlsmode`` must be ``server-strict``; the CA file
    is loaded into a TLS context and the DSN's ``tlsmode`` is switched to the
    custom configuration. Returns the DSN and the context (``None`` when no
    CA is given).
    """
    parts = urlsplit(dsn)
    query = parse_qsl(parts.query, keep_blank_values=True)
    values = dict(query)
    name = values.get("ca_path", "")
    if not name:
        return dsn, None
    if values.get("tlsmode", "") != "server-strict":
        raise ValueError("tlsmode must be set to server-strict: ca_path is set")
    pem = Path(name).read_text(encoding="utf-8")
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    try:
        context.load_verify_locations(cadata=pem)
    except (ssl.SSLError, ValueError) as exc:
        raise ValueError("failed to append pem to cert pool") from exc
    new_query = [(k, CUSTOM_TLS_CONFIG if k == "tlsmode" else v) for k, v in query]
    return urlunsplit(parts._replace(query=urlencode(new_query))), context


def vertica_change_password_sql(user: str, newpw: str) -> str:
    """The statement that changes ``user``'s password."""
    return f"ALTER USER {user} IDENTIFIED BY '{newpw}'"