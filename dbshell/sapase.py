"""Error and statement helpers for SAP ASE."""

from __future__ import annotations

VERSION_QUERY = "SELECT @@version"


def sapase_error_message(message: str) -> str:
    """Trim a driver error message to its last ``tds:`` part."""
    i = message.rfind("tds:")
    return message[i:] if i != -1 else message


def is_sapase_password_error(message: str) -> bool:
    """Whether an error message reports a failed login."""
    return "Login failed" in message


def sapase_change_password_sql(user: str, newpw: str, oldpw: str) -> str:
    """The statement that changes the current user's password.

    Raises ``ValueError`` when ``user`` names another user.
    """
    if user:
        raise ValueError("Cannot change password for another user")
    return f"exec sp_password '{oldpw}', '{newpw}'"