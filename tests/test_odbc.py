import pytest

from dbshell.odbc import is_odbc_password_error, odbc_process


def test_trims_trailing_semicolon():
    assert odbc_process("on", "SELECT", "SELECT 1;  ") == ("SELECT", "SELECT 1", True)


def test_keeps_end_semicolon():
    sql = "BEGIN x := 1; END;"
    assert odbc_process("true", "BEGIN", sql) == ("BEGIN", sql, False)


@pytest.mark.parametrize("trim", ["", "off", "0", "FALSE"])
def test_no_trim_when_disabled(trim):
    assert odbc_process(trim, "INSERT INTO", "INSERT INTO t VALUES (1);") == (
        "INSERT",
        "INSERT INTO t VALUES (1);",
        False,
    )


def test_trim_is_idempotent():
    _, once, _ = odbc_process("1", "DELETE", "DELETE FROM t;")
    _, twice, _ = odbc_process("1", "DELETE", once)
    assert once == twice == "DELETE FROM t"


@pytest.mark.parametrize(
    "message",
    ["Login failed for user", "Authentication FAILED", "password check failed"],
)
def test_password_errors(message):
    assert is_odbc_password_error(message) is True


@pytest.mark.parametrize("message", ["login timeout", "query failed", ""])
def test_not_password_errors(message):
    assert is_odbc_password_error(message) is False