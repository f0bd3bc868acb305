"""Helpers for the user's environment: files, shells, quoting and flags."""

from __future__ import annotations

import os
import re
import shutil
import string
import subprocess
import tempfile
import unicodedata
from collections.abc import Callable
from pathlib import Path
from typing import IO, Any

COMMAND_NAME = "dbshell"
_COMMAND_UPPER = COMMAND_NAME.upper()


class EnvError(Exception):
    """Base class for environment errors."""

    message = "environment error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)


class NoSuchFileOrDirectory(EnvError):
    message = "no such file or directory"


class CannotIncludeDirectories(EnvError):
    message = "cannot include directories"


class NoEditorDefined(EnvError):
    message = "no editor defined"


class NoShellAvailable(EnvError):
    message = "no shell available"


class UnterminatedQuotedString(EnvError):
    message = "unterminated quoted string"


class InvalidQuotedString(EnvError):
    message = "invalid quoted string"


class InvalidIdentifier(EnvError):
    message = "invalid identifier"


class InvalidValue(EnvError):
    """A value that cannot be accepted for a named setting."""

    def __init__(self, value: str, name: str, kind: str | None = None) -> None:
        self.value, self.name, self.kind = value, name, kind
        text = f'unrecognized value "{value}" for "{name}"'
        if kind:
            text += f": {kind} expected"
        super().__init__(text)


def getenv(*keys: str) -> str | None:
    """Return the value of the first of ``keys`` set in the environment."""
    for key in keys:
        if key in os.environ:
            return os.environ[key]
    return None


def expand_path(home: str, path: str) -> str:
    """Expand a leading ``~`` in ``path`` to ``home``."""
    if path == "~":
        return home
    if path.startswith("~/") or path.startswith("~" + os.sep):
        return os.path.join(home, path[2:])
    return path


def chdir(home: str, path: str = "") -> None:
    """Change directory to ``path``, or to ``home`` when ``path`` is empty."""
    os.chdir(expand_path(home, path) if path else home)


def open_file(home: str, path: str) -> tuple[str, IO[str]]:
    """Open ``path`` for reading, returning its resolved path and the file."""
    try:
        resolved = Path(expand_path(home, path)).resolve(strict=True)
    except FileNotFoundError as exc:
        raise NoSuchFileOrDirectory() from exc
    if resolved.is_dir():
        raise CannotIncludeDirectories()
    return str(resolved), open(resolved, encoding="utf-8")


def edit_file(
    home: str, path: str, line: str, buf: bytes | str, editor: str
) -> bytes:
    """Open ``path`` (or a temp file holding ``buf``) in an editor; return its contents."""
    ed = editor or shutil.which("vi")
    if not ed:
        raise NoEditorDefined()
    if path:
        path = expand_path(home, path)
    else:
        data = buf.encode("utf-8") if isinstance(buf, str) else bytes(buf)
        fd, path = tempfile.mkstemp(prefix=f"{COMMAND_NAME}.", suffix=".sql")
        with os.fdopen(fd, "wb") as f:
            f.write(data.removesuffix(b"\n") + b"\n")
    args = [ed, path]
    if line:
        line_arg = getenv(f"{_COMMAND_UPPER}_EDITOR_LINENUMBER_ARG")
        args.append((line_arg if line_arg is not None else "+") + line)
    subprocess.run(args, check=True)
    return Path(path).read_bytes().removesuffix(b"\n")


def _dotfile(home: str, env_name: str) -> str:
    path = getenv(env_name)
    if path is None:
        path = "~/." + env_name.lower()
    return expand_path(home, path)


def history_file(home: str) -> str:
    """Path of the history file, overridable through ``DBSHELL_HISTORY``."""
    return _dotfile(home, f"{_COMMAND_UPPER}_HISTORY")


def rc_file(home: str) -> str:
    """Path of the rc file, overridable through ``DBSHELLRC``."""
    return _dotfile(home, f"{_COMMAND_UPPER}RC")


def get_shell() -> tuple[str, str]:
    """Return the user's shell and the flag that makes it run a command."""
    windows = os.name == "nt"
    shell = getenv("SHELL")
    param = "-c"
    if shell is None and windows:
        shell = getenv("COMSPEC", "ComSpec")
        param = "/c"
    shell = shell or ""
    if not shell and windows:
        shell = shutil.which("cmd.exe") or ""
        if shell:
            param = "/c"
    if not shell:
        shell = shutil.which("sh") or ""
        if shell:
            param = "-c"
    return shell, param


def run_shell(s: str = "") -> None:
    """Run ``s`` in the user's shell, or start an interactive shell when empty."""
    shell, param = get_shell()
    if not shell:
        raise NoShellAvailable()
    s = s.strip()
    args = [shell, param, s] if s else [shell]
    subprocess.run(args)


def open_pipe(command: str, stdout: Any = None, stderr: Any = None) -> subprocess.Popen:
    """Start ``command`` in the shell; write to the returned process's stdin."""
    shell, param = get_shell()
    if not shell:
        raise NoShellAvailable()
    return subprocess.Popen(
        [shell, param, command], stdin=subprocess.PIPE, stdout=stdout, stderr=stderr
    )


def exec_shell(s: str) -> str:
    """Run ``s`` in the shell and return its combined output."""
    s = s.strip()
    if not s:
        return ""
    shell, param = get_shell()
    if not shell:
        raise NoShellAvailable()
    result = subprocess.run(
        [shell, param, s], stdout=subprocess.PIPE, stderr=subprocess.STDOUT, check=True
    )
    out = result.stdout.removesuffix(b"\n").removesuffix(b"\r")
    return out.decode("utf-8", errors="replace")


_CLEAN_DOUBLE_RE = re.compile(r"(^|[^\\])''")
_SIMPLE_ESCAPES = {"a": 7, "b": 8, "f": 12, "n": 10, "r": 13, "t": 9, "v": 11, "\\": 92}
_HEX_WIDTH = {"x": 2, "u": 4, "U": 8}


def _unescape(s: str, quote: str) -> str:
    out = bytearray()
    i, n = 0, len(s)
    while i < n:
        c = s[i]
        if c == quote and quote in "'\"":
            raise InvalidQuotedString()
        if c != "\\":
            out += c.encode("utf-8", "surrogateescape")
            i += 1
            continue
        if i + 1 >= n:
            raise InvalidQuotedString()
        e = s[i + 1]
        i += 2
        if e in _SIMPLE_ESCAPES:
            out.append(_SIMPLE_ESCAPES[e])
        elif e in _HEX_WIDTH:
            width = _HEX_WIDTH[e]
            digits = s[i : i + width]
            if len(digits) < width or any(d not in string.hexdigits for d in digits):
                raise InvalidQuotedString()
            value = int(digits, 16)
            i += width
            if e == "x":
                out.append(value)
            elif value > 0x10FFFF or 0xD800 <= value <= 0xDFFF:
                raise InvalidQuotedString()
            else:
                out += chr(value).encode("utf-8")
        elif e in string.octdigits:
            digits = s[i - 1 : i + 2]
            if len(digits) < 3 or any(d not in string.octdigits for d in digits):
                raise InvalidQuotedString()
            value = int(digits, 8)
            if value > 255:
                raise InvalidQuotedString()
            out.append(value)
            i += 2
        elif e in "'\"":
            if e != quote:
                raise InvalidQuotedString()
            out += e.encode()
        else:
            raise InvalidQuotedString()
    return out.decode("utf-8", "surrogateescape")


def unquote(s: str) -> str:
    """Remove surrounding quotes from ``s`` and process its escapes."""
    if not s:
        return ""
    if len(s) < 2 or s[-1] != s[0] or s[0] not in "'\"`":
        raise UnterminatedQuotedString()
    quote, body = s[0], s[1:-1]
    if quote == "'":
        body = _CLEAN_DOUBLE_RE.sub(r"\1\\'", body)
    return _unescape(body, quote)


def untick(variables: Any, execute: bool) -> Callable[[str, bool], tuple[str, bool]]:
    """Return a function that resolves variables and quoted or backticked strings.

    Backticked strings are run through the shell when ``execute`` is true.
    """

    def resolve(s: str, isvar: bool) -> tuple[str, bool]:
        if isvar:
            value = variables.get(s)
            return ("", False) if value is None else (value, True)
        if len(s) < 2:
            raise InvalidQuotedString()
        c = s[0]
        z = unquote(s)
        if c in "'\"":
            return z, True
        if c != "`":
            raise InvalidQuotedString()
        if not execute:
            return z, True
        return exec_shell(z), True

    return resolve


_CONTROL_ESCAPES = {7: "\\a", 8: "\\b", 12: "\\f", 10: "\\n", 13: "\\r", 9: "\\t", 11: "\\v"}


def _is_graphic(c: str) -> bool:
    category = unicodedata.category(c)
    return category[0] in "LMNPS" or category == "Zs"


def quote(s: str) -> str:
    """Quote ``s`` in single quotes, escaping non-printable characters."""
    parts = []
    for c in s:
        code = ord(c)
        if c in "\"\\":
            parts.append("\\" + c)
        elif _is_graphic(c):
            parts.append(c)
        elif code in _CONTROL_ESCAPES:
            parts.append(_CONTROL_ESCAPES[code])
        elif code < 0x20 or code == 0x7F:
            parts.append(f"\\x{code:02x}")
        elif code < 0x10000:
            parts.append(f"\\u{code:04x}")
        else:
            parts.append(f"\\U{code:08x}")
    return "'" + "".join(parts) + "'"


def valid_identifier(name: str) -> None:
    """Raise ``InvalidIdentifier`` unless ``name`` is letters, digits and underscores."""
    if not name:
        raise InvalidIdentifier()
    for c in name:
        if c != "_" and unicodedata.category(c)[0] not in "LN":
            raise InvalidIdentifier()


_TRUE = frozenset({"1", "t", "tr", "tru", "true", "on"})
_FALSE = frozenset({"0", "f", "fa", "fal", "fals", "false", "of", "off"})


def _bool_word(value: str) -> str | None:
    lowered = value.lower()
    if lowered in _TRUE:
        return "on"
    if lowered in _FALSE:
        return "off"
    return None


def parse_bool(value: str, name: str) -> str:
    """Normalise a boolean setting to ``"on"`` or ``"off"``."""
    result = _bool_word(value)
    if result is None:
        raise InvalidValue(value, name, "Boolean")
    return result


def parse_keyword_bool(value: str, name: str, *keywords: str) -> str:
    """Like :func:`parse_bool`, but also accept any of ``keywords``."""
    result = _bool_word(value)
    if result is not None:
        return result
    lowered = value.lower()
    if lowered in keywords:
        return lowered
    raise InvalidValue(value, name)