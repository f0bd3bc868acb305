"""Standard, print and connection variables of the shell."""

from __future__ import annotations

import locale
import re
import shutil
from collections.abc import Iterable
from typing import IO
from zoneinfo import ZoneInfo

from dbshell.environ import (
    COMMAND_NAME,
    InvalidValue,
    getenv,
    parse_bool,
    parse_keyword_bool,
    quote,
    valid_identifier,
)

_FORMAT_RE = re.compile(
    r"(unaligned|aligned|wrapped|html|asciidoc|latex|latex-longtable|troff-ms|csv|json|vertical)"
)
_LINESTYLE_RE = re.compile(r"(ascii|old-ascii|unicode)")
_BORDER_RE = re.compile(r"(single|double)")
_INT_RE = re.compile(r"[+-]?[0-9]+")

_INT_MIN, _INT_MAX = -(2**63), 2**63 - 1

# Well known time layout names, as strftime formats.
_TIME_CONSTS = {
    "ANSIC": "%a %b %d %H:%M:%S %Y",
    "UnixDate": "%a %b %d %H:%M:%S %Z %Y",
    "RubyDate": "%a %b %d %H:%M:%S %z %Y",
    "RFC822": "%d %b %y %H:%M %Z",
    "RFC822Z": "%d %b %y %H:%M %z",
    "RFC850": "%A, %d-%b-%y %H:%M:%S %Z",
    "RFC1123": "%a, %d %b %Y %H:%M:%S %Z",
    "RFC1123Z": "%a, %d %b %Y %H:%M:%S %z",
    "RFC3339": "%Y-%m-%dT%H:%M:%S%z",
    "RFC3339Nano": "%Y-%m-%dT%H:%M:%S.%f%z",
    "Kitchen": "%I:%M%p",
    "Stamp": "%b %d %H:%M:%S",
    "StampMilli": "%b %d %H:%M:%S.%f",
    "StampMicro": "%b %d %H:%M:%S.%f",
    "StampNano": "%b %d %H:%M:%S.%f",
}

_BOOL_PRINT = frozenset(
    {"fieldsep_zero", "footer", "numericlocale", "recordsep_zero", "tuples_only"}
)
_INT_PRINT = frozenset({"border", "columns", "pager_min_lines"})
_FREE_PRINT = frozenset(
    {"csv_fieldsep", "fieldsep", "null", "recordsep", "tableattr", "time", "title", "locale"}
)
_UNICODE_STYLES = frozenset(
    {"unicode_border_linestyle", "unicode_column_linestyle", "unicode_header_linestyle"}
)
_ASCII_ESCAPES = {7: "\\a", 8: "\\b", 12: "\\f", 10: "\\n", 13: "\\r", 9: "\\t", 11: "\\v"}


def _atoi(value: str) -> int:
    if not _INT_RE.fullmatch(value):
        return 0
    return max(_INT_MIN, min(_INT_MAX, int(value)))


def _quote_ascii(s: str) -> str:
    parts = []
    for c in s:
        code = ord(c)
        if c in "\"\\":
            parts.append("\\" + c)
        elif 0x20 <= code < 0x7F:
            parts.append(c)
        elif code in _ASCII_ESCAPES:
            parts.append(_ASCII_ESCAPES[code])
        elif code < 0x20 or code == 0x7F:
            parts.append(f"\\x{code:02x}")
        elif code < 0x10000:
            parts.append(f"\\u{code:04x}")
        else:
            parts.append(f"\\U{code:08x}")
    return '"' + "".join(parts) + '"'


def _valid_timezone(name: str) -> bool:
    if name in ("", "UTC", "Local"):
        return True
    try:
        ZoneInfo(name)
    except (ValueError, KeyError, OSError):
        return False
    return True


def _color_formatter() -> str:
    """Name of the highlighting formatter for the terminal's colour level."""
    colorterm = (getenv("COLORTERM") or "").lower()
    term = (getenv("TERM") or "").lower()
    if colorterm in ("truecolor", "24bit"):
        return "terminal16m"
    if "256color" in term:
        return "terminal256"
    if term and term != "dumb":
        return "terminal"
    return "noop"


def _system_locale() -> str:
    try:
        name = locale.getlocale()[0]
    except ValueError:
        name = None
    if not name or name in ("C", "POSIX"):
        return "en-US"
    return name.split(".")[0].replace("_", "-")


class Variables:
    """Holds the standard, print and connection variables."""

    def __init__(
        self,
        vars: dict[str, str] | None = None,
        prnt: dict[str, str] | None = None,
        conn: dict[str, list[str]] | None = None,
    ) -> None:
        self._vars: dict[str, str] = dict(vars or {})
        self._print: dict[str, str] = dict(prnt or {})
        self._conn: dict[str, list[str]] = {k: list(v) for k, v in (conn or {}).items()}

    @classmethod
    def defaults(cls) -> Variables:
        """Create variables with defaults taken from the environment."""
        upper = COMMAND_NAME.upper()
        show_host = getenv(f"{upper}_SHOW_HOST_INFORMATION") or "true"
        no_color_env = getenv("NO_COLOR")
        no_color = no_color_env is not None and no_color_env not in ("0", "false", "off")
        formatter = _color_formatter()
        syntax_hl = "false" if no_color or formatter == "noop" else "true"
        pager_cmd = getenv(f"{upper}_PAGER", "PAGER")
        if pager_cmd is None:
            pager_cmd = next((p for p in ("less", "more") if shutil.which(p)), "")
        pager = "on" if pager_cmd else "off"
        editor = getenv(f"{upper}_EDITOR", "EDITOR", "VISUAL") or ""
        sslmode = getenv(f"{upper}_SSLMODE", "SSLMODE")
        if sslmode is None:
            sslmode = "retry"
        return cls(
            vars={
                "SHOW_HOST_INFORMATION": show_host,
                "PAGER": pager_cmd,
                "EDITOR": editor,
                "QUIET": "off",
                "ON_ERROR_STOP": "off",
                "PROMPT1": "%S%N%m%/%R%# ",
                "SYNTAX_HL": syntax_hl,
                "SYNTAX_HL_FORMAT": formatter,
                "SYNTAX_HL_STYLE": "monokai",
                "SYNTAX_HL_OVERRIDE_BG": "true",
                "SSLMODE": sslmode,
                "TERM_GRAPHICS": "none",
            },
            prnt={
                "border": "1",
                "columns": "0",
                "csv_fieldsep": ",",
                "expanded": "off",
                "fieldsep": "|",
                "fieldsep_zero": "off",
                "footer": "on",
                "format": "aligned",
                "linestyle": "ascii",
                "locale": _system_locale(),
                "null": "",
                "numericlocale": "off",
                "pager_min_lines": "0",
                "pager": pager,
                "recordsep": "\n",
                "recordsep_zero": "off",
                "tableattr": "",
                "time": "RFC3339Nano",
                "timezone": "",
                "title": "",
                "tuples_only": "off",
                "unicode_border_linestyle": "single",
                "unicode_column_linestyle": "single",
                "unicode_header_linestyle": "single",
            },
        )

    def vars(self) -> dict[str, str]:
        """A copy of the standard variables."""
        return dict(self._vars)

    def print_vars(self) -> dict[str, str]:
        """A copy of the print variables."""
        return dict(self._print)

    def conn(self) -> dict[str, list[str]]:
        """A copy of the connection variables."""
        return {k: list(v) for k, v in self._conn.items()}

    def get(self, name: str) -> str | None:
        """The standard variable ``name``, or ``None`` when unset."""
        return self._vars.get(name)

    def set(self, name: str, value: str) -> None:
        """Set a standard variable."""
        valid_identifier(name)
        if name in ("ON_ERROR_STOP", "QUIET"):
            value = "on" if value == "" else parse_bool(value, name)
        self._vars[name] = value

    def unset(self, name: str) -> None:
        """Remove a standard variable."""
        valid_identifier(name)
        self._vars.pop(name, None)

    def dump(self, out: IO[str]) -> None:
        """Write the standard variables to ``out``, sorted by name."""
        for key in sorted(self._vars):
            print(key, "=", quote(self._vars[key]), file=out)

    def _check_print(self, name: str) -> None:
        if name not in self._print:
            raise KeyError(f"unknown option: {name}")

    def get_print(self, name: str) -> str:
        """The print variable ``name``; ``KeyError`` when unknown."""
        self._check_print(name)
        return self._print[name]

    def set_print(self, name: str, value: str) -> str:
        """Validate and set a print variable, returning its new value."""
        self._check_print(name)
        if name in _INT_PRINT:
            result = str(_atoi(value))
        elif name == "pager":
            try:
                result = parse_keyword_bool(value, name, "always")
            except InvalidValue as exc:
                raise InvalidValue(value, name, "on, off or always") from exc
        elif name == "expanded":
            try:
                result = parse_keyword_bool(value, name, "auto")
            except InvalidValue as exc:
                raise InvalidValue(value, name, "on, off or auto") from exc
        elif name in _BOOL_PRINT:
            result = parse_bool(value, name)
        elif name == "format":
            if not _FORMAT_RE.fullmatch(value):
                raise InvalidValue(value, name, "output format")
            result = value
        elif name == "linestyle":
            if not _LINESTYLE_RE.fullmatch(value):
                raise InvalidValue(value, name, "line style")
            result = value
        elif name in _FREE_PRINT:
            result = value
        elif name == "timezone":
            if not _valid_timezone(value):
                raise InvalidValue(value, name, "timezone location")
            result = value
        elif name in _UNICODE_STYLES:
            if not _BORDER_RE.fullmatch(value):
                raise InvalidValue(value, name, "single or double")
            result = value
        else:
            raise RuntimeError(f"field {name} has no handling for print variables")
        self._print[name] = result
        return result

    def _flip(self, name: str, on_states: Iterable[str]) -> None:
        current = self._print[name]
        if current in on_states:
            self._print[name] = "off"
        elif current == "off":
            self._print[name] = "on"
        else:
            raise RuntimeError(f"invalid state for field {name}")

    def toggle_print(self, name: str, extra: str = "") -> str:
        """Toggle a print variable, returning its new value."""
        self._check_print(name)
        if name == "pager":
            self._flip(name, ("on", "always"))
        elif name == "expanded":
            self._flip(name, ("on", "auto"))
        elif name in _BOOL_PRINT:
            self._flip(name, ("on",))
        elif name == "format":
            current = self._print[name]
            if extra and current != extra:
                self._print[name] = extra
            elif current == "aligned":
                self._print[name] = "unaligned"
            else:
                self._print[name] = "aligned"
        elif name in ("tableattr", "title"):
            self._print[name] = ""
        return self._print[name]

    def dump_print(self, out: IO[str]) -> None:
        """Write the print variables to ``out``, names padded to one width."""
        width = max((len(k) for k in self._print), default=0)
        for key in sorted(self._print):
            val = self._print[key]
            if key in ("csv_fieldsep", "fieldsep", "recordsep", "null"):
                val = _quote_ascii(val)
            elif key in ("tableattr", "title") and val:
                val = _quote_ascii(val)
            out.write(f"{key:<{width}} {val}\n")

    def print_time_format(self) -> str:
        """The ``time`` print variable as a strftime format."""
        tfmt = self._print.get("time", "")
        return _TIME_CONSTS.get(tfmt, tfmt)

    def set_conn(self, name: str, *vals: str) -> None:
        """Set a connection variable; no values, or an empty first value, removes it."""
        valid_identifier(name)
        if not vals or (vals[0] == "" and name in self._conn):
            self._conn.pop(name, None)
        else:
            self._conn[name] = list(vals)

    def get_conn(self, name: str) -> list[str] | None:
        """A copy of connection variable ``name``, or ``None`` when unset."""
        vals = self._conn.get(name)
        return None if vals is None else list(vals)

    def dump_conn(self, out: IO[str]) -> None:
        """Write the connection variables to ``out``, sorted by name."""
        for key in sorted(self._conn):
            print(key, "=", quote(" ".join(self._conn[key])), file=out)