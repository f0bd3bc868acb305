"""Listing of the specially treated variables of the shell."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import IO

from dbshell.environ import COMMAND_NAME, getenv

_COMMAND_UPPER = COMMAND_NAME.upper()

_VAR_NAMES: tuple[tuple[str, str], ...] = (
    (
        "ECHO_HIDDEN",
        "if set, display internal queries executed by backslash commands; "
        'if set to "noexec", shows queries without execution',
    ),
    ("ON_ERROR_STOP", "stop batch execution after error"),
    ("PROMPT1", f"specifies the standard {COMMAND_NAME} prompt"),
    ("QUIET", "run quietly (same as -q option)"),
    ("ROW_COUNT", "number of rows returned or affected by last query, or 0"),
)

_PRINT_VAR_NAMES: tuple[tuple[str, str], ...] = (
    ("border", "border style (number)"),
    ("columns", "target width for the wrapped format"),
    ("csv_fieldsep", 'field separator for CSV output (default ",")'),
    ("expanded", "expanded output [on, off, auto]"),
    ("fieldsep", 'field separator for unaligned output (default "|")'),
    ("fieldsep_zero", "set field separator for unaligned output to a zero byte"),
    ("footer", "enable or disable display of the table footer [on, off]"),
    (
        "format",
        "set output format [unaligned, aligned, wrapped, vertical, html, asciidoc, csv, json, ...]",
    ),
    ("linestyle", "set the border line drawing style [ascii, old-ascii, unicode]"),
    ("null", "set the string to be printed in place of a null value"),
    (
        "numericlocale",
        "enable display of a locale-specific character to separate groups of digits",
    ),
    (
        "pager_min_lines",
        "minimum number of lines required in the output to use a pager, 0 to disable (default 0)",
    ),
    ("pager", "control when an external pager is used [on, off, always]"),
    ("recordsep", "record (line) separator for unaligned output"),
    ("recordsep_zero", "set record separator for unaligned output to a zero byte"),
    (
        "tableattr",
        "specify attributes for table tag in html format, or proportional column "
        "widths for left-aligned data types in latex-longtable format",
    ),
    ("time", "format used to display time/date column values (default RFC3339Nano)"),
    ("timezone", 'the timezone to display dates in (default "")'),
    ("title", "set the table title for subsequently printed tables"),
    ("tuples_only", "if set, only actual table data is shown"),
    ("unicode_border_linestyle", "set the style of Unicode line drawing [single, double]"),
    ("unicode_column_linestyle", "set the style of Unicode line drawing [single, double]"),
    ("unicode_header_linestyle", "set the style of Unicode line drawing [single, double]"),
)

_ENV_VAR_NAMES: tuple[tuple[str, str], ...] = (
    (
        f"{_COMMAND_UPPER}_EDITOR, EDITOR, VISUAL",
        r"editor used by the \e, \ef, and \ev commands",
    ),
    (
        f"{_COMMAND_UPPER}_EDITOR_LINENUMBER_ARG",
        "how to specify a line number when invoking the editor",
    ),
    (f"{_COMMAND_UPPER}_HISTORY", "alternative location for the command history file"),
    (f"{_COMMAND_UPPER}_PAGER, PAGER", "name of external pager program"),
    (
        f"{_COMMAND_UPPER}_SHOW_HOST_INFORMATION",
        "display host information when connecting to a database",
    ),
    (f"{_COMMAND_UPPER}RC", f"alternative location for the user's .{COMMAND_NAME}rc file"),
    (
        f"{_COMMAND_UPPER}_SSLMODE, SSLMODE",
        "when set to 'retry', allows connections to attempt to reconnect when no "
        "?sslmode= was specified on the url",
    ),
    ("SYNTAX_HL", "enable syntax highlighting"),
    ("SYNTAX_HL_FORMAT", "chroma library formatter name"),
    ("SYNTAX_HL_STYLE", 'chroma library style name (default "monokai")'),
    ("SYNTAX_HL_OVERRIDE_BG", "enables overriding the background color of the chroma styles"),
    ("TERM_GRAPHICS", "use the specified terminal graphics"),
    ("SHELL", r"shell used by the \! command"),
)

_TEMPLATE = r"""List of specially treated variables

{cmd} variables:
Usage:
  {cmd} --set=NAME=VALUE
  or \set NAME VALUE inside {cmd}

{vars}

Display settings:
Usage:
  {cmd} --pset=NAME[=VALUE]
  or \pset NAME [VALUE] inside {cmd}

{pvars}

Environment variables:
Usage:
  NAME=VALUE [NAME=VALUE] {cmd} ...
  or \setenv NAME [VALUE] inside {cmd}

{envvars}

Connection variables:
Usage:
  {cmd} --cset NAME[=DSN]
  or \cset NAME [DSN] inside {cmd}
  or \cset NAME DRIVER PARAMS... inside {cmd}
  or define in {config_dir}{config_extra}
"""


def _entry(name: str, desc: str) -> str:
    return f"  {name}\n    {desc}\n"


def _section(entries: tuple[tuple[str, str], ...]) -> str:
    return "".join(_entry(name, desc) for name, desc in entries).rstrip()


def _quoted(s: str) -> str:
    return '"' + s.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _user_config_dir() -> str | None:
    if sys.platform == "win32":
        return getenv("AppData") or None
    if sys.platform == "darwin":
        home = getenv("HOME")
        return os.path.join(home, "Library", "Application Support") if home else None
    xdg = getenv("XDG_CONFIG_HOME")
    if xdg:
        return xdg if os.path.isabs(xdg) else None
    home = getenv("HOME")
    return os.path.join(home, ".config") if home else None


def build_config_dir(config_name: str) -> tuple[str, str]:
    """Return the displayed config path and, when resolvable, the real one.

    The second value is empty when the user's config directory cannot be
    determined or does not exist.
    """
    if sys.platform == "darwin":
        base = "$HOME/Library/Application Support"
    elif sys.platform == "win32":
        base = f"%AppData%\\{COMMAND_NAME}"
    else:
        base = f"$HOME/.config/{COMMAND_NAME}"
    shown = os.path.join(base, config_name)
    config_dir = _user_config_dir()
    if config_dir is None:
        return shown, ""
    try:
        resolved = Path(config_dir).resolve(strict=True)
    except OSError:
        return shown, ""
    return shown, os.path.join(str(resolved), COMMAND_NAME, config_name)


def listing(out: IO[str]) -> None:
    """Write a listing of the specially treated variables to ``out``."""
    config_dir, config_extra = build_config_dir("config.yaml")
    config_desc = config_extra or config_dir
    env_entries = (
        (f"{_COMMAND_UPPER}_CONFIG", f"config file path (default {_quoted(config_desc)})"),
        *_ENV_VAR_NAMES,
    )
    out.write(
        _TEMPLATE.format(
            cmd=COMMAND_NAME,
            vars=_section(_VAR_NAMES),
            pvars=_section(_PRINT_VAR_NAMES),
            envvars=_section(env_entries),
            config_dir=config_dir,
            config_extra=f" ({config_extra})" if config_extra else "",
        )
    )