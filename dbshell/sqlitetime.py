"""Parsing of the timestamp text that SQLite databases store."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

# Matches every layout SQLite writes for timestamps. These are tried as one
# pattern: date, then optional time (with optional seconds, fraction and
# offset).
_TIME_RE = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})"
    r"(?:[ T](\d{2}):(\d{2})"
    r"(?::(\d{2})(?:\.(\d+))?([+-])?(\d{2}:\d{2})?)?"
    r")?"
)


def _offset(sign: str | None, value: str | None) -> timezone:
    if sign is None and value is None:
        return timezone.utc
    if sign is None or value is None:
        raise ValueError("could not parse time")
    hours, minutes = (int(part) for part in value.split(":"))
    if hours >= 24 or minutes >= 60:
        raise ValueError("could not parse time")
    delta = timedelta(hours=hours, minutes=minutes)
    return timezone(-delta if sign == "-" else delta)


def parse_sqlite_time(s: str | bytes | datetime) -> datetime | None:
    """Parse a SQLite timestamp.

    Returns ``None`` for an empty string and raises ``ValueError`` when the
    value matches none of the known layouts. Values without an offset are UTC.
    """
    if isinstance(s, datetime):
        return s
    if isinstance(s, (bytes, bytearray)):
        s = bytes(s).decode("utf-8", errors="replace")
    if not isinstance(s, str):
        raise TypeError(f"cannot convert type {type(s).__name__} to time")
    if s == "":
        return None
    match = _TIME_RE.fullmatch(s)
    if match is None:
        raise ValueError("could not parse time")
    year, month, day, hour, minute, second, frac, sign, offset = match.groups()
    micro = int(frac[:6].ljust(6, "0")) if frac else 0
    try:
        return datetime(
            int(year),
            int(month),
            int(day),
            int(hour or 0),
            int(minute or 0),
            int(second or 0),
            micro,
            tzinfo=_offset(sign, offset),
        )
    except ValueError as exc:
        raise ValueError("could not parse time") from exc


def convert_bytes(buf: bytes | str, tfmt: str) -> str:
    """Render ``buf`` with the strftime format ``tfmt`` when it holds a timestamp.

    Any other value is returned unchanged as text.
    """
    s = buf if isinstance(buf, str) else bytes(buf).decode("utf-8", errors="replace")
    if s.strip():
        try:
            parsed = parse_sqlite_time(s)
        except ValueError:
            return s
        if parsed is not None:
            return parsed.strftime(tfmt)
    return s