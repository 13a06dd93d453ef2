"""
Timestamp handling for timestamp-keyed files.

Timestamp patterns may be written either as .NET-style custom format
strings (``yyyy-MM-dd HH:mm:ss.fff``), which is how most logger exports
document them, or directly as Python ``strptime`` formats (any pattern
containing ``%``). Both are compiled into a ``strptime`` format once and
cached.
"""

from __future__ import annotations

import datetime as dt
import re
from functools import lru_cache
from typing import Optional

from csvgrid.errors import ConfigurationError, TimestampParseError

# Longest tokens first so "yyyy" wins over "yy" and "MMMM" over "MM".
_TOKEN_MAP = {
    "yyyy": "%Y",
    "yy": "%y",
    "MMMM": "%B",
    "MMM": "%b",
    "MM": "%m",
    "M": "%m",
    "dddd": "%A",
    "ddd": "%a",
    "dd": "%d",
    "d": "%d",
    "HH": "%H",
    "H": "%H",
    "hh": "%I",
    "h": "%I",
    "mm": "%M",
    "m": "%M",
    "ss": "%S",
    "s": "%S",
    "tt": "%p",
    "zzz": "%z",
    "zz": "%z",
    "z": "%z",
    "K": "%z",
}

_TOKEN_RE = re.compile(
    r"""
      '(?P<squote>[^']*)'              # 'literal'
    | "(?P<dquote>[^"]*)"              # "literal"
    | \\(?P<escaped>.)                 # \x
    | (?P<fraction>[fF]{1,7})          # fractional seconds
    | (?P<token>yyyy|yy|MMMM|MMM|MM|M|dddd|ddd|dd|d|HH|H|hh|h|mm|m|ss|s|tt|zzz|zz|z|K)
    | (?P<literal>.)
    """,
    re.VERBOSE | re.DOTALL,
)


def _literal(text: str) -> str:
    return text.replace("%", "%%")


@lru_cache(maxsize=32)
def to_strptime_format(pattern: str) -> str:
    """
    Convert a timestamp pattern to a ``strptime`` format.

    Args:
        pattern: .NET-style custom pattern or a Python ``strptime`` format

    Returns:
        Python ``strptime`` format string

    Raises:
        ConfigurationError: If the pattern is empty

    Example:
        >>> to_strptime_format("yyyy-MM-dd HH:mm:ss")
        '%Y-%m-%d %H:%M:%S'
        >>> to_strptime_format("dd.MM.yyyy HH:mm:ss.fff")
        '%d.%m.%Y %H:%M:%S.%f'
        >>> to_strptime_format("%Y-%m-%dT%H:%M:%S")
        '%Y-%m-%dT%H:%M:%S'
    """
    if not pattern:
        raise ConfigurationError("A timestamp pattern is required in datetime mode.")

    if "%" in pattern:
        return pattern

    parts = []
    for m in _TOKEN_RE.finditer(pattern):
        kind = m.lastgroup
        if kind == "squote" or kind == "dquote" or kind == "escaped":
            parts.append(_literal(m.group(kind)))
        elif kind == "fraction":
            parts.append("%f")
        elif kind == "token":
            parts.append(_TOKEN_MAP[m.group(kind)])
        else:
            parts.append(_literal(m.group(kind)))
    return "".join(parts)


def ensure_utc(value: dt.datetime) -> dt.datetime:
    """Return ``value`` as an aware UTC datetime (naive values are taken as UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value.astimezone(dt.timezone.utc)


class TimestampParser:
    """
    Parses timestamp cells into absolute UTC instants.

    Args:
        pattern: Timestamp pattern (see ``to_strptime_format``)
        utc_offset: Zone offset assumed for timestamps without zone information
        timestamp_offset: Duration subtracted from every parsed timestamp

    Example:
        >>> parser = TimestampParser("yyyy-MM-dd HH:mm:ss", utc_offset=dt.timedelta(hours=1))
        >>> parser.parse("2020-01-01 01:00:05")
        datetime.datetime(2020, 1, 1, 0, 0, 5, tzinfo=datetime.timezone.utc)
    """

    def __init__(
        self,
        pattern: str,
        utc_offset: dt.timedelta = dt.timedelta(0),
        timestamp_offset: dt.timedelta = dt.timedelta(0),
    ):
        self.pattern = pattern
        self.format = to_strptime_format(pattern)
        self.zone = dt.timezone(utc_offset)
        self.timestamp_offset = timestamp_offset

    def parse(self, text: str, line_number: Optional[int] = None) -> dt.datetime:
        try:
            value = dt.datetime.strptime(text.strip(), self.format)
        except ValueError as e:
            raise TimestampParseError(text, self.pattern, line_number) from e

        value = value - self.timestamp_offset

        if value.tzinfo is None:
            value = value.replace(tzinfo=self.zone)

        return value.astimezone(dt.timezone.utc)


def slot_index(
    timestamp: dt.datetime,
    begin: dt.datetime,
    sample_period: dt.timedelta,
    file_offset: int = 0,
) -> int:
    """
    Grid slot of ``timestamp`` relative to a file's first requested slot.

    ``floor((timestamp - begin) / sample_period) - file_offset``

    Example:
        >>> origin = dt.datetime(2020, 1, 1, tzinfo=dt.timezone.utc)
        >>> slot_index(origin + dt.timedelta(seconds=5.5), origin, dt.timedelta(seconds=1))
        5
        >>> slot_index(origin - dt.timedelta(seconds=0.5), origin, dt.timedelta(seconds=1))
        -1
    """
    return (timestamp - begin) // sample_period - file_offset
