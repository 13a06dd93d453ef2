"""
Row decoder: turns one cell into a float.

Decoding never fails. Cells that match the configured invalid-value token
or that are not plain decimal numbers decode to NaN, which is a per-sample
data quality condition rather than a structural error.
"""

from __future__ import annotations

import math
import re
from functools import lru_cache
from typing import Optional, Pattern

from .tokenizer import QUOTE


_INFINITY_RE = re.compile(r"^\s*([-+]?)Infinity\s*$", re.IGNORECASE)


@lru_cache(maxsize=16)
def _number_re(decimal_separator: str) -> Pattern[str]:
    sep = re.escape(decimal_separator)
    return re.compile(
        rf"^\s*([-+]?)(\d+(?:{sep}\d*)?|{sep}\d+)(?:[eE]([-+]?\d+))?\s*$"
    )


def parse_float(text: str, decimal_separator: str = ".") -> Optional[float]:
    """
    Locale-independent float parsing with a configurable decimal separator.

    Accepts an optional sign, digits with an optional fraction and an
    optional exponent, surrounded by optional whitespace. Thousands
    separators, underscores and words like ``inf`` or ``nan`` are rejected;
    the invariant infinity symbols ``Infinity`` and ``-Infinity`` are
    accepted.

    Args:
        text: Cell text
        decimal_separator: Fractional separator (e.g. "." or ",")

    Returns:
        Parsed value, or None if ``text`` is not a number

    Example:
        >>> parse_float("-10,34e-3", ",")
        -0.01034
        >>> parse_float("1.5", ",") is None
        True
        >>> parse_float("-Infinity")
        -inf
    """
    m = _number_re(decimal_separator).match(text)
    if not m:
        inf = _INFINITY_RE.match(text)
        if inf:
            return -math.inf if inf.group(1) == "-" else math.inf
        return None
    sign, mantissa, exponent = m.groups()
    if decimal_separator != ".":
        mantissa = mantissa.replace(decimal_separator, ".")
    literal = f"{sign}{mantissa}"
    if exponent is not None:
        literal += f"e{exponent}"
    return float(literal)


def decode_cell(cell_text: str, invalid_token: Optional[str], decimal_separator: str = ".") -> float:
    """
    Decode one cell to a float.

    Args:
        cell_text: Raw cell text as returned by the tokenizer
        invalid_token: Cells equal to this string (ordinal comparison) decode to NaN
        decimal_separator: Fractional separator

    Returns:
        The decoded value or NaN

    Example:
        >>> decode_cell("2e9", None)
        2000000000.0
        >>> math.isnan(decode_cell("-999", "-999"))
        True
        >>> math.isnan(decode_cell('"4.5"', None))
        True
    """
    if invalid_token is not None and cell_text == invalid_token:
        return math.nan

    value = parse_float(cell_text, decimal_separator)
    return math.nan if value is None else value


def unquote_cell(cell_text: str) -> str:
    """
    Remove enclosing quotes from a raw cell and unescape doubled quotes.

    Example:
        >>> unquote_cell('"ab,""cd,e""f"')
        'ab,"cd,e"f'
        >>> unquote_cell("plain")
        'plain'
    """
    if len(cell_text) >= 2 and cell_text.startswith(QUOTE) and cell_text.endswith(QUOTE):
        return cell_text[1:-1].replace(QUOTE * 2, QUOTE)
    return cell_text
