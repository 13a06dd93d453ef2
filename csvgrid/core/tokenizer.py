"""
Quote-aware cell tokenizer.

Extracts the Nth field of a delimited text line without splitting the
whole line. Fields may be wrapped in double quotes, in which case the
separator loses its meaning inside the quotes and two consecutive quotes
stand for one literal quote (RFC 4180).

The tokenizer only reports field *bounds*. Quote delimiters are part of
the returned slice; unquoting is left to the caller (see
``csvgrid.core.decoder.unquote_cell``).
"""

from __future__ import annotations

from typing import Optional, Tuple

QUOTE = '"'

CellBounds = Tuple[int, int]


def _quoted_field_end(line: str, start: int) -> int:
    """
    Return the index just past the closing quote of the field at ``start``.

    ``line[start]`` must be a quote. Returns -1 if the quote is never closed.
    """
    pos = start + 1

    while True:
        closing = line.find(QUOTE, pos)

        if closing == -1:
            return -1

        # "" inside a quoted field is an escaped quote
        if line.startswith(QUOTE, closing + 1):
            pos = closing + 2
            continue

        return closing + 1


def locate_cell(line: str, column_index: int, separator: str) -> Optional[CellBounds]:
    """
    Locate one field of a delimited line.

    Args:
        line: Text line without its line terminator
        column_index: Zero-based index of the wanted field
        separator: Single separator character

    Returns:
        ``(start, stop)`` such that ``line[start:stop]`` is the raw field
        (including enclosing quotes), or None if the line has fewer fields
        than ``column_index + 1`` or its quoting is malformed

    Example:
        >>> line = '"ab,""cd,e""f",1.20'
        >>> locate_cell(line, 1, ",")
        (15, 19)
        >>> locate_cell(line, 2, ",") is None
        True
    """
    if column_index < 0:
        return None

    length = len(line)
    pos = 0
    current = 0

    while True:
        start = pos

        if line.startswith(QUOTE, pos):
            stop = _quoted_field_end(line, pos)

            if stop == -1:
                return None

            # a closing quote must be followed by the separator or the end of line
            if stop < length and line[stop] != separator:
                return None

        else:
            stop = line.find(separator, pos)

            if stop == -1:
                stop = length

        if current == column_index:
            return start, stop

        if stop >= length:
            return None

        pos = stop + 1
        current += 1


def get_cell(line: str, column_index: int, separator: str) -> Optional[str]:
    """Return the raw text of one field, or None if it cannot be located."""
    bounds = locate_cell(line, column_index, separator)

    if bounds is None:
        return None

    start, stop = bounds
    return line[start:stop]
