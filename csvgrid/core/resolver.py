"""
Header / unit / group resolution.

Turns the header row (and an optional separate unit row) of a file into
resource descriptors: each column is either dropped (skip pattern matched
or no valid id could be derived) or mapped to a canonical resource id
with an optional unit and group.

Header and unit rows are split on the plain separator; they are assumed
to be free of quoted separators.
"""

from __future__ import annotations

import logging
import re
from typing import Iterator, List, Optional, Sequence, Tuple

from csvgrid.core.identifiers import enforce_naming_convention
from csvgrid.errors import FileIncompleteError
from csvgrid.models.requests import ResourceDescriptor
from csvgrid.models.settings import FileSourceSettings, ReplaceNameRule

logger = logging.getLogger(__name__)


def strip_terminator(raw: str) -> str:
    """Remove the line terminator (``\\n``, ``\\r\\n`` or ``\\r``) from a raw line."""
    return raw.rstrip("\r\n")


# ----------------------------- Row location -----------------------------

def rows_before_data(settings: FileSourceSettings) -> int:
    """Number of lines preceding the first data row."""
    if not settings.has_header:
        return settings.effective_data_row - 1
    return max(settings.header_row, settings.effective_unit_row, settings.effective_data_row) - 1


def read_header_lines(
    lines: Iterator[str],
    settings: FileSourceSettings,
) -> Tuple[Optional[str], Optional[str]]:
    """
    Consume the lines preceding the data row and capture header and unit rows.

    After this call ``lines`` is positioned at the first data row.

    Args:
        lines: Iterator over raw text lines (e.g. an open text file)
        settings: File source settings

    Returns:
        ``(header_line, unit_line)``. ``header_line`` is None when the file
        has no header; ``unit_line`` is None unless a distinct unit row is
        configured.

    Raises:
        FileIncompleteError: If the stream ends before the data row

    Example:
        >>> settings = FileSourceSettings(sample_period=1, header_row=2, unit_row=3)
        >>> read_header_lines(iter(["# title\\n", "a,b\\n", "m,s\\n", "1,2\\n"]), settings)
        ('a,b', 'm,s')
    """
    header_index = settings.header_row - 1 if settings.has_header else -1
    unit_index = settings.effective_unit_row - 1 if settings.has_distinct_unit_row else -1
    count = rows_before_data(settings)

    header_line: Optional[str] = None
    unit_line: Optional[str] = None

    for i in range(count):
        raw = next(lines, None)

        if raw is None:
            raise FileIncompleteError(
                f"The file is incomplete: expected {count} lines before the data row, found {i}."
            )

        if i == header_index:
            header_line = strip_terminator(raw)
        if i == unit_index:
            unit_line = strip_terminator(raw)

    return header_line, unit_line


# ----------------------------- Column resolution -----------------------------

def format_resource_id(name: str, rules: Sequence[ReplaceNameRule]) -> str:
    """Apply every rewrite rule, in order, to a column name."""
    for rule in rules:
        name = rule.apply(name)
    return name


def _capture(pattern: Optional[str], text: Optional[str]) -> Optional[str]:
    if pattern is None or text is None:
        return None
    m = re.search(pattern, text)
    if not m:
        return None
    return m.group(1) if m.re.groups >= 1 else None


def resolve(
    header_line: str,
    unit_line: Optional[str],
    settings: FileSourceSettings,
) -> List[Optional[ResourceDescriptor]]:
    """
    Resolve the columns of a header line into resource descriptors.

    Args:
        header_line: Header row without line terminator
        unit_line: Distinct unit row, or None when units come from the header
        settings: File source settings (patterns and rewrite rules)

    Returns:
        One entry per header column, in column order; None marks a dropped
        column (skip pattern matched or id invalid)

    Example:
        >>> settings = FileSourceSettings(
        ...     sample_period=1,
        ...     unit_pattern=r"\\((.*)\\)",
        ...     replace_name_rules=[{"pattern": r"\\s*\\(.*\\)", "replacement": ""}],
        ... )
        >>> resolve("Foo (m/s),time", None, settings)[0]
        ResourceDescriptor(original_name='Foo (m/s)', resource_id='Foo', unit='m/s', group=None)
    """
    sep = settings.separator
    columns = header_line.split(sep)
    unit_cells = unit_line.split(sep) if unit_line is not None else None

    descriptors: List[Optional[ResourceDescriptor]] = []

    for i, original_name in enumerate(columns):
        # skip columns
        if settings.skip_column_pattern is not None and re.search(settings.skip_column_pattern, original_name):
            descriptors.append(None)
            continue

        # unit
        if unit_cells is not None:
            unit_source = unit_cells[i] if i < len(unit_cells) else None
        else:
            unit_source = original_name

        if settings.unit_pattern is not None:
            unit = _capture(settings.unit_pattern, unit_source)
        elif unit_cells is not None:
            unit = unit_source or None
        else:
            unit = None

        # group
        group = _capture(settings.group_pattern, original_name)

        # id
        resource_id = enforce_naming_convention(
            format_resource_id(original_name, settings.replace_name_rules)
        )

        if resource_id is None:
            logger.debug(f"Dropping column {original_name!r}: no valid resource id")
            descriptors.append(None)
            continue

        descriptors.append(ResourceDescriptor(original_name, resource_id, unit, group))

    return descriptors


def read_resource_descriptors(
    lines: Iterator[str],
    settings: FileSourceSettings,
) -> List[Optional[ResourceDescriptor]]:
    """Locate the header (and unit) rows of a stream and resolve its columns."""
    if not settings.has_header:
        return []

    header_line, unit_line = read_header_lines(lines, settings)
    return resolve(header_line, unit_line, settings)


def find_column_index(header_line: str, original_name: str, separator: str) -> int:
    """Index of the header cell equal to ``original_name``, or -1."""
    try:
        return header_line.split(separator).index(original_name)
    except ValueError:
        return -1
