"""
Exception hierarchy for the CSV decoding engine.

Only structural and configuration problems are raised. Per-cell data
quality problems (garbage numbers, invalid-value tokens) decode to NaN and
incomplete files are reported through the status buffers instead.
"""

from __future__ import annotations


class CsvGridError(Exception):
    """Base class for all csvgrid errors."""


class ConfigurationError(CsvGridError):
    """Settings are invalid or missing (bad regex, missing timestamp pattern, ...)."""


class FileIncompleteError(CsvGridError):
    """The stream ended before the header, unit or data row was reached."""


class TimestampParseError(CsvGridError):
    """A timestamp cell could not be parsed with the configured pattern."""

    def __init__(self, text: str, pattern: str, line_number: int | None = None):
        self.text = text
        self.pattern = pattern
        self.line_number = line_number
        where = f" (line {line_number})" if line_number is not None else ""
        super().__init__(f"Unable to parse timestamp '{text}' with pattern '{pattern}'{where}")
