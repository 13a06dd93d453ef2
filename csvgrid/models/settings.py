"""
Pydantic models for file source configuration.

One ``FileSourceSettings`` record describes how every file of a file
source is decoded: separators, header/unit/data rows, column renaming
rules and, optionally, timestamp-keyed alignment. Records are immutable
and validated on construction, so configuration errors surface before a
single file is opened.

Keys may be given in snake_case or camelCase (``headerRow``,
``samplePeriod``, ``replaceNameRules``), matching the JSON written by the
data source host.
"""

from __future__ import annotations

import re
from datetime import timedelta
from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from csvgrid.encodings import resolve_encoding
from csvgrid.errors import ConfigurationError


def _check_pattern(pattern: Optional[str]) -> Optional[str]:
    if pattern is None:
        return pattern
    try:
        re.compile(pattern)
    except re.error as e:
        raise ValueError(f"invalid regular expression {pattern!r}: {e}") from e
    return pattern


class _SettingsModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )


# ══════════════════════════════════════════════════════════════════════
# Rename rules and datetime mode
# ══════════════════════════════════════════════════════════════════════

_DOTNET_GROUP_REF = re.compile(r"\$(?:(\d+)|\{(\w+)\}|(\$))")


def _translate_group_ref(m: "re.Match[str]") -> str:
    if m.group(3) is not None:
        return "$"
    return rf"\g<{m.group(1) or m.group(2)}>"


class ReplaceNameRule(_SettingsModel):
    """
    Regex rewrite applied to an original column name.

    ``replacement`` uses ``re.sub`` syntax (``\\1``, ``\\g<name>``).
    ``$1`` and ``${name}`` references are accepted as well and translated;
    ``$$`` stands for a literal ``$``.

    Example:
        >>> rule = ReplaceNameRule(pattern="Foo", replacement="ThisIsTheFooVariable")
        >>> rule.apply("Foo (m/s)")
        'ThisIsTheFooVariable (m/s)'
    """

    pattern: str
    replacement: str = ""

    @field_validator("pattern")
    @classmethod
    def validate_pattern(cls, v: str) -> str:
        return _check_pattern(v)

    @model_validator(mode="after")
    def validate_replacement(self):
        # group references and escapes are only checked when the template is compiled
        try:
            re.compile(self.pattern).sub(self.python_replacement, "")
        except (re.error, IndexError) as e:
            raise ValueError(f"invalid replacement {self.replacement!r}: {e}") from e
        return self

    @property
    def python_replacement(self) -> str:
        return _DOTNET_GROUP_REF.sub(_translate_group_ref, self.replacement)

    def apply(self, name: str) -> str:
        return re.sub(self.pattern, self.python_replacement, name)


class DateTimeModeOptions(_SettingsModel):
    """
    Timestamp-keyed alignment options.

    Attributes:
        timestamp_column: 1-based column holding the timestamp
        timestamp_pattern: Timestamp pattern (``yyyy-MM-dd HH:mm:ss`` or a strptime format)
        timestamp_offset: Duration subtracted from each parsed timestamp
    """

    timestamp_column: int = Field(..., ge=1)
    timestamp_pattern: str = Field(..., min_length=1)
    timestamp_offset: timedelta = timedelta(0)


# ══════════════════════════════════════════════════════════════════════
# File source settings
# ══════════════════════════════════════════════════════════════════════

class FileSourceSettings(_SettingsModel):
    """
    Decoding settings shared by all files of one file source.

    Row numbers are 1-based. ``header_row=-1`` disables header resolution;
    column indices then come from an external index lookup.

    Example:
        >>> settings = FileSourceSettings(
        ...     separator=";",
        ...     sample_period=timedelta(seconds=1),
        ...     replace_name_rules=[ReplaceNameRule(pattern="Foo", replacement="Bar")],
        ... )
        >>> settings.effective_data_row
        2
    """

    separator: str = Field(default=",", min_length=1, max_length=1)
    decimal_separator: str = Field(default=".", min_length=1, max_length=1)
    invalid_value: Optional[str] = None
    code_page: Union[int, str] = 65001

    header_row: int = 1
    unit_row: Optional[int] = Field(default=None, ge=1)
    data_row: Optional[int] = Field(default=None, ge=1)

    sample_period: timedelta
    utc_offset: timedelta = timedelta(0)

    skip_column_pattern: Optional[str] = None
    unit_pattern: Optional[str] = None
    group_pattern: Optional[str] = None
    default_group: Optional[str] = None
    replace_name_rules: List[ReplaceNameRule] = Field(default_factory=list)

    catalog_source_files: Optional[List[str]] = None
    datetime_mode: Optional[DateTimeModeOptions] = None

    @field_validator("skip_column_pattern", "unit_pattern", "group_pattern")
    @classmethod
    def validate_patterns(cls, v: Optional[str]) -> Optional[str]:
        return _check_pattern(v)

    @field_validator("header_row")
    @classmethod
    def validate_header_row(cls, v: int) -> int:
        if v == 0 or v < -1:
            raise ValueError("header_row must be -1 (no header) or a 1-based row number")
        return v

    @field_validator("code_page")
    @classmethod
    def validate_code_page(cls, v: Union[int, str]) -> Union[int, str]:
        try:
            resolve_encoding(v)
        except ConfigurationError as e:
            raise ValueError(str(e)) from e
        return v

    @field_validator("sample_period")
    @classmethod
    def validate_sample_period(cls, v: timedelta) -> timedelta:
        if v <= timedelta(0):
            raise ValueError("sample_period must be positive")
        return v

    @model_validator(mode="after")
    def validate_rows(self):
        if not self.has_header and self.unit_row is not None:
            raise ValueError("unit_row requires a header row")
        if self.data_row is not None and self.has_header:
            if self.data_row <= max(self.header_row, self.effective_unit_row):
                raise ValueError("data_row must come after the header and unit rows")
        return self

    # Derived values

    @property
    def has_header(self) -> bool:
        return self.header_row != -1

    @property
    def effective_unit_row(self) -> int:
        return self.unit_row if self.unit_row is not None else self.header_row

    @property
    def has_distinct_unit_row(self) -> bool:
        return self.has_header and self.effective_unit_row != self.header_row

    @property
    def effective_data_row(self) -> int:
        if self.data_row is not None:
            return self.data_row
        if not self.has_header:
            return 1
        return max(self.header_row, self.effective_unit_row) + 1

    @property
    def encoding(self) -> str:
        return resolve_encoding(self.code_page)


# ══════════════════════════════════════════════════════════════════════
# Catalog configuration
# ══════════════════════════════════════════════════════════════════════

class FileSource(_SettingsModel):
    """
    One named file source of a catalog.

    ``path_segments`` and ``file_template`` describe where files live; they
    are only interpreted by the file discovery collaborator. A file source
    without ``settings`` contributes nothing to the catalog.
    """

    settings: Optional[FileSourceSettings] = Field(default=None, alias="additionalProperties")
    path_segments: List[str] = Field(default_factory=list)
    file_template: Optional[str] = None

    def resolve_source_files(self, root: Path) -> Optional[List[Path]]:
        """Explicit sample files relative to ``root`` (None if not configured)."""
        if self.settings is None or self.settings.catalog_source_files is None:
            return None
        return [root / p for p in self.settings.catalog_source_files if p is not None]


class CatalogDescription(_SettingsModel):
    """Title and file sources of one catalog."""

    title: str = ""
    file_sources: Dict[str, FileSource] = Field(default_factory=dict)
