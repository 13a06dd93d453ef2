"""
Resource identifier grammar.

A resource id starts with a letter or underscore and continues with
letters, digits or underscores. Column names are turned into ids by
stripping every invalid character and then every invalid leading
character; whatever remains must match the grammar.
"""

from __future__ import annotations

import re
from typing import Optional

VALID_ID_RE = re.compile(r"^[a-zA-Z_][a-zA-Z_0-9]*$")
INVALID_ID_CHARS_RE = re.compile(r"[^a-zA-Z_0-9]")
INVALID_ID_START_CHARS_RE = re.compile(r"^[^a-zA-Z_]+")


def is_valid_id(resource_id: str) -> bool:
    """Return True if ``resource_id`` satisfies the identifier grammar."""
    return VALID_ID_RE.match(resource_id) is not None


def enforce_naming_convention(resource_id: str) -> Optional[str]:
    """
    Strip invalid characters from a candidate id.

    Args:
        resource_id: Candidate id (typically a rewritten column name)

    Returns:
        The cleaned id, or None if nothing valid remains

    Example:
        >>> enforce_naming_convention("Wind speed (m/s)")
        'Windspeedms'
        >>> enforce_naming_convention("1st_value")
        'st_value'
        >>> enforce_naming_convention("°%") is None
        True
    """
    cleaned = INVALID_ID_CHARS_RE.sub("", resource_id)
    cleaned = INVALID_ID_START_CHARS_RE.sub("", cleaned)
    return cleaned if is_valid_id(cleaned) else None
